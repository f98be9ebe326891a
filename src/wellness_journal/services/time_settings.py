"""Identity-scoped store for per-period unlock times."""

import logging
import threading
from typing import Callable, Optional

from ..errors import NOT_AUTHENTICATED
from ..models.identity import Identity
from ..models.results import OperationResult
from ..models.state import TimeSettingsState
from ..models.time_settings import TimeSettings
from ..providers.base import (
    SETTINGS_COLLECTION,
    TIME_SETTINGS_DOCUMENT,
    CollectionProvider,
    IdentitySignal,
    Unsubscribe,
)
from .queries import current_identity

logger = logging.getLogger(__name__)

_UNSET = object()


class TimeSettingsStore:
    """
    Loads the signed-in user's unlock times once per identity.

    Simpler than the journal store: no live subscription, just a read on
    every identity change. A load that finishes after the identity has
    moved on is discarded.
    """

    def __init__(
        self,
        identity: IdentitySignal,
        provider: CollectionProvider,
        defaults: Optional[TimeSettings] = None,
    ):
        self.identity = identity
        self.provider = provider
        self.defaults = defaults or TimeSettings()

        self._lock = threading.RLock()
        self._state = self._initial_state()
        self._listeners: list[Callable[[TimeSettingsState], None]] = []
        self._identity_unsub: Optional[Unsubscribe] = None
        self._started = False
        self._current: object = _UNSET
        self._generation = 0

    def _initial_state(self) -> TimeSettingsState:
        return TimeSettingsState(settings=self.defaults)

    @property
    def snapshot(self) -> TimeSettingsState:
        return self._state

    @property
    def settings(self) -> TimeSettings:
        return self._state.settings

    def subscribe(self, listener: Callable[[TimeSettingsState], None]) -> Unsubscribe:
        """Watch state changes; called at once with the current state."""
        with self._lock:
            self._listeners.append(listener)
            state = self._state
        listener(state)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: TimeSettingsState) -> None:
        with self._lock:
            self._state = state
            listeners = list(self._listeners)
        for listener in listeners:
            listener(state)

    def _update_state(self, **changes) -> None:
        with self._lock:
            state = self._state.model_copy(update=changes)
        self._set_state(state)

    def init(self) -> None:
        """Start following the identity signal. Idempotent."""
        with self._lock:
            if self._started:
                return
            self._started = True
        self._identity_unsub = self.identity.subscribe(self._on_identity)

    def destroy(self) -> None:
        """Stop following identity and reset to defaults."""
        with self._lock:
            if self._identity_unsub is not None:
                self._identity_unsub()
                self._identity_unsub = None
            self._started = False
            self._current = _UNSET
            self._generation += 1
        self._set_state(self._initial_state())

    def _on_identity(self, identity: Optional[Identity], still_loading: bool) -> None:
        with self._lock:
            if not self._started:
                return
            if still_loading and self._current is _UNSET:
                return
            uid = identity.uid if identity is not None else None
            current_uid = self._current.uid if isinstance(self._current, Identity) else None
            if self._current is not _UNSET and uid == current_uid:
                return

            self._current = identity
            self._generation += 1
            if identity is None:
                self._update_state(
                    settings=self.defaults,
                    is_loading=False,
                    is_initialized=True,
                    error="",
                    saving=False,
                )
                return

            self._load(identity.uid, self._generation)

    def _load(self, uid: str, generation: int) -> None:
        self._update_state(is_loading=True, error="")
        try:
            document = self.provider.get_document(uid, SETTINGS_COLLECTION, TIME_SETTINGS_DOCUMENT)
            settings = TimeSettings.from_document(document, self.defaults)
        except Exception as e:
            logger.error("Error loading time settings: %s", e)
            if generation == self._generation:
                self._update_state(error=str(e), is_loading=False, is_initialized=True)
            return

        if generation != self._generation:
            logger.debug("Dropped stale time settings load for %s", uid)
            return
        self._update_state(settings=settings, is_loading=False, is_initialized=True)

    def save(self, settings: TimeSettings) -> OperationResult:
        """Merge new unlock times into the user's settings document."""
        user = current_identity(self.identity)
        if user is None:
            self._update_state(error=NOT_AUTHENTICATED)
            return OperationResult.failed(NOT_AUTHENTICATED)

        self._update_state(saving=True, error="")
        try:
            self.provider.set_document(
                user.uid,
                SETTINGS_COLLECTION,
                TIME_SETTINGS_DOCUMENT,
                settings.to_document(),
                merge=True,
            )
        except Exception as e:
            logger.error("Error saving time settings: %s", e)
            self._update_state(error=str(e), saving=False)
            return OperationResult.failed(str(e))

        self._update_state(settings=settings, saving=False)
        return OperationResult.ok()
