"""Identity-scoped live mirror of the user's journal entries."""

import logging
import threading
from typing import Callable, Optional

from pydantic import ValidationError

from ..errors import INVALID_ENTRY
from ..models.entry import JournalEntry
from ..models.identity import Identity
from ..models.state import INITIAL_SYNC_STATE, SIGNED_OUT_SYNC_STATE, SyncPhase, SyncState
from ..providers.base import (
    JOURNAL_COLLECTION,
    CollectionProvider,
    Direction,
    Document,
    IdentitySignal,
    SubscriptionHandle,
    Unsubscribe,
)

logger = logging.getLogger(__name__)

SyncListener = Callable[[SyncState], None]

# Marks "no identity event seen yet", distinct from a resolved None
_UNSET = object()


class JournalSyncStore:
    """
    Mirrors the signed-in user's journal collection into a ``SyncState``.

    The store follows an identity signal. Whenever the identity changes it
    closes the current live subscription and opens one for the new owner,
    so at most one subscription is open at a time. Each subscription is
    tagged with a generation number; deliveries from a superseded
    subscription are dropped.

    Entries arrive already ordered by ``timestamp`` descending and are
    never reordered here.

    Usage:
        store = JournalSyncStore(auth, provider)
        store.init()
        unsubscribe = store.subscribe(lambda state: print(len(state.entries)))
        ...
        store.destroy()
    """

    order_by = "timestamp"

    def __init__(
        self,
        identity: IdentitySignal,
        provider: CollectionProvider,
        collection: str = JOURNAL_COLLECTION,
    ):
        self.identity = identity
        self.provider = provider
        self.collection = collection

        self._lock = threading.RLock()
        self._state: SyncState = INITIAL_SYNC_STATE
        self._listeners: list[SyncListener] = []

        self._phase = SyncPhase.UNINITIALIZED
        self._started = False
        self._identity_unsub: Optional[Unsubscribe] = None
        self._handle: Optional[SubscriptionHandle] = None
        self._current: object = _UNSET
        self._generation = 0

    # ----- Observation -----

    @property
    def snapshot(self) -> SyncState:
        """The current state."""
        return self._state

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def generation(self) -> int:
        """Token of the newest subscription; bumped on every open and close."""
        return self._generation

    @property
    def current_uid(self) -> Optional[str]:
        if isinstance(self._current, Identity):
            return self._current.uid
        return None

    def subscribe(self, listener: SyncListener) -> Unsubscribe:
        """
        Watch state changes.

        The listener is called immediately with the current state and
        then with every new state. Returns a function that stops it.
        """
        with self._lock:
            self._listeners.append(listener)
            state = self._state
        listener(state)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: SyncState) -> None:
        with self._lock:
            self._state = state
            listeners = list(self._listeners)
        for listener in listeners:
            listener(state)

    def _update_state(self, **changes) -> None:
        with self._lock:
            state = self._state.model_copy(update=changes)
        self._set_state(state)

    # ----- Lifecycle -----

    def init(self) -> None:
        """Start following the identity signal. Calling it again is a no-op."""
        with self._lock:
            if self._started:
                return
            self._started = True
        logger.debug("Journal store started")
        self._identity_unsub = self.identity.subscribe(self._on_identity)

    def destroy(self) -> None:
        """Stop everything and return to the initial state."""
        with self._lock:
            self._close_subscription()
            if self._identity_unsub is not None:
                self._identity_unsub()
                self._identity_unsub = None
            self._current = _UNSET
            self._started = False
            self._phase = SyncPhase.UNINITIALIZED
        self._set_state(INITIAL_SYNC_STATE)
        logger.debug("Journal store destroyed")

    # ----- Identity transitions -----

    def _on_identity(self, identity: Optional[Identity], still_loading: bool) -> None:
        with self._lock:
            if not self._started:
                return
            # Wait for the first resolved identity
            if still_loading and self._current is _UNSET:
                return

            uid = identity.uid if identity is not None else None
            if self._current is not _UNSET and uid == self.current_uid:
                return

            self._current = identity
            if identity is None:
                self._close_subscription()
                self._phase = SyncPhase.NO_IDENTITY
                logger.debug("Identity cleared; journal entries dropped")
                self._set_state(SIGNED_OUT_SYNC_STATE)
                return

            self._attach(identity)

    def _attach(self, identity: Identity) -> None:
        self._close_subscription()
        self._generation += 1
        generation = self._generation
        self._phase = SyncPhase.SUBSCRIPTION_PENDING
        self._update_state(is_loading=True, error="")
        logger.debug("Opening journal subscription %d for %s", generation, identity.uid)

        handle = self.provider.open_subscription(
            identity.uid,
            self.collection,
            self.order_by,
            Direction.DESCENDING,
        )
        self._handle = handle
        handle.on_error(lambda message: self._on_error(generation, message))
        handle.on_data(lambda documents: self._on_data(generation, documents))

    def _close_subscription(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            self._generation += 1
            handle.close()

    # ----- Deliveries -----

    def _on_data(self, generation: int, documents: list[Document]) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug("Dropped stale delivery from subscription %d", generation)
                return
            try:
                entries = tuple(JournalEntry.from_document(d) for d in documents)
            except ValidationError as e:
                self._fail(f"{INVALID_ENTRY}: {e}")
                return
            self._phase = SyncPhase.SUBSCRIPTION_ACTIVE
            self._update_state(
                entries=entries,
                is_loading=False,
                error="",
                is_initialized=True,
            )

    def _on_error(self, generation: int, message: str) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug("Dropped stale error from subscription %d", generation)
                return
            self._fail(message)

    def _fail(self, message: str) -> None:
        logger.error("Error in journal entries listener: %s", message)
        self._update_state(is_loading=False, error=message, is_initialized=True)
