"""Observable store state snapshots."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from .entry import JournalEntry
from .time_settings import TimeSettings


class SyncPhase(str, Enum):
    """Lifecycle phase of an identity-scoped sync store."""
    UNINITIALIZED = "uninitialized"
    NO_IDENTITY = "no_identity"
    SUBSCRIPTION_PENDING = "subscription_pending"
    SUBSCRIPTION_ACTIVE = "subscription_active"


class SyncState(BaseModel):
    """
    One consistent observation of the journal sync store.

    Snapshots are immutable; each change produces a new value.
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[JournalEntry, ...] = ()
    is_loading: bool = True
    error: str = ""
    is_initialized: bool = False


INITIAL_SYNC_STATE = SyncState()
SIGNED_OUT_SYNC_STATE = SyncState(entries=(), is_loading=False, error="", is_initialized=True)


class TimeSettingsState(BaseModel):
    """Observable state of the time settings store."""

    model_config = ConfigDict(frozen=True)

    settings: TimeSettings = TimeSettings()
    is_loading: bool = True
    is_initialized: bool = False
    error: str = ""
    saving: bool = False
