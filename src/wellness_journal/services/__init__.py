"""Business logic services."""

from .auth import AuthStore
from .context import AppContext
from .journal_store import JournalSyncStore
from .queries import JournalQueries, current_identity
from .time_settings import TimeSettingsStore

__all__ = [
    "AppContext",
    "AuthStore",
    "JournalSyncStore",
    "JournalQueries",
    "TimeSettingsStore",
    "current_identity",
]
