"""Data models for the journal application."""

from .entry import JournalEntry, JournalEntryDraft
from .identity import AuthMode, AuthState, Identity
from .results import FetchResult, OperationResult, SaveResult
from .state import SyncPhase, SyncState, TimeSettingsState
from .time_settings import JournalPeriod, TimeSettings

__all__ = [
    "JournalEntry",
    "JournalEntryDraft",
    "Identity",
    "AuthMode",
    "AuthState",
    "OperationResult",
    "SaveResult",
    "FetchResult",
    "SyncPhase",
    "SyncState",
    "TimeSettingsState",
    "JournalPeriod",
    "TimeSettings",
]
