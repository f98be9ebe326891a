"""One-shot journal operations for the signed-in user."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

from ..errors import INVALID_ENTRY, NOT_AUTHENTICATED
from ..models.entry import JournalEntry, JournalEntryDraft, validate_update_fields
from ..models.identity import Identity
from ..models.results import FetchResult, OperationResult, SaveResult
from ..providers.base import JOURNAL_COLLECTION, CollectionProvider, Direction, IdentitySignal

logger = logging.getLogger(__name__)


def current_identity(signal: IdentitySignal) -> Optional[Identity]:
    """Read the signal's current identity by subscribing once."""
    seen: list[Optional[Identity]] = []
    unsubscribe = signal.subscribe(lambda identity, _loading: seen.append(identity))
    unsubscribe()
    return seen[0] if seen else None


class JournalQueries:
    """
    Save, fetch, update and delete journal entries without a live subscription.

    Every method returns a result object and never raises: a missing
    identity gives ``error="Not authenticated"`` before any storage call,
    and provider failures carry the provider's own message.
    """

    def __init__(
        self,
        identity: IdentitySignal,
        provider: CollectionProvider,
        collection: str = JOURNAL_COLLECTION,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.identity = identity
        self.provider = provider
        self.collection = collection
        self.clock = clock

    def save(self, draft: JournalEntryDraft) -> SaveResult:
        """Create a new entry stamped with the current time."""
        user = current_identity(self.identity)
        if user is None:
            return SaveResult.failed(NOT_AUTHENTICATED)

        fields: dict[str, Any] = draft.to_document()
        fields["timestamp"] = self.clock()
        try:
            entry_id = self.provider.create(user.uid, self.collection, fields)
        except Exception as e:
            logger.error("Error saving journal entry: %s", e)
            return SaveResult.failed(str(e))
        return SaveResult.ok(id=entry_id)

    def fetch_all(self) -> FetchResult:
        """Read every entry once, newest first."""
        user = current_identity(self.identity)
        if user is None:
            return FetchResult.failed(NOT_AUTHENTICATED)

        try:
            documents = self.provider.read(
                user.uid, self.collection, "timestamp", Direction.DESCENDING
            )
            entries = [JournalEntry.from_document(d) for d in documents]
        except ValidationError as e:
            logger.error("Error fetching journal entries: %s", e)
            return FetchResult.failed(f"{INVALID_ENTRY}: {e}")
        except Exception as e:
            logger.error("Error fetching journal entries: %s", e)
            return FetchResult.failed(str(e))
        return FetchResult.ok(entries=entries)

    def update(self, entry_id: str, fields: dict[str, Any]) -> OperationResult:
        """
        Merge fields into an entry.

        Accepts attribute names or stored names; ``id`` and ``timestamp``
        are ignored so the creation time never changes.
        """
        user = current_identity(self.identity)
        if user is None:
            return OperationResult.failed(NOT_AUTHENTICATED)

        try:
            changes = validate_update_fields(fields)
        except ValidationError as e:
            logger.error("Rejected journal entry update: %s", e)
            return OperationResult.failed(f"{INVALID_ENTRY}: {e}")

        try:
            self.provider.update(user.uid, self.collection, entry_id, changes)
        except Exception as e:
            logger.error("Error updating journal entry: %s", e)
            return OperationResult.failed(str(e))
        return OperationResult.ok()

    def delete(self, entry_id: str) -> OperationResult:
        """Remove an entry."""
        user = current_identity(self.identity)
        if user is None:
            return OperationResult.failed(NOT_AUTHENTICATED)

        try:
            self.provider.delete(user.uid, self.collection, entry_id)
        except Exception as e:
            logger.error("Error deleting journal entry: %s", e)
            return OperationResult.failed(str(e))
        return OperationResult.ok()
