"""Interfaces for the external collaborators: identity and document storage."""

from enum import Enum
from typing import Any, Callable, Optional, Protocol

from ..models.identity import Identity

Document = dict[str, Any]
DocumentsCallback = Callable[[list[Document]], None]
ErrorCallback = Callable[[str], None]
IdentityCallback = Callable[[Optional[Identity], bool], None]
Unsubscribe = Callable[[], None]
Dispatch = Callable[[Callable[[], None]], None]

JOURNAL_COLLECTION = "journal-entries"
SETTINGS_COLLECTION = "settings"
TIME_SETTINGS_DOCUMENT = "time-settings"


class Direction(str, Enum):
    """Sort direction for ordered queries."""
    ASCENDING = "asc"
    DESCENDING = "desc"


def scoped_path(owner_id: str, collection: str) -> str:
    """Full path of an owner's collection, e.g. ``users/u1/journal-entries``."""
    return f"users/{owner_id}/{collection}"


def call_now(callback: Callable[[], None]) -> None:
    """Default dispatcher: deliver immediately on the caller's stack."""
    callback()


class IdentitySignal(Protocol):
    """Emits the current identity (or None) and whether it is still resolving."""

    def subscribe(self, callback: IdentityCallback) -> Unsubscribe:
        """Register a callback; it is called at once with the current value."""
        ...


class SubscriptionHandle(Protocol):
    """A live, ordered query that pushes result sets until closed."""

    def on_data(self, callback: DocumentsCallback) -> "SubscriptionHandle":
        ...

    def on_error(self, callback: ErrorCallback) -> "SubscriptionHandle":
        ...

    def close(self) -> None:
        ...


class CollectionProvider(Protocol):
    """Owner-scoped document storage with live ordered subscriptions."""

    def open_subscription(
        self,
        owner_id: str,
        collection: str,
        order_by: str,
        direction: Direction = Direction.DESCENDING,
    ) -> SubscriptionHandle:
        """Open a live subscription. Register ``on_error`` before ``on_data``."""
        ...

    def create(self, owner_id: str, collection: str, fields: Document) -> str:
        """Insert a document and return its new id."""
        ...

    def read(
        self,
        owner_id: str,
        collection: str,
        order_by: str,
        direction: Direction = Direction.DESCENDING,
    ) -> list[Document]:
        """Read a whole collection once, ordered. Documents carry ``id``."""
        ...

    def update(self, owner_id: str, collection: str, document_id: str, fields: Document) -> None:
        """Merge fields into an existing document."""
        ...

    def delete(self, owner_id: str, collection: str, document_id: str) -> None:
        """Remove a document."""
        ...

    def get_document(self, owner_id: str, collection: str, document_id: str) -> Optional[Document]:
        ...

    def set_document(
        self,
        owner_id: str,
        collection: str,
        document_id: str,
        fields: Document,
        merge: bool = True,
    ) -> None:
        ...
