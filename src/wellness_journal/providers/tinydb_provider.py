"""Document storage provider using TinyDB."""

import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any, Optional
from uuid import uuid4

from tinydb import TinyDB, where
from tinydb.table import Table

from ..errors import DocumentNotFoundError, ProviderError
from .base import (
    Dispatch,
    Direction,
    Document,
    DocumentsCallback,
    ErrorCallback,
    call_now,
    scoped_path,
)

logger = logging.getLogger(__name__)

ID_FIELD = "_id"


def encode_value(value: Any) -> Any:
    """Make a field value JSON-safe; datetimes become fixed-width UTC ISO strings."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="microseconds")
    return value


def order_documents(
    documents: list[Document],
    order_by: str,
    direction: Direction,
) -> list[Document]:
    """
    Sort documents by one field, ties broken by id.

    Documents missing the field go last in either direction.
    """
    present = [d for d in documents if d.get(order_by) is not None]
    missing = [d for d in documents if d.get(order_by) is None]

    reverse = direction == Direction.DESCENDING
    present.sort(key=lambda d: (d[order_by], d["id"]), reverse=reverse)
    missing.sort(key=lambda d: d["id"], reverse=reverse)
    return present + missing


class TinyDBSubscription:
    """
    Live query handle returned by ``TinyDBCollectionProvider.open_subscription``.

    The first result set is pushed when ``on_data`` is registered; after that,
    every write to the collection pushes a fresh one until ``close()``.
    """

    def __init__(
        self,
        provider: "TinyDBCollectionProvider",
        owner_id: str,
        collection: str,
        order_by: str,
        direction: Direction,
    ):
        self.provider = provider
        self.owner_id = owner_id
        self.collection = collection
        self.order_by = order_by
        self.direction = direction
        self.closed = False
        self._on_data: Optional[DocumentsCallback] = None
        self._on_error: Optional[ErrorCallback] = None

    @property
    def path(self) -> str:
        return scoped_path(self.owner_id, self.collection)

    def on_data(self, callback: DocumentsCallback) -> "TinyDBSubscription":
        self._on_data = callback
        self.provider._refresh(self)
        return self

    def on_error(self, callback: ErrorCallback) -> "TinyDBSubscription":
        self._on_error = callback
        return self

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.provider._detach(self)

    def _deliver(self, documents: list[Document]) -> None:
        if self.closed or self._on_data is None:
            return
        self._on_data(documents)

    def _fail(self, message: str) -> None:
        if self.closed:
            return
        if self._on_error is None:
            logger.error("Unhandled subscription error on %s: %s", self.path, message)
            return
        self._on_error(message)


class TinyDBCollectionProvider:
    """
    Owner-scoped document collections stored in TinyDB.

    Each collection path (``users/{uid}/journal-entries``) is its own table.
    Documents keep their string id in an internal field and are handed out
    as plain dicts carrying ``id``.

    Deliveries to live subscriptions go through ``dispatch``; by default
    they run immediately.
    """

    def __init__(self, db: TinyDB, dispatch: Optional[Dispatch] = None):
        self.db = db
        self._dispatch = dispatch or call_now
        self._subscriptions: dict[str, list[TinyDBSubscription]] = {}

    def _table(self, owner_id: str, collection: str) -> Table:
        return self.db.table(scoped_path(owner_id, collection))

    @staticmethod
    def _to_document(stored: dict) -> Document:
        document = {k: v for k, v in stored.items() if k != ID_FIELD}
        document["id"] = stored[ID_FIELD]
        return document

    @staticmethod
    def _encode(fields: Document) -> Document:
        return {
            key: encode_value(value)
            for key, value in fields.items()
            if key not in ("id", ID_FIELD)
        }

    # ----- Live subscriptions -----

    def open_subscription(
        self,
        owner_id: str,
        collection: str,
        order_by: str,
        direction: Direction = Direction.DESCENDING,
    ) -> TinyDBSubscription:
        """Open a live ordered subscription on an owner's collection."""
        subscription = TinyDBSubscription(self, owner_id, collection, order_by, direction)
        self._subscriptions.setdefault(subscription.path, []).append(subscription)
        logger.debug("Opened subscription on %s", subscription.path)
        return subscription

    def _detach(self, subscription: TinyDBSubscription) -> None:
        subscriptions = self._subscriptions.get(subscription.path, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)
        if not subscriptions:
            self._subscriptions.pop(subscription.path, None)
        logger.debug("Closed subscription on %s", subscription.path)

    def _refresh(self, subscription: TinyDBSubscription) -> None:
        """Re-read a subscription's query and dispatch the result."""
        try:
            documents = self.read(
                subscription.owner_id,
                subscription.collection,
                subscription.order_by,
                subscription.direction,
            )
        except ProviderError as e:
            self._dispatch(partial(subscription._fail, str(e)))
            return
        self._dispatch(partial(subscription._deliver, documents))

    def _notify(self, owner_id: str, collection: str) -> None:
        path = scoped_path(owner_id, collection)
        for subscription in list(self._subscriptions.get(path, [])):
            if subscription._on_data is not None:
                self._refresh(subscription)

    def active_subscriptions(self, owner_id: str, collection: str) -> int:
        """Number of open subscriptions on a collection."""
        return len(self._subscriptions.get(scoped_path(owner_id, collection), []))

    # ----- Collections -----

    def create(self, owner_id: str, collection: str, fields: Document) -> str:
        """Insert a document and return its new id."""
        document_id = uuid4().hex[:20]
        try:
            self._table(owner_id, collection).insert(
                {**self._encode(fields), ID_FIELD: document_id}
            )
        except (OSError, ValueError) as e:
            raise ProviderError(f"Failed to write {scoped_path(owner_id, collection)}: {e}") from e
        self._notify(owner_id, collection)
        return document_id

    def read(
        self,
        owner_id: str,
        collection: str,
        order_by: str,
        direction: Direction = Direction.DESCENDING,
    ) -> list[Document]:
        """Read a whole collection once, ordered."""
        path = scoped_path(owner_id, collection)
        try:
            documents = [self._to_document(d) for d in self._table(owner_id, collection).all()]
            return order_documents(documents, order_by, direction)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error("Failed to read %s: %s", path, e)
            raise ProviderError(f"Failed to read {path}: {e}") from e

    def update(self, owner_id: str, collection: str, document_id: str, fields: Document) -> None:
        """Merge fields into an existing document."""
        table = self._table(owner_id, collection)
        if not table.contains(where(ID_FIELD) == document_id):
            raise DocumentNotFoundError(
                f"No document to update: {scoped_path(owner_id, collection)}/{document_id}"
            )
        try:
            table.update(self._encode(fields), where(ID_FIELD) == document_id)
        except (OSError, ValueError) as e:
            raise ProviderError(f"Failed to update {document_id}: {e}") from e
        self._notify(owner_id, collection)

    def delete(self, owner_id: str, collection: str, document_id: str) -> None:
        """Remove a document. Deleting a missing document is a no-op."""
        try:
            removed = self._table(owner_id, collection).remove(where(ID_FIELD) == document_id)
        except (OSError, ValueError) as e:
            raise ProviderError(f"Failed to delete {document_id}: {e}") from e
        if removed:
            self._notify(owner_id, collection)

    # ----- Single documents -----

    def get_document(self, owner_id: str, collection: str, document_id: str) -> Optional[Document]:
        """Read one document by id, or None if it does not exist."""
        try:
            stored = self._table(owner_id, collection).get(where(ID_FIELD) == document_id)
        except (OSError, ValueError) as e:
            raise ProviderError(f"Failed to read {document_id}: {e}") from e
        if stored is None:
            return None
        return self._to_document(stored)

    def set_document(
        self,
        owner_id: str,
        collection: str,
        document_id: str,
        fields: Document,
        merge: bool = True,
    ) -> None:
        """Write a document under a known id, merging into it by default."""
        table = self._table(owner_id, collection)
        condition = where(ID_FIELD) == document_id
        encoded = self._encode(fields)
        try:
            if merge and table.contains(condition):
                table.update(encoded, condition)
            else:
                table.remove(condition)
                table.insert({**encoded, ID_FIELD: document_id})
        except (OSError, ValueError) as e:
            raise ProviderError(f"Failed to write {document_id}: {e}") from e
        self._notify(owner_id, collection)
