"""Shared test fixtures."""

from typing import Any, Optional

import pytest
from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from wellness_journal.models.identity import Identity
from wellness_journal.providers.base import Direction
from wellness_journal.providers.tinydb_provider import TinyDBCollectionProvider
from wellness_journal.services.auth import AuthStore
from wellness_journal.utils.config import Settings, get_settings


class FakeIdentitySignal:
    """Identity signal the test drives by hand."""

    def __init__(self, user: Optional[Identity] = None, loading: bool = False):
        self.user = user
        self.loading = loading
        self.listeners = []

    def subscribe(self, callback):
        self.listeners.append(callback)
        callback(self.user, self.loading)

        def unsubscribe():
            if callback in self.listeners:
                self.listeners.remove(callback)

        return unsubscribe

    def emit(self, user: Optional[Identity], loading: bool = False) -> None:
        self.user = user
        self.loading = loading
        for listener in list(self.listeners):
            listener(user, loading)


class FakeHandle:
    """Subscription handle that only delivers when the test says so."""

    def __init__(self, owner_id: str, collection: str, order_by: str, direction: Direction):
        self.owner_id = owner_id
        self.collection = collection
        self.order_by = order_by
        self.direction = direction
        self.closed = False
        self.data_callback = None
        self.error_callback = None

    def on_data(self, callback):
        self.data_callback = callback
        return self

    def on_error(self, callback):
        self.error_callback = callback
        return self

    def close(self):
        self.closed = True

    # Deliveries ignore ``closed`` to model callbacks already in flight
    def deliver(self, documents: list[dict[str, Any]]) -> None:
        self.data_callback(documents)

    def fail(self, message: str) -> None:
        self.error_callback(message)


class ScriptedProvider:
    """Collection provider that records calls and hands out FakeHandles."""

    def __init__(self):
        self.handles: list[FakeHandle] = []
        self.calls: list[tuple] = []
        self.error: Optional[Exception] = None
        self.documents: list[dict[str, Any]] = []

    def open_subscription(self, owner_id, collection, order_by, direction=Direction.DESCENDING):
        handle = FakeHandle(owner_id, collection, order_by, direction)
        self.handles.append(handle)
        return handle

    def _call(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    def create(self, owner_id, collection, fields):
        self._call("create", owner_id, collection, fields)
        return "new-id"

    def read(self, owner_id, collection, order_by, direction=Direction.DESCENDING):
        self._call("read", owner_id, collection, order_by, direction)
        return self.documents

    def update(self, owner_id, collection, document_id, fields):
        self._call("update", owner_id, collection, document_id, fields)

    def delete(self, owner_id, collection, document_id):
        self._call("delete", owner_id, collection, document_id)

    def get_document(self, owner_id, collection, document_id):
        self._call("get_document", owner_id, collection, document_id)
        return None

    def set_document(self, owner_id, collection, document_id, fields, merge=True):
        self._call("set_document", owner_id, collection, document_id, fields, merge)


@pytest.fixture
def db():
    """An in-memory TinyDB."""
    database = TinyDB(storage=MemoryStorage)
    yield database
    database.close()


@pytest.fixture
def provider(db) -> TinyDBCollectionProvider:
    return TinyDBCollectionProvider(db)


@pytest.fixture
def scripted() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def signal() -> FakeIdentitySignal:
    """A resolved, signed-out identity signal."""
    return FakeIdentitySignal()


@pytest.fixture
def alice() -> Identity:
    return Identity(uid="u1", email="alice@example.com")


@pytest.fixture
def bob() -> Identity:
    return Identity(uid="u2", email="bob@example.com")


@pytest.fixture
def auth(db) -> AuthStore:
    """Auth store with cheap password hashing."""
    store = AuthStore(db)
    store.hash_rounds = 4
    return store


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def env_data_dir(tmp_path, monkeypatch):
    """Point cached settings at a temporary data directory."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("JOURNAL_DATA_DIR", str(data_dir))
    monkeypatch.setenv("JOURNAL_MIN_PASSWORD_LENGTH", "6")
    get_settings.cache_clear()
    yield data_dir
    get_settings.cache_clear()
