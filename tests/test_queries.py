"""Tests for one-shot journal operations."""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from wellness_journal.errors import ProviderError
from wellness_journal.models import JournalEntryDraft
from wellness_journal.providers.base import JOURNAL_COLLECTION
from wellness_journal.services.journal_store import JournalSyncStore
from wellness_journal.services.queries import JournalQueries, current_identity

from conftest import FakeIdentitySignal

NOW = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def queries(signal, scripted) -> JournalQueries:
    return JournalQueries(signal, scripted, clock=lambda: NOW)


class TestCurrentIdentity:
    """Tests for reading the identity signal once."""

    def test_reads_current_value(self, alice):
        signal = FakeIdentitySignal(alice)
        assert current_identity(signal) == alice
        assert signal.listeners == []

    def test_signed_out(self, signal):
        assert current_identity(signal) is None


class TestSignedOut:
    """Every operation fails without touching storage when nobody is signed in."""

    def test_save(self, queries, scripted):
        result = queries.save(JournalEntryDraft(date="2024-01-01"))
        assert result.success is False
        assert result.error == "Not authenticated"
        assert result.id is None
        assert scripted.calls == []

    def test_fetch_all(self, queries, scripted):
        result = queries.fetch_all()
        assert result.success is False
        assert result.error == "Not authenticated"
        assert result.entries == []
        assert scripted.calls == []

    def test_update(self, queries, scripted):
        result = queries.update("e1", {"evening_emotion": "calm"})
        assert result.error == "Not authenticated"
        assert scripted.calls == []

    def test_delete(self, queries, scripted):
        result = queries.delete("e1")
        assert result.error == "Not authenticated"
        assert scripted.calls == []

    def test_while_identity_loading(self, scripted):
        queries = JournalQueries(FakeIdentitySignal(loading=True), scripted)
        assert queries.save(JournalEntryDraft()).error == "Not authenticated"
        assert scripted.calls == []


class TestSignedIn:
    """Tests for operations scoped to the signed-in user."""

    @pytest.fixture(autouse=True)
    def sign_in(self, signal, alice):
        signal.emit(alice)

    def test_save_stamps_timestamp(self, queries, scripted):
        result = queries.save(JournalEntryDraft(date="2024-03-01", morning_energy=6))

        assert result.success is True
        assert result.id == "new-id"
        name, owner, collection, fields = scripted.calls[0]
        assert (name, owner, collection) == ("create", "u1", JOURNAL_COLLECTION)
        assert fields["timestamp"] == NOW
        assert fields["morningEnergy"] == 6

    def test_fetch_all(self, queries, scripted):
        scripted.documents = [
            {"id": "e2", "date": "2024-03-02", "timestamp": 20},
            {"id": "e1", "date": "2024-03-01", "timestamp": 10},
        ]

        result = queries.fetch_all()

        assert result.success is True
        assert [e.id for e in result.entries] == ["e2", "e1"]
        assert scripted.calls[0][:4] == ("read", "u1", JOURNAL_COLLECTION, "timestamp")

    def test_update_strips_timestamp(self, queries, scripted):
        result = queries.update("e1", {
            "evening_emotion": "calm",
            "timestamp": NOW,
            "id": "other",
        })

        assert result.success is True
        assert scripted.calls == [("update", "u1", JOURNAL_COLLECTION, "e1", {"eveningEmotion": "calm"})]

    def test_delete(self, queries, scripted):
        assert queries.delete("e1").success is True
        assert scripted.calls == [("delete", "u1", JOURNAL_COLLECTION, "e1")]

    def test_update_rejects_bad_values(self, queries, scripted):
        """Values that don't fit their field never reach storage."""
        result = queries.update("e1", {"morning_energy": "lots"})

        assert result.success is False
        assert result.error.startswith("Invalid journal entry")
        assert "morningEnergy" in result.error
        assert scripted.calls == []

    def test_update_coerces_numeric_text(self, queries, scripted):
        queries.update("e1", {"eveningEnergy": "8"})
        assert scripted.calls == [("update", "u1", JOURNAL_COLLECTION, "e1", {"eveningEnergy": 8})]

    @pytest.mark.parametrize("operation", ["save", "fetch_all", "update", "delete"])
    def test_provider_errors_become_results(self, queries, scripted, operation):
        """Provider failures are reported with the provider's message."""
        scripted.error = ProviderError("permission-denied")
        calls = {
            "save": lambda: queries.save(JournalEntryDraft()),
            "fetch_all": queries.fetch_all,
            "update": lambda: queries.update("e1", {"date": "x"}),
            "delete": lambda: queries.delete("e1"),
        }

        result = calls[operation]()

        assert result.success is False
        assert result.error == "permission-denied"


class TestWithTinyDB:
    """End-to-end against the TinyDB provider."""

    @pytest.fixture
    def queries(self, alice, provider) -> JournalQueries:
        ticks = count(1)
        return JournalQueries(
            FakeIdentitySignal(alice),
            provider,
            clock=lambda: NOW + timedelta(seconds=next(ticks)),
        )

    def test_save_then_fetch(self, queries):
        first = queries.save(JournalEntryDraft(date="2024-03-01", evening_emotion="tired"))
        second = queries.save(JournalEntryDraft(date="2024-03-02", evening_emotion="happy"))

        result = queries.fetch_all()

        assert result.success is True
        assert [e.id for e in result.entries] == [second.id, first.id]
        assert result.entries[0].timestamp.tzinfo is not None

    def test_update_keeps_timestamp(self, queries):
        saved = queries.save(JournalEntryDraft(date="2024-03-01"))
        before = queries.fetch_all().entries[0]

        queries.update(saved.id, {"morning_energy": 9, "timestamp": datetime(2000, 1, 1)})

        after = queries.fetch_all().entries[0]
        assert after.morning_energy == 9
        assert after.timestamp == before.timestamp

    def test_update_missing_entry(self, queries):
        result = queries.update("nope", {"morning_energy": 9})
        assert result.success is False
        assert "nope" in result.error

    def test_delete_missing_entry_succeeds(self, queries):
        assert queries.delete("nope").success is True

    def test_owners_are_isolated(self, provider, alice, bob):
        JournalQueries(FakeIdentitySignal(alice), provider).save(JournalEntryDraft(date="a"))

        result = JournalQueries(FakeIdentitySignal(bob), provider).fetch_all()

        assert result.success is True
        assert result.entries == []

    def test_bad_update_keeps_collection_readable(self, queries, provider, alice):
        """A rejected update leaves every entry readable, also for a new session."""
        saved = queries.save(JournalEntryDraft(date="2024-03-01", morning_energy=5))

        result = queries.update(saved.id, {"morning_energy": "lots"})
        queries.save(JournalEntryDraft(date="2024-03-02"))

        assert result.success is False
        fetched = queries.fetch_all()
        assert fetched.success is True
        assert [e.morning_energy for e in fetched.entries] == [None, 5]

        signal = FakeIdentitySignal(alice)
        store = JournalSyncStore(signal, provider)
        store.init()
        assert len(store.snapshot.entries) == 2
        assert store.snapshot.error == ""
        store.destroy()
