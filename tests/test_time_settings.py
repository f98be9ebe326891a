"""Tests for the unlock time settings store."""

import pytest

from wellness_journal.errors import ProviderError
from wellness_journal.models import TimeSettings
from wellness_journal.providers.base import SETTINGS_COLLECTION, TIME_SETTINGS_DOCUMENT
from wellness_journal.services.time_settings import TimeSettingsStore

from conftest import FakeIdentitySignal


@pytest.fixture
def store(signal, provider) -> TimeSettingsStore:
    store = TimeSettingsStore(signal, provider)
    store.init()
    yield store
    store.destroy()


class TestLoading:
    """Tests for loading settings per identity."""

    def test_waits_for_identity(self, provider):
        store = TimeSettingsStore(FakeIdentitySignal(loading=True), provider)
        store.init()
        assert store.snapshot.is_loading is True
        assert store.snapshot.is_initialized is False

    def test_signed_out_uses_defaults(self, store):
        state = store.snapshot
        assert state.settings == TimeSettings()
        assert state.is_loading is False
        assert state.is_initialized is True

    def test_custom_defaults(self, signal, provider):
        defaults = TimeSettings(morning_unlock="07:00")
        store = TimeSettingsStore(signal, provider, defaults=defaults)
        store.init()
        assert store.settings.morning_unlock == "07:00"

    def test_loads_stored_settings(self, store, signal, provider, alice):
        provider.set_document("u1", SETTINGS_COLLECTION, TIME_SETTINGS_DOCUMENT, {"morningUnlock": "06:30"})

        signal.emit(alice)

        assert store.settings.morning_unlock == "06:30"
        assert store.settings.afternoon_unlock == "18:00"
        assert store.snapshot.is_loading is False

    def test_no_document_gives_defaults(self, store, signal, alice):
        signal.emit(alice)
        assert store.settings == TimeSettings()
        assert store.snapshot.is_initialized is True

    def test_sign_out_resets(self, store, signal, provider, alice):
        provider.set_document("u1", SETTINGS_COLLECTION, TIME_SETTINGS_DOCUMENT, {"eveningUnlock": "20:00"})
        signal.emit(alice)

        signal.emit(None)

        assert store.settings == TimeSettings()

    def test_load_failure(self, signal, scripted, alice):
        scripted.error = ProviderError("unavailable")
        store = TimeSettingsStore(signal, scripted)
        store.init()

        signal.emit(alice)

        assert store.snapshot.error == "unavailable"
        assert store.snapshot.is_initialized is True
        assert store.settings == TimeSettings()


class TestSaving:
    """Tests for saving settings."""

    def test_save_requires_identity(self, store):
        result = store.save(TimeSettings(morning_unlock="08:00"))

        assert result.success is False
        assert result.error == "Not authenticated"
        assert store.snapshot.error == "Not authenticated"

    def test_save_merges_document(self, store, signal, provider, alice):
        signal.emit(alice)

        result = store.save(TimeSettings(morning_unlock="08:00"))

        assert result.success is True
        assert store.settings.morning_unlock == "08:00"
        assert store.snapshot.saving is False
        stored = provider.get_document("u1", SETTINGS_COLLECTION, TIME_SETTINGS_DOCUMENT)
        assert stored["morningUnlock"] == "08:00"

    def test_saved_settings_reload(self, signal, provider, alice, bob):
        store = TimeSettingsStore(signal, provider)
        store.init()
        signal.emit(alice)
        store.save(TimeSettings(evening_unlock="22:15"))

        signal.emit(bob)
        assert store.settings.evening_unlock == "21:00"
        signal.emit(alice)
        assert store.settings.evening_unlock == "22:15"

    def test_save_failure(self, signal, scripted, alice):
        store = TimeSettingsStore(signal, scripted)
        store.init()
        signal.emit(alice)
        scripted.error = ProviderError("permission-denied")

        result = store.save(TimeSettings())

        assert result.error == "permission-denied"
        assert store.snapshot.error == "permission-denied"
        assert store.snapshot.saving is False

    def test_saving_flag_is_published(self, store, signal, alice):
        signal.emit(alice)
        seen = []
        store.subscribe(lambda state: seen.append(state.saving))

        store.save(TimeSettings())

        assert seen == [False, True, False]
