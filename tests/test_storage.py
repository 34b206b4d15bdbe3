"""Tests for local storage and the submission cooldown."""

import pytest

from civiclens.core.constants import CooldownConstants
from civiclens.services.storage import CooldownGate, LocalStorage


@pytest.fixture
def storage(tmp_path):
    store = LocalStorage(str(tmp_path / "storage"))
    yield store
    store.close()


class TestLocalStorage:
    """Test the key/value store."""

    def test_missing_key_is_none(self, storage):
        assert storage.get_item("absent") is None

    def test_set_get_remove(self, storage):
        storage.set_item("key", '{"a": 1}')
        assert storage.get_item("key") == '{"a": 1}'

        storage.set_item("key", "replaced")
        assert storage.get_item("key") == "replaced"

        storage.remove_item("key")
        assert storage.get_item("key") is None


class TestCooldownGate:
    """Test the last-submit rate limit."""

    def test_inactive_without_previous_submit(self, storage):
        gate = CooldownGate(storage, interval_seconds=60, disabled=False)
        assert not gate.is_active(now=1000.0)
        assert gate.remaining(now=1000.0) == 0

    def test_active_within_interval(self, storage):
        gate = CooldownGate(storage, interval_seconds=60, disabled=False)
        gate.start(now=1000.0)

        assert storage.get_item(CooldownConstants.STORAGE_KEY) == "1000000"
        assert gate.is_active(now=1010.0)
        assert gate.remaining(now=1010.0) == pytest.approx(50.0)
        assert gate.format_remaining(now=1010.0) == "0m 50s"

    def test_expires_after_interval(self, storage):
        gate = CooldownGate(storage, interval_seconds=60, disabled=False)
        gate.start(now=1000.0)
        assert not gate.is_active(now=1060.0)
        assert not gate.is_active(now=1061.0)

    def test_formats_minutes(self, storage):
        gate = CooldownGate(storage, interval_seconds=3600, disabled=False)
        gate.start(now=0.0)
        assert gate.format_remaining(now=125.0) == "57m 55s"

    def test_disabled_gate_is_never_active(self, storage):
        gate = CooldownGate(storage, interval_seconds=60, disabled=True)
        gate.start(now=1000.0)
        assert not gate.is_active(now=1001.0)

    def test_unreadable_timestamp_is_ignored(self, storage):
        storage.set_item(CooldownConstants.STORAGE_KEY, "yesterday")
        gate = CooldownGate(storage, interval_seconds=60, disabled=False)
        assert not gate.is_active()

    def test_shared_storage_between_gates(self, storage):
        CooldownGate(storage, interval_seconds=60, disabled=False).start(now=1000.0)
        other = CooldownGate(storage, interval_seconds=60, disabled=False)
        assert other.is_active(now=1030.0)
