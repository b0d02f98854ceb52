"""Tests for the JSON-backed validator status store."""

import json
import os
from pathlib import Path

import pytest

from beacon_monitor.helpers.errors import PersistenceError
from beacon_monitor.validators.models import ValidatorStatus
from beacon_monitor.validators.store import StatusStore


@pytest.fixture
def store(tmp_path: Path) -> StatusStore:
    """Store backed by a file in a temporary directory."""
    return StatusStore(tmp_path / "validators.json")


class TestLoad:
    """Tests for StatusStore.load."""

    def test_missing_file_is_empty(self, store: StatusStore) -> None:
        """Test a missing file yields an empty record."""
        assert store.load() == {}

    def test_reads_persisted_record(
        self, store: StatusStore, pubkeys: list[str]
    ) -> None:
        """Test statuses are parsed into the enum."""
        store.path.write_text(
            json.dumps({pubkeys[0]: "pending_queued", pubkeys[1]: "active_ongoing"})
        )

        assert store.load() == {
            pubkeys[0]: ValidatorStatus.PENDING_QUEUED,
            pubkeys[1]: ValidatorStatus.ACTIVE_ONGOING,
        }

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            "[]",
            '{"0x1234": "pending_queued"}',
            '{"0x' + "aa" * 48 + '": "unknown_status"}',
            "",
        ],
    )
    def test_corrupt_file_is_empty(self, store: StatusStore, content: str) -> None:
        """Test corrupt content degrades to an empty record."""
        store.path.write_text(content)

        assert store.load() == {}

    def test_undecodable_file_is_empty(self, store: StatusStore) -> None:
        """Test binary garbage degrades to an empty record."""
        store.path.write_bytes(b"\xff\xfe\x00garbage")

        assert store.load() == {}


class TestSave:
    """Tests for StatusStore.save and clear."""

    def test_round_trip(self, store: StatusStore, pubkeys: list[str]) -> None:
        """Test save then load returns an equal mapping."""
        record = {
            pubkeys[0]: ValidatorStatus.PENDING_INITIALIZED,
            pubkeys[1]: ValidatorStatus.ACTIVE_ONGOING,
            pubkeys[2]: ValidatorStatus.WITHDRAWAL_DONE,
        }

        store.save(record)

        assert store.load() == record

    def test_save_of_load_keeps_content(
        self, store: StatusStore, pubkeys: list[str]
    ) -> None:
        """Test save(load()) does not change the file on disk."""
        store.save({pubkeys[1]: ValidatorStatus.PENDING_QUEUED})
        before = store.path.read_text()

        store.save(store.load())

        assert store.path.read_text() == before

    def test_writes_plain_json_object(
        self, store: StatusStore, pubkeys: list[str]
    ) -> None:
        """Test the file holds plain status strings."""
        store.save({pubkeys[0]: ValidatorStatus.ACTIVE_ONGOING})

        assert json.loads(store.path.read_text()) == {pubkeys[0]: "active_ongoing"}

    def test_leaves_no_temporary_files(
        self, store: StatusStore, pubkeys: list[str]
    ) -> None:
        """Test the temporary file is moved into place."""
        store.save({pubkeys[0]: ValidatorStatus.PENDING_QUEUED})

        assert os.listdir(store.path.parent) == ["validators.json"]

    def test_clear(self, store: StatusStore, pubkeys: list[str]) -> None:
        """Test clear persists an empty object."""
        store.save({pubkeys[0]: ValidatorStatus.PENDING_QUEUED})

        store.clear()

        assert json.loads(store.path.read_text()) == {}
        assert store.load() == {}

    def test_write_failure_raises(
        self, store: StatusStore, pubkeys: list[str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test OS errors surface as PersistenceError and keep the old file."""
        store.save({pubkeys[0]: ValidatorStatus.PENDING_QUEUED})

        def fail_replace(src: str, dst: str) -> None:
            raise OSError("read-only file system")

        monkeypatch.setattr("beacon_monitor.validators.store.os.replace", fail_replace)

        with pytest.raises(PersistenceError, match="read-only"):
            store.save({pubkeys[0]: ValidatorStatus.ACTIVE_ONGOING})

        assert store.load() == {pubkeys[0]: ValidatorStatus.PENDING_QUEUED}
        assert os.listdir(store.path.parent) == ["validators.json"]


class TestSeed:
    """Tests for StatusStore.seed."""

    def test_new_keys_added_as_pending_queued(
        self, store: StatusStore, pubkeys: list[str]
    ) -> None:
        """Test untracked keys start as pending_queued."""
        added = store.seed(pubkeys[:2])

        assert added == pubkeys[:2]
        assert store.load() == {
            pubkeys[0]: ValidatorStatus.PENDING_QUEUED,
            pubkeys[1]: ValidatorStatus.PENDING_QUEUED,
        }

    def test_tracked_status_never_overwritten(
        self, store: StatusStore, pubkeys: list[str]
    ) -> None:
        """Test seeding an active key leaves it unchanged."""
        store.save({pubkeys[0]: ValidatorStatus.ACTIVE_ONGOING})

        added = store.seed([pubkeys[0]])

        assert added == []
        assert store.load() == {pubkeys[0]: ValidatorStatus.ACTIVE_ONGOING}

    def test_seeding_twice_is_idempotent(
        self, store: StatusStore, pubkeys: list[str]
    ) -> None:
        """Test a second seed with the same keys changes nothing."""
        store.seed(pubkeys)
        first = store.path.read_text()

        assert store.seed(pubkeys) == []
        assert store.path.read_text() == first
