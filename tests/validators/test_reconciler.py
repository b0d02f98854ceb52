"""Tests for state reconciliation."""

from collections.abc import Callable
from typing import Any

import pytest

from beacon_monitor.validators.models import ValidatorInfo, ValidatorStatus
from beacon_monitor.validators.reconciler import (
    pending_keys,
    reconcile,
    seed_record,
)


@pytest.fixture
def observed(
    validator_entry: Callable[..., dict[str, Any]],
) -> Callable[[str, str], ValidatorInfo]:
    """Factory for parsed beacon observations."""

    def _observed(pubkey: str, status: str) -> ValidatorInfo:
        return ValidatorInfo.model_validate(validator_entry(pubkey, status))

    return _observed


class TestSeedRecord:
    """Tests for seed_record."""

    def test_adds_untracked_keys(self, pubkeys: list[str]) -> None:
        """Test new keys enter as pending_queued."""
        record, added = seed_record({}, pubkeys[:2])

        assert added == pubkeys[:2]
        assert record == dict.fromkeys(pubkeys[:2], ValidatorStatus.PENDING_QUEUED)

    def test_existing_status_wins(self, pubkeys: list[str]) -> None:
        """Test seeding an active key leaves the record unchanged."""
        previous = {pubkeys[0]: ValidatorStatus.ACTIVE_ONGOING}

        record, added = seed_record(previous, [pubkeys[0]])

        assert added == []
        assert record == previous

    def test_input_not_mutated(self, pubkeys: list[str]) -> None:
        """Test the previous record is copied, not changed in place."""
        previous = {pubkeys[0]: ValidatorStatus.PENDING_INITIALIZED}

        seed_record(previous, [pubkeys[1]])

        assert previous == {pubkeys[0]: ValidatorStatus.PENDING_INITIALIZED}


class TestPendingKeys:
    """Tests for pending_keys."""

    def test_only_pre_activation_statuses(self, pubkeys: list[str]) -> None:
        """Test active and later statuses are not pending."""
        record = {
            pubkeys[2]: ValidatorStatus.PENDING_QUEUED,
            pubkeys[0]: ValidatorStatus.PENDING_INITIALIZED,
            pubkeys[1]: ValidatorStatus.EXITED_UNSLASHED,
        }

        assert pending_keys(record) == [pubkeys[0], pubkeys[2]]

    def test_empty_record(self) -> None:
        """Test an empty record has nothing pending."""
        assert pending_keys({}) == []


class TestReconcile:
    """Tests for reconcile."""

    def test_pending_to_active_triggers(
        self, pubkeys: list[str], observed: Callable[[str, str], ValidatorInfo]
    ) -> None:
        """Test a pending_queued -> active_ongoing change is reported once."""
        key = pubkeys[0]
        previous = {key: ValidatorStatus.PENDING_QUEUED}

        result = reconcile(previous, {key: observed(key, "active_ongoing")})

        assert result.record == {key: ValidatorStatus.ACTIVE_ONGOING}
        assert result.activated == [key]
        assert result.pending == []
        assert result.is_complete
        assert result.changed == {
            key: (ValidatorStatus.PENDING_QUEUED, ValidatorStatus.ACTIVE_ONGOING)
        }

    def test_already_active_does_not_retrigger(
        self, pubkeys: list[str], observed: Callable[[str, str], ValidatorInfo]
    ) -> None:
        """Test active_ongoing -> active_ongoing is not a transition."""
        key = pubkeys[0]
        previous = {key: ValidatorStatus.ACTIVE_ONGOING}

        result = reconcile(previous, {key: observed(key, "active_ongoing")})

        assert result.activated == []
        assert result.changed == {}

    def test_initialized_straight_to_active(
        self, pubkeys: list[str], observed: Callable[[str, str], ValidatorInfo]
    ) -> None:
        """Test activation from pending_initialized also triggers."""
        key = pubkeys[0]

        result = reconcile(
            {key: ValidatorStatus.PENDING_INITIALIZED},
            {key: observed(key, "active_ongoing")},
        )

        assert result.activated == [key]

    def test_skipping_past_active_does_not_trigger(
        self, pubkeys: list[str], observed: Callable[[str, str], ValidatorInfo]
    ) -> None:
        """Test a key observed beyond active_ongoing is resolved but not activated."""
        key = pubkeys[0]

        result = reconcile(
            {key: ValidatorStatus.PENDING_QUEUED},
            {key: observed(key, "exited_unslashed")},
        )

        assert result.activated == []
        assert result.pending == []
        assert result.record[key] is ValidatorStatus.EXITED_UNSLASHED

    def test_absent_keys_left_unchanged(
        self, pubkeys: list[str], observed: Callable[[str, str], ValidatorInfo]
    ) -> None:
        """Test keys missing from the response keep their status."""
        previous = {
            pubkeys[0]: ValidatorStatus.PENDING_QUEUED,
            pubkeys[1]: ValidatorStatus.PENDING_QUEUED,
        }

        result = reconcile(previous, {pubkeys[0]: observed(pubkeys[0], "active_ongoing")})

        assert result.record[pubkeys[1]] is ValidatorStatus.PENDING_QUEUED
        assert result.pending == [pubkeys[1]]
        assert not result.is_complete

    def test_untracked_keys_ignored(
        self, pubkeys: list[str], observed: Callable[[str, str], ValidatorInfo]
    ) -> None:
        """Test keys the record does not track are not added."""
        previous = {pubkeys[0]: ValidatorStatus.PENDING_QUEUED}

        result = reconcile(
            previous, {pubkeys[1]: observed(pubkeys[1], "active_ongoing")}
        )

        assert result.record == previous
        assert result.activated == []

    def test_previous_record_not_mutated(
        self, pubkeys: list[str], observed: Callable[[str, str], ValidatorInfo]
    ) -> None:
        """Test reconcile returns a new record."""
        key = pubkeys[0]
        previous = {key: ValidatorStatus.PENDING_QUEUED}

        reconcile(previous, {key: observed(key, "active_ongoing")})

        assert previous == {key: ValidatorStatus.PENDING_QUEUED}

    def test_mixed_batch(
        self, pubkeys: list[str], observed: Callable[[str, str], ValidatorInfo]
    ) -> None:
        """Test several keys with different transitions in one cycle."""
        a, b, c = pubkeys
        previous = {
            a: ValidatorStatus.PENDING_QUEUED,
            b: ValidatorStatus.PENDING_INITIALIZED,
            c: ValidatorStatus.PENDING_QUEUED,
        }
        fetched = {
            c: observed(c, "active_ongoing"),
            a: observed(a, "active_ongoing"),
            b: observed(b, "pending_queued"),
        }

        result = reconcile(previous, fetched)

        assert result.activated == [a, c]
        assert result.pending == [b]
        assert result.record[b] is ValidatorStatus.PENDING_QUEUED
