"""State reconciliation between the persisted record and beacon node state.

Every function here is pure: it takes the previous record and observed
state and returns new values without touching the store or the network.
"""

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from beacon_monitor.helpers.logging import get_logger
from beacon_monitor.helpers.parsers import gwei_to_eth
from beacon_monitor.validators.models import (
    StatusRecord,
    ValidatorInfo,
    ValidatorStatus,
    is_pending,
)


logger = get_logger(__name__)


class ReconcileResult(BaseModel):
    """Outcome of merging one poll into the status record."""

    record: dict[str, ValidatorStatus]
    activated: list[str] = Field(default_factory=list)
    pending: list[str] = Field(default_factory=list)
    changed: dict[str, tuple[ValidatorStatus, ValidatorStatus]] = Field(
        default_factory=dict
    )

    model_config = ConfigDict(frozen=True)

    @property
    def is_complete(self) -> bool:
        """Whether no tracked validator is still pending."""
        return not self.pending


def seed_record(
    record: StatusRecord, pubkeys: Iterable[str]
) -> tuple[StatusRecord, list[str]]:
    """Add untracked keys as ``pending_queued``.

    Args:
        record: Current status record.
        pubkeys: Normalised public keys to start tracking.

    Returns:
        The new record and the keys that were added, in input order.
    """
    seeded = dict(record)
    added: list[str] = []
    for pubkey in pubkeys:
        if pubkey in seeded:
            continue
        seeded[pubkey] = ValidatorStatus.PENDING_QUEUED
        added.append(pubkey)
    return seeded, added


def pending_keys(record: StatusRecord) -> list[str]:
    """Keys that have not reached ``active_ongoing`` yet, sorted."""
    return sorted(pubkey for pubkey, status in record.items() if is_pending(status))


def reconcile(
    previous: StatusRecord, fetched: Mapping[str, ValidatorInfo]
) -> ReconcileResult:
    """Merge freshly fetched validator state into the previous record.

    Keys missing from ``fetched`` keep their previous status. A key is
    reported as activated only on the cycle it moves into
    ``active_ongoing``.

    Args:
        previous: Record loaded from the store before the poll.
        fetched: Beacon node state keyed by normalised public key.

    Returns:
        The updated record with the activation and pending key sets.
    """
    record = dict(previous)
    activated: list[str] = []
    changed: dict[str, tuple[ValidatorStatus, ValidatorStatus]] = {}

    for pubkey in sorted(fetched):
        if pubkey not in previous:
            logger.debug("Ignoring untracked validator %s in response", pubkey)
            continue

        info = fetched[pubkey]
        old_status = previous[pubkey]
        new_status = info.status
        record[pubkey] = new_status

        if old_status is not new_status:
            changed[pubkey] = (old_status, new_status)
            logger.info("Validator %s: %s -> %s", pubkey, old_status, new_status)

        if new_status.triggers_registration and not old_status.triggers_registration:
            activated.append(pubkey)
            logger.info(
                "Activated: pubkey=%s activation_epoch=%s balance=%s ETH",
                pubkey,
                info.activation_epoch,
                gwei_to_eth(info.balance),
            )

    return ReconcileResult(
        record=record,
        activated=activated,
        pending=pending_keys(record),
        changed=changed,
    )


__all__ = ["ReconcileResult", "pending_keys", "reconcile", "seed_record"]
