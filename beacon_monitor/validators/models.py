"""Validator status enum and beacon API response models."""

from enum import StrEnum

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from beacon_monitor.helpers.parsers import normalize_pubkey


Pubkey = Annotated[str, AfterValidator(normalize_pubkey)]
"""Validator public key, validated and normalised to lower case"""


class ValidatorStatus(StrEnum):
    """Beacon chain validator lifecycle status, declared in lifecycle order."""

    PENDING_INITIALIZED = "pending_initialized"
    PENDING_QUEUED = "pending_queued"
    ACTIVE_ONGOING = "active_ongoing"
    ACTIVE_EXITING = "active_exiting"
    ACTIVE_SLASHED = "active_slashed"
    EXITED_UNSLASHED = "exited_unslashed"
    EXITED_SLASHED = "exited_slashed"
    WITHDRAWAL_POSSIBLE = "withdrawal_possible"
    WITHDRAWAL_DONE = "withdrawal_done"

    @property
    def order(self) -> int:
        """Position of the status in the lifecycle."""
        return STATUS_ORDER[self]

    @property
    def is_pending(self) -> bool:
        """Whether the validator has not yet reached ``active_ongoing``."""
        return self.order < STATUS_ORDER[ValidatorStatus.ACTIVE_ONGOING]

    @property
    def triggers_registration(self) -> bool:
        """Whether entering this status triggers registration."""
        return self is ValidatorStatus.ACTIVE_ONGOING


STATUS_ORDER: dict[ValidatorStatus, int] = {
    status: position for position, status in enumerate(ValidatorStatus)
}

ALL_STATUSES: tuple[ValidatorStatus, ...] = tuple(ValidatorStatus)

type StatusRecord = dict[str, ValidatorStatus]
"""Last observed status per validator public key"""


def is_pending(status: ValidatorStatus) -> bool:
    """Check whether a status is still awaiting activation."""
    return status.is_pending


class ValidatorDetails(BaseModel):
    """Validator record embedded in a beacon state validator entry."""

    pubkey: Pubkey
    withdrawal_credentials: str | None = None
    effective_balance: int | None = Field(default=None, description="Gwei")
    slashed: bool = False
    activation_eligibility_epoch: int | None = None
    activation_epoch: int | None = None
    exit_epoch: int | None = None
    withdrawable_epoch: int | None = None

    model_config = ConfigDict(extra="allow")


class ValidatorInfo(BaseModel):
    """Entry of ``/eth/v1/beacon/states/{state_id}/validators``."""

    index: int = Field(..., description="Validator index")
    balance: int = Field(..., description="Current balance in Gwei")
    status: ValidatorStatus
    validator: ValidatorDetails

    model_config = ConfigDict(extra="allow")

    @property
    def pubkey(self) -> str:
        """Normalised validator public key."""
        return self.validator.pubkey

    @property
    def activation_epoch(self) -> int | None:
        """Epoch the validator activates (far future while pending)."""
        return self.validator.activation_epoch


class ValidatorResponse(BaseModel):
    """Response body of the beacon validators endpoint."""

    execution_optimistic: bool = False
    finalized: bool | None = None
    data: list[ValidatorInfo]


__all__ = [
    "ALL_STATUSES",
    "STATUS_ORDER",
    "Pubkey",
    "StatusRecord",
    "ValidatorDetails",
    "ValidatorInfo",
    "ValidatorResponse",
    "ValidatorStatus",
    "is_pending",
]
