"""Models for validator registration."""

from enum import StrEnum

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from beacon_monitor.validators.models import Pubkey


class KeyShare(BaseModel):
    """Pre-generated key-share bundle authorising one validator's registration.

    Only ``publicKey`` is interpreted; everything else is forwarded to the
    registration service untouched.
    """

    public_key: Pubkey = Field(..., alias="publicKey")
    operator_ids: list[int] = Field(default_factory=list, alias="operatorIds")
    shares_data: str | None = Field(
        default=None, description="Encrypted shares as hex string", alias="sharesData"
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialise back to the camelCase form the key-share file uses."""
        return self.model_dump(by_alias=True, exclude_none=True)


class DispatchMode(StrEnum):
    """How newly activated validators are submitted for registration."""

    BULK = "bulk"
    PER_KEY = "per_key"


class RegistrationOutcome(StrEnum):
    """Result of a registration attempt for one validator."""

    REGISTERED = "registered"
    FAILED = "failed"
    SKIPPED = "skipped"


__all__ = ["DispatchMode", "KeyShare", "RegistrationOutcome"]
