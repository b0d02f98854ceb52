"""Parsing utilities for common data transformations."""

from datetime import UTC, datetime, timedelta
import re

from collections.abc import Iterable

from beacon_monitor.helpers.errors import InvalidPubkeyError


PUBKEY_PATTERN = re.compile(r"^0x[0-9a-fA-F]{96}$")
"""48-byte BLS public key, 0x-prefixed"""


def normalize_pubkey(value: str) -> str:
    """Validate a validator public key and return it in lower case.

    Args:
        value: Candidate public key, surrounding whitespace is ignored

    Returns:
        str: The key as ``0x`` followed by 96 lower case hex characters

    Raises:
        InvalidPubkeyError: If the value is not a 0x-prefixed 48-byte hex string

    Example:
        >>> normalize_pubkey("0x" + "AB" * 48) == "0x" + "ab" * 48
        True
    """
    candidate = value.strip() if isinstance(value, str) else ""
    if not PUBKEY_PATTERN.match(candidate):
        msg = f"Invalid validator public key: {value!r}"
        raise InvalidPubkeyError(msg)
    return candidate.lower()


def is_valid_pubkey(value: str) -> bool:
    """Check whether a value is a well-formed validator public key."""
    try:
        normalize_pubkey(value)
    except InvalidPubkeyError:
        return False
    return True


def unique_pubkeys(pubkeys: Iterable[str]) -> list[str]:
    """Normalise and de-duplicate public keys, keeping first-seen order.

    Raises:
        InvalidPubkeyError: If any key is malformed
    """
    return list(dict.fromkeys(normalize_pubkey(pubkey) for pubkey in pubkeys))


def gwei_to_eth(gwei: int | None) -> float | None:
    """Convert a beacon chain balance in Gwei to ETH (divide by 1e9).

    Example:
        >>> gwei_to_eth(32_000_000_000)
        32.0
        >>> gwei_to_eth(None)
        None
    """
    return float(gwei) / 1e9 if gwei is not None else None


def next_poll_time(seconds: float, now: datetime | None = None) -> str:
    """Format the wall-clock time of the next poll.

    Args:
        seconds: Delay until the next poll
        now: Reference time, defaults to the current UTC time

    Returns:
        str: ``HH:MM:SS UTC`` of the next poll
    """
    start = now or datetime.now(UTC)
    return (start + timedelta(seconds=seconds)).strftime("%H:%M:%S UTC")


__all__ = [
    "PUBKEY_PATTERN",
    "gwei_to_eth",
    "is_valid_pubkey",
    "next_poll_time",
    "normalize_pubkey",
    "unique_pubkeys",
]
