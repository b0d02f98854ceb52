"""Pytest configuration and shared fixtures for the validator monitor tests."""

from pathlib import Path

from collections.abc import Callable
from typing import Any

import pytest

from beacon_monitor.helpers.config import MonitorSettings
from beacon_monitor.registration.models import KeyShare


def make_pubkey(n: int) -> str:
    """Build a deterministic, valid lower case public key."""
    return "0x" + f"{n:02x}" * 48


@pytest.fixture
def pubkeys() -> list[str]:
    """Three distinct normalised public keys.

    Returns:
        list[str]: Keys ``0xaaaa...``, ``0xbbbb...`` and ``0xcccc...``
    """
    return [make_pubkey(0xAA), make_pubkey(0xBB), make_pubkey(0xCC)]


@pytest.fixture
def validator_entry() -> Callable[..., dict[str, Any]]:
    """Factory for one entry of a beacon validators response, as raw JSON."""

    def _entry(
        pubkey: str,
        status: str,
        *,
        index: int = 1,
        balance: int = 32_000_000_000,
        activation_epoch: int = 18446744073709551615,
    ) -> dict[str, Any]:
        return {
            "index": str(index),
            "balance": str(balance),
            "status": status,
            "validator": {
                "pubkey": pubkey,
                "withdrawal_credentials": "0x01" + "00" * 31,
                "effective_balance": "32000000000",
                "slashed": False,
                "activation_eligibility_epoch": "100",
                "activation_epoch": str(activation_epoch),
                "exit_epoch": "18446744073709551615",
                "withdrawable_epoch": "18446744073709551615",
            },
        }

    return _entry


@pytest.fixture
def keyshare_factory() -> Callable[[str], KeyShare]:
    """Factory for key-share bundles."""

    def _keyshare(pubkey: str) -> KeyShare:
        return KeyShare.model_validate({
            "publicKey": pubkey,
            "operatorIds": [1, 2, 3, 4],
            "sharesData": "0x" + "ab" * 16,
        })

    return _keyshare


@pytest.fixture
def settings(tmp_path: Path) -> MonitorSettings:
    """Monitor settings pointing at temporary files and a short epoch."""
    return MonitorSettings(
        beacon_node_url="http://beacon.test:5052",
        keyshares_file=tmp_path / "keyshares.json",
        registration_url="http://registrar.test/register",
        status_file=tmp_path / "validators.json",
        epoch_seconds=0.01,
    )
