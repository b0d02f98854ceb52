"""Client for the external validator registration service.

Signing and submitting the registration transaction happens behind the
service; this module only hands it the key shares to register.
"""

from collections.abc import Sequence

from typing import Any, Protocol

import httpx

from beacon_monitor.helpers.constants import REGISTRATION_TIMEOUT
from beacon_monitor.helpers.errors import ConfigError, RegistrationError
from beacon_monitor.helpers.logging import get_logger
from beacon_monitor.registration.models import KeyShare


logger = get_logger(__name__)


class Registrar(Protocol):
    """Submits key shares for registration with the validator network."""

    async def register(
        self, client: httpx.AsyncClient, keyshares: Sequence[KeyShare]
    ) -> None:
        """Register all ``keyshares`` in one call or raise RegistrationError."""
        ...


class HttpRegistrar:
    """Registers validators through a registration service HTTP endpoint."""

    def __init__(
        self, url: str, chain: str, timeout: float = REGISTRATION_TIMEOUT
    ) -> None:
        """Initialize registrar.

        Args:
            url: Registration service endpoint
            chain: Chain network the validators belong to
            timeout: Request timeout in seconds

        Raises:
            ConfigError: If url is empty
        """
        if not url:
            msg = "Registration URL cannot be empty"
            raise ConfigError(msg)

        self.url = url
        self.chain = chain
        self.timeout = timeout

    def build_request(self, keyshares: Sequence[KeyShare]) -> dict[str, Any]:
        """Build the JSON body of a registration request."""
        return {
            "chain": self.chain,
            "keyshares": [keyshare.to_payload() for keyshare in keyshares],
        }

    async def register(
        self, client: httpx.AsyncClient, keyshares: Sequence[KeyShare]
    ) -> None:
        """Submit key shares to the registration service.

        Args:
            client: HTTP client instance
            keyshares: Key shares registered together

        Raises:
            RegistrationError: If the request fails, returns a non-2xx status
                or the service reports an error
        """
        try:
            response = await client.post(
                self.url, json=self.build_request(keyshares), timeout=self.timeout
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            msg = (
                f"Registration service returned HTTP {e.response.status_code}: "
                f"{e.response.text[:100] if e.response.text else ''}"
            )
            raise RegistrationError(msg) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            msg = f"Registration request failed: {e}"
            raise RegistrationError(msg) from e

        result = _json_or_none(response)
        if isinstance(result, dict) and result.get("error"):
            msg = f"Registration service error: {result['error']}"
            raise RegistrationError(msg)

        tx_hash = result.get("transactionHash") if isinstance(result, dict) else None
        logger.info(
            "Registration accepted for %d validators (tx=%s)",
            len(keyshares),
            tx_hash or "n/a",
        )


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


__all__ = ["HttpRegistrar", "Registrar"]
