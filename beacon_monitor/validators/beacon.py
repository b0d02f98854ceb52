"""Beacon node REST client for validator status queries."""

from collections.abc import Iterable

import httpx
from pydantic import ValidationError

from beacon_monitor.helpers.constants import (
    BEACON_API_VERSION,
    BEACON_STATE_ID,
    DEFAULT_TIMEOUT,
)
from beacon_monitor.helpers.errors import (
    BeaconParseError,
    BeaconTransportError,
    ConfigError,
)
from beacon_monitor.helpers.logging import get_logger
from beacon_monitor.helpers.parsers import unique_pubkeys
from beacon_monitor.validators.models import (
    ALL_STATUSES,
    ValidatorInfo,
    ValidatorResponse,
)


logger = get_logger(__name__)


class BeaconClient:
    """Fetches validator state from a beacon node.

    The client performs exactly one request per call and never retries;
    retrying is left to the poll loop.
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize beacon client.

        Args:
            base_url: Protocol, host and port of the beacon node
            timeout: Default timeout for requests in seconds

        Raises:
            ConfigError: If base_url is empty
        """
        if not base_url:
            msg = "Beacon node URL cannot be empty"
            raise ConfigError(msg)

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def validators_url(self) -> str:
        """Endpoint listing validators of the head state."""
        return (
            f"{self.base_url}/{BEACON_API_VERSION}/beacon/states/"
            f"{BEACON_STATE_ID}/validators"
        )

    def build_params(self, pubkeys: Iterable[str]) -> list[tuple[str, str]]:
        """Build query parameters for a validator status request.

        Every lifecycle status is requested; the key set itself limits the
        result to pending validators.

        Args:
            pubkeys: Public keys to query, duplicates are dropped

        Returns:
            Ordered query parameters, one ``id`` per unique key
        """
        params = [("status", ",".join(str(status) for status in ALL_STATUSES))]
        params.extend(("id", pubkey) for pubkey in unique_pubkeys(pubkeys))
        return params

    async def fetch_validators(
        self,
        client: httpx.AsyncClient,
        pubkeys: Iterable[str],
        *,
        timeout: float | None = None,
    ) -> dict[str, ValidatorInfo]:
        """Fetch the current status of the given validators.

        Args:
            client: HTTP client instance
            pubkeys: Public keys to query
            timeout: Optional timeout override

        Returns:
            Validator entries keyed by normalised public key. Keys unknown to
            the beacon node are absent.

        Raises:
            ValueError: If no public keys are given
            BeaconTransportError: If the request fails or returns a non-2xx status
            BeaconParseError: If the body is not a valid validators response
        """
        params = self.build_params(pubkeys)
        if len(params) == 1:
            msg = "No pubkeys provided for fetch"
            raise ValueError(msg)

        logger.info(
            "Fetching %d validators from %s", len(params) - 1, self.validators_url
        )

        try:
            response = await client.get(
                self.validators_url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=timeout or self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            msg = (
                f"Beacon node returned HTTP {e.response.status_code}: "
                f"{e.response.text[:100] if e.response.text else ''}"
            )
            raise BeaconTransportError(msg) from e
        except httpx.HTTPError as e:
            msg = f"Failed to fetch validators: {e}"
            raise BeaconTransportError(msg) from e

        try:
            body = ValidatorResponse.model_validate_json(response.content)
        except ValidationError as e:
            msg = f"Invalid validators response: {e.errors()[0]['msg']}"
            raise BeaconParseError(msg) from e

        logger.debug(
            "Received %d validators (execution_optimistic=%s)",
            len(body.data),
            body.execution_optimistic,
        )
        return {info.pubkey: info for info in body.data}


__all__ = ["BeaconClient"]
