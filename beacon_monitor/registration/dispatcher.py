"""Registration dispatcher for newly activated validators."""

from collections.abc import Iterable, Mapping

import httpx

from beacon_monitor.helpers.errors import DispatchError
from beacon_monitor.helpers.logging import get_logger
from beacon_monitor.registration.models import (
    DispatchMode,
    KeyShare,
    RegistrationOutcome,
)
from beacon_monitor.registration.registrar import Registrar


logger = get_logger(__name__)


class RegistrationDispatcher:
    """Hands activated validators and their key shares to a registrar.

    Registration failures are logged and reported as outcomes; they never
    propagate to the caller.
    """

    def __init__(
        self, registrar: Registrar, mode: DispatchMode = DispatchMode.BULK
    ) -> None:
        """Initialize dispatcher.

        Args:
            registrar: Service performing the registration call
            mode: Register all validators in one call or one call per validator
        """
        self.registrar = registrar
        self.mode = mode

    async def dispatch(
        self,
        client: httpx.AsyncClient,
        pubkeys: Iterable[str],
        keyshares: Mapping[str, KeyShare],
    ) -> dict[str, RegistrationOutcome]:
        """Register newly activated validators.

        Args:
            client: HTTP client instance
            pubkeys: Validators that just became ``active_ongoing``
            keyshares: Key-share index keyed by public key

        Returns:
            Outcome per public key
        """
        outcomes: dict[str, RegistrationOutcome] = {}
        resolved: list[KeyShare] = []

        for pubkey in dict.fromkeys(pubkeys):
            keyshare = keyshares.get(pubkey)
            if keyshare is None:
                logger.warning("No key shares found for pubkey: %s", pubkey)
                outcomes[pubkey] = RegistrationOutcome.SKIPPED
                continue
            resolved.append(keyshare)

        if not resolved:
            return outcomes

        logger.info(
            "Registering %d activated validators (%s)", len(resolved), self.mode
        )

        if self.mode is DispatchMode.BULK:
            outcome = await self._register(client, resolved)
            outcomes.update({keyshare.public_key: outcome for keyshare in resolved})
        else:
            for keyshare in resolved:
                outcomes[keyshare.public_key] = await self._register(
                    client, [keyshare]
                )

        return outcomes

    async def _register(
        self, client: httpx.AsyncClient, batch: list[KeyShare]
    ) -> RegistrationOutcome:
        pubkeys = [keyshare.public_key for keyshare in batch]
        try:
            await self.registrar.register(client, batch)
        except (DispatchError, httpx.HTTPError) as e:
            logger.error("Failed to register validators %s: %s", pubkeys, e)
            return RegistrationOutcome.FAILED
        except Exception:
            logger.exception("Unexpected error registering validators %s", pubkeys)
            return RegistrationOutcome.FAILED

        for pubkey in pubkeys:
            logger.info("Successfully registered validator %s", pubkey)
        return RegistrationOutcome.REGISTERED


__all__ = ["RegistrationDispatcher"]
