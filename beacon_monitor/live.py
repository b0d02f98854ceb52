"""Live validator activation monitor.

Polls a beacon node once per epoch for validators that are still pending,
records their status and registers every validator that becomes active
with the validator network.

Processing flow per cycle:
1. Load the status file and select pending validators
2. Query the beacon node for their current status
3. Reconcile observed state with the stored record
4. Persist the new record
5. Register validators that just became ``active_ongoing``

The process exits once no tracked validator is pending.

Usage:
    python -m beacon_monitor.live 0x... 0x...
"""

import asyncio
from enum import StrEnum
import signal
import sys

from collections.abc import Iterable, Mapping, Sequence

import httpx
from pydantic import BaseModel, ConfigDict, Field

from beacon_monitor.helpers.config import MonitorSettings, load_settings
from beacon_monitor.helpers.constants import PERSIST_RETRIES, PERSIST_RETRY_DELAY
from beacon_monitor.helpers.errors import (
    ConfigError,
    ParseError,
    PersistenceError,
    TransportError,
)
from beacon_monitor.helpers.http import create_http_client, retry_with_backoff
from beacon_monitor.helpers.logging import get_logger
from beacon_monitor.helpers.parsers import (
    is_valid_pubkey,
    next_poll_time,
    normalize_pubkey,
)
from beacon_monitor.registration.dispatcher import RegistrationDispatcher
from beacon_monitor.registration.keyshares import load_keyshares
from beacon_monitor.registration.models import (
    DispatchMode,
    KeyShare,
    RegistrationOutcome,
)
from beacon_monitor.registration.registrar import HttpRegistrar
from beacon_monitor.validators.beacon import BeaconClient
from beacon_monitor.validators.models import StatusRecord
from beacon_monitor.validators.reconciler import pending_keys, reconcile
from beacon_monitor.validators.store import StatusStore


logger = get_logger(__name__)

HELP_TEXT = """
beacon-monitor - Ethereum beacon node validator activation monitor

Usage:
  beacon-monitor [PUBKEY ...]

  Provide validator public keys to monitor their activation status. Without
  public keys, validators previously stored as pending in the status file
  are monitored.

Environment variables:
  BEACON_NODE_URL    Required: protocol + host + port of the beacon node
  KEYSHARES_FILE     Required: key-share JSON file used for registration
  REGISTRATION_URL   Required: registration service endpoint
  STATUS_FILE        Optional: status file (default: validators.json)
  CHAIN              Optional: mainnet, hoodi or sepolia (default: mainnet)
  REGISTRATION_MODE  Optional: bulk or per_key (default: bulk)
  EPOCH_SECONDS      Optional: poll interval in seconds (default: 384)
  LOG_LEVEL          Optional: DEBUG, INFO, WARNING, ERROR (default: INFO)

Examples:
  BEACON_NODE_URL=http://localhost:5052 beacon-monitor 0x... 0x...
"""


class MonitorState(StrEnum):
    """Lifecycle of the monitor process."""

    STARTING = "starting"
    SEEDING = "seeding"
    POLLING = "polling"
    DONE = "done"
    STOPPED = "stopped"
    FATAL = "fatal"


class CycleResult(BaseModel):
    """Effects of one poll cycle."""

    activated: list[str] = Field(default_factory=list)
    pending: list[str] = Field(default_factory=list)
    outcomes: dict[str, RegistrationOutcome] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def is_complete(self) -> bool:
        """Whether no tracked validator is pending after the cycle."""
        return not self.pending


def wants_help(args: Iterable[str]) -> bool:
    """Check whether the command line asks for usage help."""
    return any(arg in {"-h", "--help"} for arg in args)


def extract_pubkeys(args: Iterable[str]) -> list[str]:
    """Extract validator public keys from command line arguments.

    Malformed keys are logged and dropped. Keys are normalised to lower case
    and de-duplicated.

    Args:
        args: Command line arguments without the program name

    Returns:
        Valid public keys in first-seen order
    """
    pubkeys: list[str] = []
    for arg in args:
        if arg.startswith("-"):
            continue
        if not is_valid_pubkey(arg):
            logger.warning("Ignoring invalid validator public key: %s", arg)
            continue
        pubkeys.append(normalize_pubkey(arg))
    return list(dict.fromkeys(pubkeys))


class LiveMonitor:
    """Poll loop driver tracking validator activations."""

    def __init__(
        self,
        settings: MonitorSettings,
        keyshares: Mapping[str, KeyShare],
        *,
        store: StatusStore | None = None,
        beacon: BeaconClient | None = None,
        dispatcher: RegistrationDispatcher | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            settings: Validated runtime settings.
            keyshares: Key-share index keyed by public key.
            store: Status store, defaults to ``settings.status_file``.
            beacon: Beacon client, defaults to ``settings.beacon_node_url``.
            dispatcher: Registration dispatcher, defaults to an HTTP registrar.
            http_client: Shared HTTP client, closed by ``cleanup``.
        """
        self.settings = settings
        self.keyshares = keyshares
        self.store = store or StatusStore(settings.status_file)
        self.beacon = beacon or BeaconClient(str(settings.beacon_node_url))
        self.dispatcher = dispatcher or RegistrationDispatcher(
            HttpRegistrar(str(settings.registration_url), settings.chain),
            DispatchMode(settings.registration_mode),
        )
        self.http_client = http_client or create_http_client()

        self.state = MonitorState.STARTING
        self.cycles = 0
        self.registrations = 0
        self._shutdown = asyncio.Event()

    @property
    def should_shutdown(self) -> bool:
        """Whether a shutdown was requested."""
        return self._shutdown.is_set()

    def seed(self, pubkeys: Sequence[str]) -> list[str]:
        """Start tracking operator-supplied keys.

        Raises:
            PersistenceError: If the seeded record cannot be saved.
        """
        self.state = MonitorState.SEEDING
        if not pubkeys:
            logger.info("No pubkeys provided via CLI")
            return []

        logger.info("Initial pubkeys: %d", len(pubkeys))
        added = self.store.seed(pubkeys)
        logger.info(
            "%d new, %d already tracked", len(added), len(pubkeys) - len(added)
        )
        return added

    @retry_with_backoff(
        max_retries=PERSIST_RETRIES,
        base_delay=PERSIST_RETRY_DELAY,
        retry_on=(PersistenceError,),
    )
    async def persist(self, record: StatusRecord) -> None:
        """Save the status record, retrying failed writes."""
        self.store.save(record)

    async def poll_once(self) -> CycleResult:
        """Run one reconciliation cycle.

        Returns:
            Activations, registration outcomes and the remaining pending set.

        Raises:
            TransportError: If the beacon node cannot be reached.
            ParseError: If the beacon response is malformed.
            PersistenceError: If the new record cannot be saved.
        """
        self.cycles += 1
        previous = self.store.load()
        pending = pending_keys(previous)
        if not pending:
            return CycleResult()

        logger.info("Total pending validators to monitor: %d", len(pending))
        fetched = await self.beacon.fetch_validators(self.http_client, pending)
        result = reconcile(previous, fetched)
        if result.changed:
            logger.info("%d validators changed status", len(result.changed))
        if result.is_complete:
            logger.info("No tracked validators left pending")

        # Persist before registering so a transition is never dispatched twice
        await self.persist(result.record)

        outcomes: dict[str, RegistrationOutcome] = {}
        if result.activated:
            logger.info(
                "Found %d activated validators to register", len(result.activated)
            )
            outcomes = await self.dispatcher.dispatch(
                self.http_client, result.activated, self.keyshares
            )
            self.registrations += sum(
                outcome is RegistrationOutcome.REGISTERED
                for outcome in outcomes.values()
            )

        return CycleResult(
            activated=result.activated, pending=result.pending, outcomes=outcomes
        )

    async def wait(self, seconds: float) -> None:
        """Sleep until the next cycle or until shutdown is requested."""
        try:
            await asyncio.wait_for(self._shutdown.wait(), timeout=seconds)
        except TimeoutError:
            pass

    def shutdown(self) -> None:
        """Gracefully stop the monitor before its next cycle."""
        logger.info("Shutdown signal received, stopping...")
        self._shutdown.set()

    async def cleanup(self) -> None:
        """Clean up resources."""
        await self.http_client.aclose()

    async def run(self, pubkeys: Sequence[str] = ()) -> MonitorState:
        """Seed the store and poll until every validator has activated.

        Args:
            pubkeys: Operator-supplied keys to start tracking.

        Returns:
            ``DONE`` when nothing is left pending, ``STOPPED`` on shutdown.

        Raises:
            PersistenceError: If the status file cannot be written.
        """
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.shutdown)

        try:
            self.seed(pubkeys)
            self.state = MonitorState.POLLING
            interval = self.settings.epoch_seconds

            while not self.should_shutdown:
                logger.info("Polling for new validator activations...")
                try:
                    cycle = await self.poll_once()
                except (TransportError, ParseError) as e:
                    logger.error("Error during polling: %s", e)
                    logger.info(
                        "Waiting for next interval, retrying at %s",
                        next_poll_time(interval),
                    )
                except PersistenceError:
                    raise
                except Exception:
                    logger.exception("Error during polling")
                    logger.info(
                        "Waiting for next interval, retrying at %s",
                        next_poll_time(interval),
                    )
                else:
                    if cycle.is_complete:
                        logger.info("All pending validators have been activated!")
                        logger.info("Clearing %s", self.store.path)
                        await self.persist({})
                        self.state = MonitorState.DONE
                        return self.state
                    logger.info(
                        "%d validators still pending, next poll at %s",
                        len(cycle.pending),
                        next_poll_time(interval),
                    )

                if self.should_shutdown:
                    break
                await self.wait(interval)

            self.state = MonitorState.STOPPED
            return self.state
        except PersistenceError:
            self.state = MonitorState.FATAL
            raise
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            await self.cleanup()
            logger.info(
                "Monitor stopped after %d cycles (%d registrations)",
                self.cycles,
                self.registrations,
            )


async def main(argv: Sequence[str]) -> int:
    """Main entry point.

    Args:
        argv: Command line arguments without the program name

    Returns:
        Process exit code
    """
    if wants_help(argv):
        print(HELP_TEXT)
        return 0

    pubkeys = extract_pubkeys(argv)

    try:
        settings = load_settings()
        keyshares = load_keyshares(settings.keyshares_file)
    except ConfigError as e:
        logger.error("Fatal error: %s", e)
        return 1

    logger.info("beacon-monitor starting...")
    logger.info("Beacon node: %s", settings.beacon_node_url)

    monitor = LiveMonitor(settings, keyshares)
    try:
        await monitor.run(pubkeys)
    except PersistenceError:
        logger.exception("Fatal error")
        return 1
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main(sys.argv[1:])))


if __name__ == "__main__":
    run()
