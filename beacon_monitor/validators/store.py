"""Validator status store backed by a JSON file.

The file maps public keys to their last observed status and is the only
durable record of lifecycle state. Reads fail soft, writes fail loudly.
"""

import json
import os
from pathlib import Path
import tempfile

from collections.abc import Iterable

from pydantic import TypeAdapter, ValidationError

from beacon_monitor.helpers.errors import PersistenceError
from beacon_monitor.helpers.logging import get_logger
from beacon_monitor.validators.models import Pubkey, StatusRecord, ValidatorStatus
from beacon_monitor.validators.reconciler import seed_record


logger = get_logger(__name__)

_RECORD_ADAPTER: TypeAdapter[dict[str, ValidatorStatus]] = TypeAdapter(
    dict[Pubkey, ValidatorStatus]
)


class StatusStore:
    """Persisted mapping of validator public key to status."""

    def __init__(self, path: str | Path) -> None:
        """Initialize the store.

        Args:
            path: Location of the status JSON file.
        """
        self.path = Path(path)

    def load(self) -> StatusRecord:
        """Read the persisted status record.

        A missing, unreadable or corrupt file yields an empty record.

        Returns:
            Mapping of public key to status.
        """
        if not self.path.exists():
            logger.debug("No status file at %s, starting empty", self.path)
            return {}

        try:
            content = self.path.read_text(encoding="utf-8")
            return _RECORD_ADAPTER.validate_json(content or "{}")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s, starting empty: %s", self.path, e)
        except ValidationError as e:
            logger.warning(
                "Ignoring corrupt status file %s (%d errors): %s",
                self.path,
                e.error_count(),
                e.errors()[0]["msg"],
            )
        return {}

    def save(self, record: StatusRecord) -> None:
        """Atomically replace the status file with ``record``.

        The record is written to a temporary file next to the target and
        moved into place, so a crash never leaves a half-written file.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        payload = json.dumps(
            {pubkey: str(status) for pubkey, status in record.items()},
            indent=2,
            sort_keys=True,
        )
        directory = self.path.parent
        tmp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            msg = f"Failed to write {self.path}: {e}"
            raise PersistenceError(msg) from e

        logger.info("Saved %d validator statuses to %s", len(record), self.path)

    def clear(self) -> None:
        """Persist an empty record."""
        self.save({})

    def seed(self, pubkeys: Iterable[str]) -> list[str]:
        """Start tracking new keys as ``pending_queued``.

        Keys that are already tracked keep their recorded status.

        Args:
            pubkeys: Normalised public keys supplied by the operator.

        Returns:
            Keys that were added to the store.

        Raises:
            PersistenceError: If new keys were added but could not be saved.
        """
        record, added = seed_record(self.load(), pubkeys)
        for pubkey in added:
            logger.info("Added new validator to monitoring: %s", pubkey)
        if added:
            self.save(record)
        return added


__all__ = ["StatusStore"]
