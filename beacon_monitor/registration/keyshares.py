"""Loader for the pre-generated key-share file."""

from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from beacon_monitor.helpers.errors import ConfigError
from beacon_monitor.helpers.logging import get_logger
from beacon_monitor.registration.models import KeyShare


logger = get_logger(__name__)

_KEYSHARES_ADAPTER: TypeAdapter[list[KeyShare] | dict[str, KeyShare]] = TypeAdapter(
    list[KeyShare] | dict[str, KeyShare]
)


def load_keyshares(path: str | Path) -> dict[str, KeyShare]:
    """Load key shares and index them by public key.

    The file is either a JSON array of key-share objects or an object
    mapping public keys to key-share objects. In both cases the key share's
    own ``publicKey`` is the index; for duplicates the last entry wins.

    Args:
        path: Key-share JSON file

    Returns:
        Key shares keyed by normalised public key

    Raises:
        ConfigError: If the file is missing, unreadable or malformed
    """
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        msg = f"Failed to read key shares from {file_path}: {e}"
        raise ConfigError(msg) from e

    try:
        parsed = _KEYSHARES_ADAPTER.validate_json(content)
    except ValidationError as e:
        msg = f"Invalid key-share file {file_path}: {e.errors()[0]['msg']}"
        raise ConfigError(msg) from e

    entries = list(parsed.values()) if isinstance(parsed, dict) else parsed

    index: dict[str, KeyShare] = {}
    for keyshare in entries:
        if keyshare.public_key in index:
            logger.warning(
                "Duplicate key share for %s, using the last one", keyshare.public_key
            )
        index[keyshare.public_key] = keyshare

    logger.info("Loaded %d key shares from %s", len(index), file_path)
    return index


__all__ = ["load_keyshares"]
