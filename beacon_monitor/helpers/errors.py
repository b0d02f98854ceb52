"""Error types raised by the monitor.

Recoverable errors (transport, parse, dispatch) are handled inside the poll
loop. ``ConfigError`` and ``PersistenceError`` end the process.
"""


class MonitorError(Exception):
    """Base class for all monitor errors."""


class ConfigError(MonitorError, ValueError):
    """Missing or invalid setting, or unreadable required input file."""


class TransportError(MonitorError):
    """Network or HTTP failure while talking to an external service."""


class ParseError(MonitorError):
    """Malformed response body or unrecognised value in a response."""


class BeaconTransportError(TransportError):
    """Beacon node request failed or returned a non-success status."""


class BeaconParseError(ParseError):
    """Beacon node response could not be parsed."""


class DispatchError(MonitorError):
    """Registration of one or more validators failed."""


class RegistrationError(DispatchError):
    """Registration service rejected or failed a registration call."""


class PersistenceError(MonitorError):
    """Status file could not be written."""


class InvalidPubkeyError(ValueError):
    """Value is not a 0x-prefixed 48-byte hex public key."""


__all__ = [
    "BeaconParseError",
    "BeaconTransportError",
    "ConfigError",
    "DispatchError",
    "InvalidPubkeyError",
    "MonitorError",
    "ParseError",
    "PersistenceError",
    "RegistrationError",
    "TransportError",
]
