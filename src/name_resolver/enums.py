"""
Enumeration types for the name resolver.

These enums provide type-safe constants for record kinds, encodings,
decode outcomes and error codes throughout the system.
"""

from enum import Enum
from typing import Optional


class RecordType(Enum):
    """
    Record kinds checked during resolution.

    Declaration order is resolution priority: the first member wins over
    every later one. The value is the record name used on-chain.
    """

    URL = "url"
    IPFS = "IPFS"
    ARWV = "ARWV"
    SHDW = "SHDW"
    A = "A"
    CNAME = "CNAME"

    @property
    def priority(self) -> int:
        """Position in the priority order (0 is highest)."""
        return list(RecordType).index(self)

    @classmethod
    def from_label(cls, label: str) -> Optional["RecordType"]:
        """Look up a record type by name, ignoring case."""
        wanted = label.lower()
        for record_type in cls:
            if record_type.value.lower() == wanted:
                return record_type
        return None


class EncodingVersion(Enum):
    """On-chain record layout."""

    V1 = "v1"  # legacy
    V2 = "v2"


class DecodeStatus(Enum):
    """Outcome of decoding a single record payload."""

    RESOLVED = "resolved"
    ABSENT = "absent"
    MALFORMED = "malformed"
    STALE = "stale"


class Validation(Enum):
    """Validation kinds stored in a V2 record header."""

    NONE = 0
    SOLANA = 1
    ETHEREUM = 2
    UNVERIFIED_SOLANA = 3

    @property
    def id_length(self) -> int:
        """Length in bytes of the id this validation kind stores."""
        return {
            Validation.NONE: 0,
            Validation.SOLANA: 32,
            Validation.ETHEREUM: 20,
            Validation.UNVERIFIED_SOLANA: 32,
        }[self]


class TransportErrorCode(Enum):
    """Error codes for RPC transport failures."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"
    RPC_ERROR = "rpc_error"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return list(LogLevel).index(self)
