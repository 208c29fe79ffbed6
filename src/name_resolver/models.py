"""
Data models for the name resolver.

Every structure here is transient: built for one resolution request and
discarded once the response is formatted.
"""

from dataclasses import dataclass, field
from typing import Optional

from solders.pubkey import Pubkey

from .enums import DecodeStatus, EncodingVersion, RecordType


@dataclass(frozen=True)
class RecordSlot:
    """A lookup key together with the record it stands for."""

    key: Pubkey
    record_type: RecordType
    version: EncodingVersion


@dataclass
class RegistryEntry:
    """Header of a name registry account plus its trailing data."""

    parent_name: Pubkey
    owner: Pubkey
    name_class: Pubkey
    data: bytes = b""
    nft_owner: Optional[Pubkey] = None

    @property
    def effective_owner(self) -> Pubkey:
        """NFT holder when the domain is tokenized, registry owner otherwise."""
        return self.nft_owner if self.nft_owner is not None else self.owner


@dataclass(frozen=True)
class ResolvedRecord:
    """A record type and its decoded value."""

    record_type: RecordType
    value: str


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding one payload; value is set only when resolved."""

    status: DecodeStatus
    value: Optional[str] = None
    reason: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.status == DecodeStatus.RESOLVED

    @classmethod
    def ok(cls, value: str) -> "DecodeResult":
        return cls(status=DecodeStatus.RESOLVED, value=value)

    @classmethod
    def rejected(cls, status: DecodeStatus, reason: str) -> "DecodeResult":
        return cls(status=status, reason=reason)


@dataclass
class ResolutionResult:
    """Full trace of a resolution, used for diagnostics."""

    domain: str
    record: ResolvedRecord
    url: str
    owner: Pubkey
    decoded: list[tuple[RecordSlot, DecodeResult]] = field(default_factory=list)
    duration_ms: float = 0.0
