"""
Candidate key derivation for SNS domains and records.

Every account the resolver reads is a program-derived address of the name
service program, seeded with a hashed name, an optional class and an
optional parent. Derivation is pure: the same (domain, record type,
encoding) always yields the same key.
"""

import hashlib
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from solders.pubkey import Pubkey

from .domain_parser import ParsedDomain, parse_domain
from .enums import EncodingVersion, RecordType
from .models import RecordSlot


HASH_PREFIX = "SPL Name Service"

NAME_PROGRAM_ID = Pubkey.from_string("namesLPneVptA9Z5rqUDD9tMTWEJwofgaYwp8cawRkX")

# Parent of every top-level .sol domain
ROOT_DOMAIN_ACCOUNT = Pubkey.from_string("58PwtjSDuFHuUkYjH9BYnnQKHfwo9reZhC2zMJv9JPkx")

SNS_RECORDS_ID = Pubkey.from_string("HP3D4D1ZCmohQGFVms2SS4LCANgJyksBf5s1F77FuFjZ")
CENTRAL_STATE_SNS_RECORDS = Pubkey.find_program_address([bytes(SNS_RECORDS_ID)], SNS_RECORDS_ID)[0]

NAME_TOKENIZER_ID = Pubkey.from_string("nftD3vbNkNqfj2Sd3HZwbpw4BxxKWr4AjGb9X38JeZk")
TOKENIZED_MINT_PREFIX = b"tokenized_name"

SUBDOMAIN_PREFIX = "\x00"
RECORD_V1_PREFIX = "\x01"
RECORD_V2_PREFIX = "\x02"

_ZERO_KEY = bytes(32)


@dataclass(frozen=True)
class CandidateKeys:
    """Record keys of a domain, both lists ordered like RecordType."""

    domain_key: Pubkey
    legacy: list[Pubkey]
    v2: list[Pubkey]


def hashed_name(name: str) -> bytes:
    return hashlib.sha256((HASH_PREFIX + name).encode("utf-8")).digest()


def name_account_key(
    hashed: bytes,
    name_class: Optional[Pubkey] = None,
    parent: Optional[Pubkey] = None,
) -> Pubkey:
    """Derive the name registry account for a hashed name."""
    seeds = [
        hashed,
        bytes(name_class) if name_class is not None else _ZERO_KEY,
        bytes(parent) if parent is not None else _ZERO_KEY,
    ]
    key, _bump = Pubkey.find_program_address(seeds, NAME_PROGRAM_ID)
    return key


def domain_key(domain: ParsedDomain) -> Pubkey:
    """Registry account of a domain or subdomain."""
    if domain.is_subdomain:
        sub, parent_name = domain.labels
        parent = name_account_key(hashed_name(parent_name), parent=ROOT_DOMAIN_ACCOUNT)
        return name_account_key(hashed_name(SUBDOMAIN_PREFIX + sub), parent=parent)
    return name_account_key(hashed_name(domain.labels[0]), parent=ROOT_DOMAIN_ACCOUNT)


def record_key(parent_domain_key: Pubkey, record_type: RecordType) -> Pubkey:
    """Legacy (V1) record account of a domain."""
    return name_account_key(
        hashed_name(RECORD_V1_PREFIX + record_type.value),
        parent=parent_domain_key,
    )


def record_v2_key(parent_domain_key: Pubkey, record_type: RecordType) -> Pubkey:
    """V2 record account of a domain, classed under the records program."""
    return name_account_key(
        hashed_name(RECORD_V2_PREFIX + record_type.value),
        name_class=CENTRAL_STATE_SNS_RECORDS,
        parent=parent_domain_key,
    )


def tokenized_mint(name_key: Pubkey) -> Pubkey:
    """Mint of the NFT wrapping a tokenized domain."""
    key, _bump = Pubkey.find_program_address(
        [TOKENIZED_MINT_PREFIX, bytes(name_key)], NAME_TOKENIZER_ID
    )
    return key


def derive_keys(domain: Union[str, ParsedDomain]) -> CandidateKeys:
    """
    Derive the legacy and V2 record keys of a domain.

    Args:
        domain: A domain string or an already parsed domain

    Returns:
        CandidateKeys with one key per RecordType in each encoding

    Raises:
        InvalidDomainFormat: If a string domain fails to parse
    """
    parsed = domain if isinstance(domain, ParsedDomain) else parse_domain(domain)
    key = domain_key(parsed)
    return CandidateKeys(
        domain_key=key,
        legacy=[record_key(key, record_type) for record_type in RecordType],
        v2=[record_v2_key(key, record_type) for record_type in RecordType],
    )


def build_slots(parent_domain_key: Pubkey, record_types: Iterable[RecordType]) -> list[RecordSlot]:
    """
    Build the combined request list: every V2 slot, then every legacy slot.

    Within each encoding the slots follow the given priority order, so a
    V2 record of any type is preferred over every legacy record.
    """
    record_types = list(record_types)
    v2 = [
        RecordSlot(record_v2_key(parent_domain_key, t), t, EncodingVersion.V2)
        for t in record_types
    ]
    legacy = [
        RecordSlot(record_key(parent_domain_key, t), t, EncodingVersion.V1)
        for t in record_types
    ]
    return v2 + legacy
