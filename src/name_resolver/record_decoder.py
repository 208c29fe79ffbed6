"""
Record decoder for legacy and V2 SNS record accounts.

This module interprets a raw account payload for one record type and
encoding. It never raises on bad data: every payload maps to a
DecodeResult which is either RESOLVED with a printable value or carries
the rejection kind (ABSENT, MALFORMED, STALE) and a reason.

Layouts:
- Legacy: 96-byte name registry header, then the record content padded
  with trailing zero bytes.
- V2: 96-byte name registry header, 8-byte record header
  (u16 staleness validation, u16 right-of-association validation,
  u32 content length, little-endian), staleness id, right-of-association
  id, content.
"""

import ipaddress
import struct
from typing import Callable, Optional

import idna
from solders.pubkey import Pubkey

from .enums import DecodeStatus, EncodingVersion, RecordType, Validation
from .models import DecodeResult
from .registry import NAME_REGISTRY_HEADER_LEN


RECORD_HEADER_FORMAT = "<HHI"
RECORD_HEADER_LEN = struct.calcsize(RECORD_HEADER_FORMAT)

ContentDecoder = Callable[[bytes], str]


def _decode_text(content: bytes) -> str:
    value = content.decode("utf-8")
    if not value or not value.isprintable():
        raise ValueError("record content is not printable text")
    return value


def _decode_hostname(content: bytes) -> str:
    """UTF-8 hostname; punycode labels are returned in their unicode form."""
    labels = _decode_text(content).split(".")
    hostname = ".".join(
        idna.decode(label) if label.lower().startswith("xn--") else label
        for label in labels
    )
    if not hostname.isprintable():
        raise ValueError("hostname is not printable")
    return hostname


def _decode_ipv4(content: bytes) -> str:
    if len(content) != 4:
        raise ValueError(f"IPv4 record must be 4 bytes, got {len(content)}")
    return str(ipaddress.IPv4Address(content))


def _decode_legacy_ipv4(content: bytes) -> str:
    """
    Legacy A records hold either 4 raw bytes or a dotted string.

    Zero-padding removal can shorten an address ending in .0, so short
    contents that are not a dotted string are padded back to 4 bytes.
    """
    if len(content) == 4:
        return _decode_ipv4(content)
    try:
        return str(ipaddress.IPv4Address(_decode_text(content)))
    except ValueError:
        if len(content) < 4:
            return _decode_ipv4(content.ljust(4, b"\x00"))
        raise


CONTENT_DECODERS: dict[RecordType, ContentDecoder] = {
    RecordType.URL: _decode_text,
    RecordType.IPFS: _decode_text,
    RecordType.ARWV: _decode_text,
    RecordType.SHDW: _decode_text,
    RecordType.A: _decode_ipv4,
    RecordType.CNAME: _decode_hostname,
}

LEGACY_CONTENT_DECODERS: dict[RecordType, ContentDecoder] = {
    **CONTENT_DECODERS,
    RecordType.A: _decode_legacy_ipv4,
}


def trim_null_padding(data: bytes) -> bytes:
    return data.rstrip(b"\x00")


class RecordDecoder:
    """
    Decodes record payloads per encoding version and record type.

    Content decoding is looked up by record type, so new record kinds only
    need an entry in the decoder tables.
    """

    def __init__(
        self,
        content_decoders: Optional[dict[RecordType, ContentDecoder]] = None,
        legacy_content_decoders: Optional[dict[RecordType, ContentDecoder]] = None,
    ) -> None:
        self._content_decoders = CONTENT_DECODERS if content_decoders is None else content_decoders
        self._legacy_content_decoders = (
            LEGACY_CONTENT_DECODERS if legacy_content_decoders is None else legacy_content_decoders
        )

    def decode(
        self,
        payload: Optional[bytes],
        record_type: RecordType,
        version: EncodingVersion,
        owner: Pubkey,
    ) -> DecodeResult:
        """
        Decode one record payload.

        Args:
            payload: Raw account data, None if the account does not exist
            record_type: Record kind the payload was fetched for
            version: Encoding of the payload
            owner: Current owner of the domain, for V2 staleness checks

        Returns:
            DecodeResult, resolved only for a complete and valid record
        """
        if payload is None:
            return DecodeResult.rejected(DecodeStatus.ABSENT, "account does not exist")

        if len(payload) < NAME_REGISTRY_HEADER_LEN:
            return DecodeResult.rejected(
                DecodeStatus.MALFORMED,
                f"payload of {len(payload)} bytes is shorter than the registry header",
            )

        body = payload[NAME_REGISTRY_HEADER_LEN:]
        if version == EncodingVersion.V2:
            return self._decode_v2(body, record_type, owner)
        return self._decode_legacy(body, record_type)

    def _decode_legacy(self, body: bytes, record_type: RecordType) -> DecodeResult:
        content = trim_null_padding(body)
        if not content:
            return DecodeResult.rejected(DecodeStatus.ABSENT, "record is empty")
        return self._decode_content(content, record_type, self._legacy_content_decoders)

    def _decode_v2(self, body: bytes, record_type: RecordType, owner: Pubkey) -> DecodeResult:
        if len(body) < RECORD_HEADER_LEN:
            return DecodeResult.rejected(DecodeStatus.MALFORMED, "truncated V2 record header")

        staleness_kind, roa_kind, content_length = struct.unpack_from(
            RECORD_HEADER_FORMAT, body, 0
        )
        try:
            staleness_len = Validation(staleness_kind).id_length
            roa_len = Validation(roa_kind).id_length
        except ValueError:
            return DecodeResult.rejected(
                DecodeStatus.MALFORMED,
                f"unknown validation kind ({staleness_kind}, {roa_kind})",
            )

        data = body[RECORD_HEADER_LEN:]
        if len(data) < staleness_len:
            return DecodeResult.rejected(DecodeStatus.MALFORMED, "truncated staleness id")

        staleness_id = data[:staleness_len]
        if staleness_id != bytes(owner):
            return DecodeResult.rejected(
                DecodeStatus.STALE,
                "staleness id does not match the current owner",
            )

        start = staleness_len + roa_len
        if len(data) < start + content_length:
            return DecodeResult.rejected(DecodeStatus.MALFORMED, "truncated record content")

        content = data[start:start + content_length]
        if not content:
            return DecodeResult.rejected(DecodeStatus.ABSENT, "record is empty")
        return self._decode_content(content, record_type, self._content_decoders)

    def _decode_content(
        self,
        content: bytes,
        record_type: RecordType,
        decoders: dict[RecordType, ContentDecoder],
    ) -> DecodeResult:
        decoder = decoders.get(record_type)
        if decoder is None:
            return DecodeResult.rejected(
                DecodeStatus.MALFORMED,
                f"no decoder for record type {record_type.value}",
            )
        try:
            return DecodeResult.ok(decoder(content))
        except ValueError as e:
            return DecodeResult.rejected(DecodeStatus.MALFORMED, str(e) or type(e).__name__)
