"""
Domain parsing and normalization module.

Turns a raw request path segment into the name the registry knows:
lowercased and stripped of the ``.sol`` suffix. A leading label naming a
record type is a record selector only when the rest is still a valid name
(``ipfs.dex.bonfida`` checks only the IPFS record of ``dex.bonfida``);
``ipfs.bonfida`` is the subdomain ``ipfs`` of ``bonfida``.
"""

import re
from dataclasses import dataclass
from typing import Optional

from name_resolver.enums import RecordType
from name_resolver.exceptions import InvalidDomainFormat


SOL_SUFFIX = ".sol"

# At most a second-level name and one subdomain level below it
MAX_LABELS = 2

# Control characters, whitespace and URL delimiters never appear in a name
FORBIDDEN_CHARS_PATTERN = re.compile(r'[\x00-\x1f\x7f\s/\\?#%]')


@dataclass(frozen=True)
class ParsedDomain:
    """A validated domain name."""

    raw: str
    labels: tuple[str, ...]
    record_type: Optional[RecordType] = None  # set when a record selector was given

    @property
    def name(self) -> str:
        """Registry name without the .sol suffix (e.g. 'dex.bonfida')."""
        return ".".join(self.labels)

    @property
    def is_subdomain(self) -> bool:
        return len(self.labels) == 2

    @property
    def record_types(self) -> list[RecordType]:
        """Record types to check, in priority order."""
        if self.record_type is not None:
            return [self.record_type]
        return list(RecordType)


class DomainParser:
    """
    Validates and normalizes domain names.

    Handles:
    - Conversion to lowercase (registry names are case-insensitive)
    - Removal of the optional .sol suffix
    - Detection of a leading record selector label on over-deep names
    - Rejection of forbidden characters, empty labels and deep nesting
    """

    def parse(self, raw_domain: str) -> ParsedDomain:
        """
        Parse and validate a domain string.

        Args:
            raw_domain: The raw domain string

        Returns:
            ParsedDomain with normalized labels

        Raises:
            InvalidDomainFormat: If the string cannot name a registry entry
        """
        if not raw_domain or not raw_domain.strip():
            raise InvalidDomainFormat(
                code="empty_input",
                message="Domain input is empty",
                details={"raw_input": raw_domain},
            )

        domain = raw_domain.strip().lower()

        forbidden = FORBIDDEN_CHARS_PATTERN.findall(domain)
        if forbidden:
            raise InvalidDomainFormat(
                code="forbidden_chars",
                message="Domain contains forbidden characters",
                details={"raw_input": raw_domain, "forbidden_chars": forbidden},
            )

        if domain.endswith(SOL_SUFFIX):
            domain = domain[: -len(SOL_SUFFIX)]

        labels = domain.split(".")
        if any(not label for label in labels):
            raise InvalidDomainFormat(
                code="empty_label",
                message="Domain contains an empty label",
                details={"raw_input": raw_domain},
            )

        # Two labels always name a subdomain; a selector only shortens a
        # name that would otherwise be too deep to exist.
        record_type = None
        if len(labels) > MAX_LABELS:
            record_type = RecordType.from_label(labels[0])
            if record_type is not None:
                labels = labels[1:]

        if len(labels) > MAX_LABELS:
            raise InvalidDomainFormat(
                code="too_many_labels",
                message="Only domains and direct subdomains can be resolved",
                details={"raw_input": raw_domain, "labels": labels},
            )

        return ParsedDomain(
            raw=raw_domain,
            labels=tuple(labels),
            record_type=record_type,
        )


def parse_domain(raw_domain: str) -> ParsedDomain:
    """Parse a domain with a default parser."""
    return DomainParser().parse(raw_domain)
