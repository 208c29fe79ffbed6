"""
Resolution Orchestrator for the name resolver.

This module coordinates all components to resolve a domain into a record:
- Domain parsing and candidate key derivation
- Registry lookup for the current (or NFT) owner
- One batch fetch of every candidate record account
- Per-slot decoding with V2 staleness validation
- First-valid selection in request order

The request list holds every V2 slot before every legacy slot, each group
in RecordType priority order. Selection scans that list, so a V2 record of
a lower-priority type is chosen over a legacy record of a higher-priority
type.
"""

import asyncio
import time
from typing import Optional

from .audit_logger import AuditLogger
from .derivation import build_slots, domain_key
from .domain_parser import DomainParser
from .enums import LogLevel
from .exceptions import RecordNotFound
from .formatter import format_url
from .models import DecodeResult, RecordSlot, ResolutionResult, ResolvedRecord
from .record_decoder import RecordDecoder
from .registry import RegistryClient
from .rpc_client import RpcClient


class ResolutionOrchestrator:
    """
    Main orchestrator for domain resolution.

    Holds no per-request state; one instance serves concurrent requests.
    """

    def __init__(
        self,
        rpc: RpcClient,
        registry: Optional[RegistryClient] = None,
        decoder: Optional[RecordDecoder] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            rpc: Client used for the batch record fetch
            registry: Registry client; built on ``rpc`` when omitted
            decoder: Record decoder; default decoder tables when omitted
            logger: Optional audit logger
        """
        self._rpc = rpc
        self._registry = registry or RegistryClient(rpc, logger=logger)
        self._decoder = decoder or RecordDecoder()
        self._parser = DomainParser()
        self._logger = logger

    async def resolve(self, domain: str) -> ResolvedRecord:
        """
        Resolve a domain to its highest-ranked valid record.

        Raises:
            InvalidDomainFormat: If the domain cannot be parsed
            DomainNotFound: If the domain has no registry entry
            RecordNotFound: If no candidate record is valid
            TransportError: If an RPC call fails
        """
        result = await self.resolve_detailed(domain)
        return result.record

    async def resolve_url(self, domain: str) -> str:
        """Resolve a domain and format the redirect target."""
        result = await self.resolve_detailed(domain)
        return result.url

    async def resolve_detailed(self, domain: str) -> ResolutionResult:
        """Resolve a domain, keeping every decoded slot for diagnostics."""
        start_time = time.perf_counter()

        parsed = self._parser.parse(domain)
        name_key = domain_key(parsed)
        slots = build_slots(name_key, parsed.record_types)

        self._log_debug("Resolving domain", {
            "domain": parsed.name,
            "domain_key": str(name_key),
            "record_selector": parsed.record_type.value if parsed.record_type else None,
            "slots": len(slots),
        })

        # The batch fetch depends only on the keys, so it runs alongside
        # the registry lookup; both finish before any staleness check.
        entry, payloads = await asyncio.gather(
            self._registry.retrieve(name_key),
            self._rpc.get_multiple_accounts([slot.key for slot in slots]),
        )
        owner = entry.effective_owner

        decoded: list[tuple[RecordSlot, DecodeResult]] = []
        for slot, payload in zip(slots, payloads):
            outcome = self._decoder.decode(payload, slot.record_type, slot.version, owner)
            if not outcome.resolved and payload is not None:
                self._log_debug("Record rejected", {
                    "domain": parsed.name,
                    "record": slot.record_type.value,
                    "version": slot.version.value,
                    "status": outcome.status.value,
                    "reason": outcome.reason,
                })
            decoded.append((slot, outcome))

        selected = self.select(decoded)
        duration_ms = (time.perf_counter() - start_time) * 1000

        if selected is None:
            raise RecordNotFound(
                code="no_valid_record",
                message=f"No valid record found for {parsed.name}",
                details={"domain": parsed.name, "checked": len(slots)},
            )

        url = format_url(selected.record_type, selected.value)
        self._log_info("Domain resolved", {
            "domain": parsed.name,
            "record": selected.record_type.value,
            "url": url,
            "duration_ms": round(duration_ms, 1),
        })

        return ResolutionResult(
            domain=parsed.name,
            record=selected,
            url=url,
            owner=owner,
            decoded=decoded,
            duration_ms=duration_ms,
        )

    @staticmethod
    def select(decoded: list[tuple[RecordSlot, DecodeResult]]) -> Optional[ResolvedRecord]:
        """First resolved slot in request order, or None."""
        for slot, outcome in decoded:
            if outcome.resolved:
                return ResolvedRecord(record_type=slot.record_type, value=outcome.value)
        return None

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(LogLevel.INFO, "ResolutionOrchestrator", message, data)

    def _log_debug(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(LogLevel.DEBUG, "ResolutionOrchestrator", message, data)
