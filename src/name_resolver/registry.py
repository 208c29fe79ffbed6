"""
Registry client for SNS name accounts.

Reads a domain's name registry header and, for tokenized domains, the
holder of the wrapping NFT. The NFT holder takes precedence over the
stored owner when validating record staleness.
"""

import struct
from typing import Optional

from solders.pubkey import Pubkey

from .audit_logger import AuditLogger
from .derivation import tokenized_mint
from .enums import LogLevel
from .exceptions import DomainNotFound, RpcError
from .models import RegistryEntry
from .rpc_client import RpcClient


# parent name (32) + owner (32) + class (32)
NAME_REGISTRY_HEADER_LEN = 96

# SPL token account: mint (32) + owner (32) + amount (u64)
TOKEN_ACCOUNT_MIN_LEN = 72


def parse_registry_header(data: bytes) -> RegistryEntry:
    """
    Split a name registry account into its header fields and data.

    Raises:
        ValueError: If the account is shorter than the header
    """
    if len(data) < NAME_REGISTRY_HEADER_LEN:
        raise ValueError(
            f"name registry account is {len(data)} bytes, "
            f"header needs {NAME_REGISTRY_HEADER_LEN}"
        )
    return RegistryEntry(
        parent_name=Pubkey(data[0:32]),
        owner=Pubkey(data[32:64]),
        name_class=Pubkey(data[64:96]),
        data=bytes(data[NAME_REGISTRY_HEADER_LEN:]),
    )


class RegistryClient:
    """Looks up registry entries and their effective owners."""

    def __init__(self, rpc: RpcClient, logger: Optional[AuditLogger] = None) -> None:
        self._rpc = rpc
        self._logger = logger

    async def retrieve(self, domain_key: Pubkey) -> RegistryEntry:
        """
        Fetch the registry entry of a domain.

        Args:
            domain_key: Name account of the domain

        Returns:
            RegistryEntry with nft_owner set for tokenized domains

        Raises:
            DomainNotFound: If the name account does not exist or is malformed
            TransportError: If the RPC transport fails
        """
        data = await self._rpc.get_account_info(domain_key)
        if data is None:
            raise DomainNotFound(
                code="account_does_not_exist",
                message=f"No registry entry at {domain_key}",
                details={"domain_key": str(domain_key)},
            )

        try:
            entry = parse_registry_header(data)
        except ValueError as e:
            raise DomainNotFound(
                code="malformed_registry_entry",
                message=str(e),
                details={"domain_key": str(domain_key)},
            ) from e

        entry.nft_owner = await self.retrieve_nft_owner(domain_key)
        return entry

    async def retrieve_nft_owner(self, domain_key: Pubkey) -> Optional[Pubkey]:
        """
        Holder of the NFT wrapping a domain, if the domain is tokenized.

        An RPC error on this path (typically an unknown mint) means the
        domain is not tokenized; transport failures still propagate.
        """
        mint = tokenized_mint(domain_key)
        try:
            holders = await self._rpc.get_token_largest_accounts(mint)
        except RpcError as e:
            self._log(LogLevel.DEBUG, "No tokenized mint for domain", {
                "domain_key": str(domain_key),
                "mint": str(mint),
                "reason": e.message,
            })
            return None

        if not holders:
            return None

        data = await self._rpc.get_account_info(holders[0])
        if data is None or len(data) < TOKEN_ACCOUNT_MIN_LEN:
            return None

        (amount,) = struct.unpack_from("<Q", data, 64)
        if amount != 1:
            return None
        return Pubkey(data[32:64])

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "RegistryClient", message, data)
