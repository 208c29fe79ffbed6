"""
Name Resolver - SNS domain to URL redirect service.

This package resolves Solana Name Service domains into target locators by
reading their legacy and V2 records from the chain, and serves HTTP
redirects to those locators.
"""

__version__ = "0.1.0"
__author__ = "Name Resolver Team"

from name_resolver.exceptions import (
    NameResolverError,
    InvalidDomainFormat,
    DomainNotFound,
    RecordNotFound,
    TransportError,
    RpcError,
)
from name_resolver.enums import (
    RecordType,
    EncodingVersion,
    DecodeStatus,
    Validation,
    TransportErrorCode,
    LogLevel,
)
from name_resolver.models import (
    RecordSlot,
    RegistryEntry,
    ResolvedRecord,
    DecodeResult,
    ResolutionResult,
)
from name_resolver.config import (
    RpcConfig,
    ServerConfig,
    LoggingConfig,
    ResolverConfig,
    load_config,
)
from name_resolver.audit_logger import (
    AuditLogger,
    LogEntry,
)
from name_resolver.domain_parser import (
    DomainParser,
    ParsedDomain,
    parse_domain,
)
from name_resolver.derivation import (
    CandidateKeys,
    derive_keys,
    build_slots,
    domain_key,
    record_key,
    record_v2_key,
)
from name_resolver.rpc_client import (
    RpcClient,
)
from name_resolver.registry import (
    RegistryClient,
)
from name_resolver.record_decoder import (
    RecordDecoder,
)
from name_resolver.formatter import (
    format_url,
)
from name_resolver.orchestrator import (
    ResolutionOrchestrator,
)
from name_resolver.app import (
    create_app,
    run_app,
)
from name_resolver.cli import (
    main as cli_main,
    create_parser,
)

__all__ = [
    # Exceptions
    "NameResolverError",
    "InvalidDomainFormat",
    "DomainNotFound",
    "RecordNotFound",
    "TransportError",
    "RpcError",
    # Enums
    "RecordType",
    "EncodingVersion",
    "DecodeStatus",
    "Validation",
    "TransportErrorCode",
    "LogLevel",
    # Models
    "RecordSlot",
    "RegistryEntry",
    "ResolvedRecord",
    "DecodeResult",
    "ResolutionResult",
    # Configuration
    "RpcConfig",
    "ServerConfig",
    "LoggingConfig",
    "ResolverConfig",
    "load_config",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Domain Parser
    "DomainParser",
    "ParsedDomain",
    "parse_domain",
    # Derivation
    "CandidateKeys",
    "derive_keys",
    "build_slots",
    "domain_key",
    "record_key",
    "record_v2_key",
    # RPC Client
    "RpcClient",
    # Registry
    "RegistryClient",
    # Record Decoder
    "RecordDecoder",
    # Formatter
    "format_url",
    # Orchestrator
    "ResolutionOrchestrator",
    # HTTP app
    "create_app",
    "run_app",
    # CLI
    "cli_main",
    "create_parser",
]
