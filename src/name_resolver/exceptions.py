"""
Exception classes for the name resolver.

All exceptions inherit from NameResolverError and provide structured
error information with codes, messages, and optional details.

Record decode failures are deliberately absent here: they are reported
as DecodeResult values and never raised.
"""

from typing import Optional


class NameResolverError(Exception):
    """Base exception for all name resolver errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidDomainFormat(NameResolverError):
    """Raised when a domain string violates registry naming constraints."""

    pass


class DomainNotFound(NameResolverError):
    """Raised when the domain has no registry entry."""

    pass


class RecordNotFound(NameResolverError):
    """Raised when no candidate record resolved to a valid value."""

    pass


class TransportError(NameResolverError):
    """Raised when RPC network operations fail."""

    pass


class RpcError(TransportError):
    """Raised when the RPC node answers with a JSON-RPC error object."""

    pass
