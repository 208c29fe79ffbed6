"""
Configuration dataclasses for the name resolver.

This module defines the configuration structures used throughout the
system (RPC transport, HTTP server, logging) and loads them from the
process environment, optionally seeded from a .env file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_ERROR_URL = "https://sol-domain.org"
DEFAULT_HOME_MESSAGE = "Visit https://bonfida.org"


@dataclass
class RpcConfig:
    """Solana JSON-RPC endpoint configuration."""

    url: str = DEFAULT_RPC_URL
    commitment: str = "processed"
    timeout_seconds: float = 10.0


@dataclass
class ServerConfig:
    """HTTP redirect server configuration."""

    host: str = "127.0.0.1"
    port: int = 8787
    error_url: str = DEFAULT_ERROR_URL
    home_message: str = DEFAULT_HOME_MESSAGE


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class ResolverConfig:
    """Main configuration combining all sub-configurations."""

    rpc: RpcConfig = field(default_factory=RpcConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _str_env(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


def load_config(env_file: Optional[Path] = None) -> ResolverConfig:
    """
    Build configuration from environment variables.

    Values from ``env_file`` (or a .env in the working directory) are
    loaded first without overriding variables already set.

    Args:
        env_file: Optional path to a .env file

    Returns:
        ResolverConfig populated from the environment
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)

    return ResolverConfig(
        rpc=RpcConfig(
            url=_str_env("RPC_URL", DEFAULT_RPC_URL),
            commitment=_str_env("RPC_COMMITMENT", "processed"),
            timeout_seconds=_float_env("RPC_TIMEOUT", 10.0),
        ),
        server=ServerConfig(
            host=_str_env("HOST", "127.0.0.1"),
            port=_int_env("PORT", 8787),
            error_url=_str_env("ERROR_URL", DEFAULT_ERROR_URL),
            home_message=_str_env("HOME_MESSAGE", DEFAULT_HOME_MESSAGE),
        ),
        logging=LoggingConfig(
            level=_str_env("LOG_LEVEL", "info").lower(),
            output_format=_str_env("LOG_FORMAT", "text").lower(),
        ),
    )
