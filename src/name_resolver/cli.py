"""
Command-line interface for the name resolver.

This module provides the main CLI entry point with commands for:
- resolve: Resolve a domain and print its redirect URL
- keys: Print every candidate record account of a domain
- serve: Run the HTTP redirect service
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .app import create_app, run_app
from .audit_logger import AuditLogger
from .config import ResolverConfig, load_config
from .derivation import build_slots, domain_key
from .domain_parser import parse_domain
from .exceptions import NameResolverError
from .orchestrator import ResolutionOrchestrator
from .rpc_client import RpcClient


# uvicorn does not know our 'warn' level name
UVICORN_LOG_LEVELS = {"debug": "debug", "info": "info", "warn": "warning", "error": "error"}


def build_config(args: argparse.Namespace) -> ResolverConfig:
    """Load configuration and apply command line overrides."""
    env_file = Path(args.env_file) if getattr(args, "env_file", None) else None
    config = load_config(env_file)

    if getattr(args, "rpc_url", None):
        config.rpc.url = args.rpc_url
    if getattr(args, "verbose", False):
        config.logging.level = "debug"
    if getattr(args, "host", None):
        config.server.host = args.host
    if getattr(args, "port", None):
        config.server.port = args.port
    return config


async def resolve_domain(domain: str, config: ResolverConfig, verbose: bool = False) -> int:
    """
    Resolve a domain and print the result.

    Returns:
        Exit code (0 on success, 1 on any resolution failure)
    """
    logger = AuditLogger.from_config(config.logging)
    async with RpcClient(
        url=config.rpc.url,
        commitment=config.rpc.commitment,
        timeout=config.rpc.timeout_seconds,
    ) as rpc:
        orchestrator = ResolutionOrchestrator(rpc, logger=logger)
        try:
            result = await orchestrator.resolve_detailed(domain)
        except NameResolverError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

    print(result.url)

    if verbose:
        print(f"  Record: {result.record.record_type.value}")
        print(f"  Value: {result.record.value}")
        print(f"  Owner: {result.owner}")
        print(f"  Duration: {result.duration_ms:.1f}ms")
        print("  Slots:")
        for slot, outcome in result.decoded:
            detail = outcome.value if outcome.resolved else outcome.reason
            print(
                f"    {slot.version.value:<3} {slot.record_type.value:<6} "
                f"{outcome.status.value:<10} {detail}"
            )

    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    config = build_config(args)
    return asyncio.run(resolve_domain(args.domain, config, verbose=args.verbose))


def cmd_keys(args: argparse.Namespace) -> int:
    try:
        parsed = parse_domain(args.domain)
    except NameResolverError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    name_key = domain_key(parsed)
    print(f"domain {parsed.name}: {name_key}")
    for slot in build_slots(name_key, parsed.record_types):
        print(f"  {slot.version.value:<3} {slot.record_type.value:<6} {slot.key}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    config = build_config(args)
    app = create_app(config)
    run_app(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=UVICORN_LOG_LEVELS.get(config.logging.level, "info"),
    )
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="name-resolver",
        description="Resolve SNS domains to their redirect URLs",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'resolve' command
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve a domain and print its redirect URL",
    )
    resolve_parser.add_argument(
        "domain",
        help="Domain to resolve (e.g., bonfida, dex.bonfida.sol, ipfs.dex.bonfida)",
    )
    resolve_parser.add_argument(
        "--rpc-url",
        help="Solana JSON-RPC endpoint (default: RPC_URL or mainnet)",
    )
    resolve_parser.add_argument(
        "--env-file",
        help="Path to a .env file",
    )
    resolve_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print every checked record and debug logs",
    )
    resolve_parser.set_defaults(func=cmd_resolve)

    # 'keys' command
    keys_parser = subparsers.add_parser(
        "keys",
        help="Print the candidate record accounts of a domain",
    )
    keys_parser.add_argument(
        "domain",
        help="Domain to derive keys for",
    )
    keys_parser.set_defaults(func=cmd_keys)

    # 'serve' command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP redirect service",
    )
    serve_parser.add_argument(
        "--host",
        help="Bind address (default: HOST or 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port", "-p",
        type=int,
        help="Bind port (default: PORT or 8787)",
    )
    serve_parser.add_argument(
        "--rpc-url",
        help="Solana JSON-RPC endpoint (default: RPC_URL or mainnet)",
    )
    serve_parser.add_argument(
        "--env-file",
        help="Path to a .env file",
    )
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
