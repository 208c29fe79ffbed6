"""
HTTP redirect service.

``GET /`` answers with a fixed greeting; ``GET /{domain}`` answers with a
301 to the resolved locator, or a 301 to the fallback page when
resolution fails for any reason.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from . import __version__
from .audit_logger import AuditLogger
from .config import ResolverConfig
from .exceptions import NameResolverError
from .orchestrator import ResolutionOrchestrator
from .rpc_client import RpcClient


MOVED_PERMANENTLY = 301


def create_app(
    config: Optional[ResolverConfig] = None,
    orchestrator: Optional[ResolutionOrchestrator] = None,
    logger: Optional[AuditLogger] = None,
) -> FastAPI:
    """
    Create the redirect app.

    Args:
        config: Resolver configuration; defaults when omitted
        orchestrator: Pre-built orchestrator (tests); otherwise one is built
            on an RpcClient for ``config.rpc`` and closed on shutdown
        logger: Optional audit logger; built from ``config.logging`` when omitted
    """
    config = config or ResolverConfig()
    logger = logger or AuditLogger.from_config(config.logging)

    rpc: Optional[RpcClient] = None
    if orchestrator is None:
        rpc = RpcClient(
            url=config.rpc.url,
            commitment=config.rpc.commitment,
            timeout=config.rpc.timeout_seconds,
        )
        orchestrator = ResolutionOrchestrator(rpc, logger=logger)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if rpc is not None:
            await rpc.close()

    app = FastAPI(title="SNS Name Resolver", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.orchestrator = orchestrator
    app.state.logger = logger

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        logger.log_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )
        return response

    @app.get("/", response_class=PlainTextResponse)
    async def home() -> PlainTextResponse:
        return PlainTextResponse(config.server.home_message)

    @app.get("/{domain}")
    async def redirect(domain: str) -> RedirectResponse:
        try:
            url = await orchestrator.resolve_url(domain)
        except NameResolverError as e:
            logger.log_error(
                "RedirectServer",
                f"Resolution failed for {domain}",
                error=e,
                additional_data={"domain": domain},
            )
            url = config.server.error_url
        except Exception as e:
            # Any other failure still answers with the fallback redirect
            logger.log_error(
                "RedirectServer",
                f"Unexpected error resolving {domain}: {e}",
                error=e,
                additional_data={"domain": domain},
            )
            url = config.server.error_url
        return RedirectResponse(url, status_code=MOVED_PERMANENTLY)

    return app


def run_app(app: FastAPI, *, host: str = "127.0.0.1", port: int = 8787, log_level: str = "info") -> None:
    """Run the app through uvicorn."""
    uvicorn.run(app, host=host, port=port, log_level=log_level)
