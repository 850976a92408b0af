"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events, and wires the
registrar service to its adapters.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse
from psycopg_pool import ConnectionPool

from registrar.adapters.clock import SystemClock
from registrar.adapters.events.console import ConsoleEventPublisher
from registrar.adapters.registry.postgres import PostgresNameRegistry
from registrar.adapters.signature.jsonrpc import JsonRpcAccountGateway
from registrar.adapters.signature.validator import GatewayError, UniversalSignatureValidator
from registrar.adapters.state.postgres import (
    PostgresInviteLedger,
    PostgresIssuerWhitelist,
    PostgresRequestLedger,
    run_migrations,
)
from registrar.api.dependencies import get_pool
from registrar.api.v1 import router as v1_router
from registrar.config.settings import get_settings
from registrar.domain.registrar import InviteRegistrar

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Invite Registrar API v1 - Claim names with signed invites",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations on startup
    - Builds the registrar service and its adapters
    - Closes the RPC client and connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )

    logger.info("Running database migrations...")
    run_migrations(pool)

    http_client = httpx.Client(timeout=settings.rpc_timeout_seconds)
    validator = UniversalSignatureValidator(JsonRpcAccountGateway(http_client, settings.rpc_url))
    clock = SystemClock()

    registrar = InviteRegistrar(
        registrar_address=settings.registrar_address,
        owner=settings.registrar_owner,
        chain_id=settings.chain_id,
        registry=PostgresNameRegistry(pool, settings.root_name),
        signature_validator=validator,
        issuers=PostgresIssuerWhitelist(pool),
        used_invites=PostgresInviteLedger(pool),
        events=ConsoleEventPublisher(),
        clock=clock,
    )

    # Store shared resources in app state for dependency injection
    app.state.pool = pool
    app.state.registrar = registrar
    app.state.signature_validator = validator
    app.state.request_ledger = PostgresRequestLedger(pool)
    app.state.clock = clock

    logger.info(
        "Registrar %s ready for %s on chain %d",
        registrar.registrar_address,
        settings.root_name,
        settings.chain_id,
    )

    yield

    # Shutdown
    logger.info("Shutting down application...")
    http_client.close()
    pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="invite-registrar",
    description="Invite Registrar API - Delegated name registration with signed, single-use invites",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(v1_router, prefix="/v1")


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Chain access failures are reported as 503 without internal detail."""
    logger.error("Chain gateway failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Signature validation unavailable"},
    )


@app.get("/health")
async def health_check(pool: ConnectionPool = Depends(get_pool)) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    with pool.connection() as conn:
        conn.execute("SELECT 1")

    return {"status": "healthy"}
