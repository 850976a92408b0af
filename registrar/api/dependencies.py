"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the registrar
service and for authenticating callers from signed request headers.
"""

import logging

from eth_utils import to_bytes, to_checksum_address
from fastapi import Depends, Header, HTTPException, Request, status
from psycopg_pool import ConnectionPool

from registrar.api.auth import request_message_hash
from registrar.config.settings import Settings, get_settings
from registrar.domain.ports import Clock, RequestLedger, SignatureValidator
from registrar.domain.registrar import InviteRegistrar

logger = logging.getLogger(__name__)


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_registrar(request: Request) -> InviteRegistrar:
    """
    Get the registrar service from app state.

    The registrar is a process-wide singleton: it holds the owner identity
    and the lock that serializes mutations.
    """
    return request.app.state.registrar


def get_signature_validator(request: Request) -> SignatureValidator:
    return request.app.state.signature_validator


def get_request_ledger(request: Request) -> RequestLedger:
    return request.app.state.request_ledger


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def _unauthenticated(reason: str) -> HTTPException:
    logger.warning("Caller authentication failed: %s", reason)
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid caller credentials",
    )


async def get_caller(
    request: Request,
    x_caller_address: str | None = Header(default=None),
    x_caller_timestamp: str | None = Header(default=None),
    x_caller_signature: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    validator: SignatureValidator = Depends(get_signature_validator),
    seen_requests: RequestLedger = Depends(get_request_ledger),
    clock: Clock = Depends(get_clock),
) -> str:
    """
    Authenticate the caller from signed request headers.

    Each signed request is accepted once. A second request with the same
    headers and body inside the timestamp window is refused, so a captured
    request cannot be replayed.

    Returns:
        Checksummed caller address

    Raises:
        HTTPException 401: Missing, malformed, stale, replayed or invalid
        credentials. All failures share one generic message.
    """
    if x_caller_address is None or x_caller_timestamp is None or x_caller_signature is None:
        raise _unauthenticated("missing headers")

    try:
        caller = to_checksum_address(x_caller_address)
        timestamp = int(x_caller_timestamp)
        signature = to_bytes(hexstr=x_caller_signature)
    except ValueError:
        raise _unauthenticated("malformed headers") from None

    now = clock.now()
    if abs(now - timestamp) > settings.request_max_age_seconds:
        raise _unauthenticated("stale timestamp")

    body = await request.body()
    message_hash = request_message_hash(request.method, request.url.path, timestamp, body)
    if not validator.is_valid(caller, message_hash, signature):
        raise _unauthenticated("bad signature")

    if not seen_requests.add(caller, message_hash, now, timestamp + settings.request_max_age_seconds):
        raise _unauthenticated("replayed request")

    return caller
