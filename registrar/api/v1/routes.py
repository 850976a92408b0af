"""
API v1 routes.

Defines REST endpoints for the invite registrar.
"""

from eth_utils import to_bytes, to_checksum_address, to_hex
from fastapi import APIRouter, Depends, HTTPException, status

from registrar.api.dependencies import get_caller, get_registrar
from registrar.api.models import (
    AvailabilityResponse,
    ErrorResponse,
    InviteStatusResponse,
    IssuerResponse,
    RegisterRequest,
    RegisterWithInviteRequest,
    RegistrationResponse,
)
from registrar.domain.exceptions import (
    InvalidInviter,
    InvalidLabel,
    InviteAlreadyUsed,
    LabelAlreadyClaimed,
    NotOwner,
    RegistrarError,
    SignatureExpired,
    Unauthorized,
)
from registrar.domain.registrar import InviteRegistrar

router = APIRouter(tags=["v1"])

# Errors are reported by class name so clients can show precise messages.
_ERROR_STATUS: dict[type[RegistrarError], int] = {
    SignatureExpired: status.HTTP_410_GONE,
    InviteAlreadyUsed: status.HTTP_409_CONFLICT,
    InvalidInviter: status.HTTP_403_FORBIDDEN,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    NotOwner: status.HTTP_403_FORBIDDEN,
    LabelAlreadyClaimed: status.HTTP_409_CONFLICT,
    InvalidLabel: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def _http_error(exc: RegistrarError) -> HTTPException:
    status_code = next(
        (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    return HTTPException(status_code=status_code, detail=type(exc).__name__)


def _parse_address(address: str) -> str:
    try:
        return to_checksum_address(address)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid address",
        ) from None


@router.post(
    "/invites/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid caller credentials"},
        403: {"model": ErrorResponse, "description": "InvalidInviter or Unauthorized"},
        409: {"model": ErrorResponse, "description": "InviteAlreadyUsed or LabelAlreadyClaimed"},
        410: {"model": ErrorResponse, "description": "SignatureExpired"},
        422: {"description": "Validation error or InvalidLabel"},
    },
    summary="Register a name with an invite",
    description="Consume a signed invite and claim its label. "
    "An invite that passes validation is burned even if the claim then fails.",
)
async def register_with_invite(
    request_data: RegisterWithInviteRequest,
    caller: str = Depends(get_caller),
    registrar: InviteRegistrar = Depends(get_registrar),
) -> RegistrationResponse:
    """
    Consume an invite.

    - **label**: Label to claim
    - **recipient**: Bound recipient, or the zero address for an open invite
    - **expiration**: Unix timestamp after which the invite is void
    - **issuer**: Whitelisted address that signed the invite
    - **signature**: Issuer signature over the invite digest
    """
    invite = request_data.to_invite()
    try:
        node = registrar.register_with_invite(caller, invite)
    except RegistrarError as exc:
        raise _http_error(exc) from None
    return RegistrationResponse(label=invite.label, owner=invite.recipient, node=to_hex(node))


@router.post(
    "/names",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid caller credentials"},
        403: {"model": ErrorResponse, "description": "NotOwner"},
        409: {"model": ErrorResponse, "description": "LabelAlreadyClaimed"},
    },
    summary="Register a name directly (owner only)",
    description="Emergency path that skips invite validation.",
)
async def register(
    request_data: RegisterRequest,
    caller: str = Depends(get_caller),
    registrar: InviteRegistrar = Depends(get_registrar),
) -> RegistrationResponse:
    try:
        node = registrar.register(caller, request_data.label, request_data.recipient)
    except RegistrarError as exc:
        raise _http_error(exc) from None
    return RegistrationResponse(
        label=request_data.label, owner=request_data.recipient, node=to_hex(node)
    )


@router.get(
    "/names/{label}/available",
    response_model=AvailabilityResponse,
    summary="Check label availability",
)
async def available(
    label: str,
    registrar: InviteRegistrar = Depends(get_registrar),
) -> AvailabilityResponse:
    return AvailabilityResponse(label=label, available=registrar.available(label))


@router.get(
    "/issuers/{address}",
    response_model=IssuerResponse,
    summary="Check issuer whitelist membership",
)
async def get_issuer(
    address: str,
    registrar: InviteRegistrar = Depends(get_registrar),
) -> IssuerResponse:
    issuer = _parse_address(address)
    return IssuerResponse(issuer=issuer, whitelisted=registrar.is_issuer(issuer))


@router.put(
    "/issuers/{address}",
    response_model=IssuerResponse,
    responses={403: {"model": ErrorResponse, "description": "NotOwner"}},
    summary="Whitelist an issuer (owner only)",
)
async def add_issuer(
    address: str,
    caller: str = Depends(get_caller),
    registrar: InviteRegistrar = Depends(get_registrar),
) -> IssuerResponse:
    issuer = _parse_address(address)
    try:
        registrar.add_issuer(caller, issuer)
    except RegistrarError as exc:
        raise _http_error(exc) from None
    return IssuerResponse(issuer=issuer, whitelisted=True)


@router.delete(
    "/issuers/{address}",
    response_model=IssuerResponse,
    responses={403: {"model": ErrorResponse, "description": "NotOwner"}},
    summary="Revoke an issuer (owner only)",
)
async def remove_issuer(
    address: str,
    caller: str = Depends(get_caller),
    registrar: InviteRegistrar = Depends(get_registrar),
) -> IssuerResponse:
    issuer = _parse_address(address)
    try:
        registrar.remove_issuer(caller, issuer)
    except RegistrarError as exc:
        raise _http_error(exc) from None
    return IssuerResponse(issuer=issuer, whitelisted=False)


@router.get(
    "/invites/{invite_id}",
    response_model=InviteStatusResponse,
    summary="Check whether an invite has been used",
)
async def invite_status(
    invite_id: str,
    registrar: InviteRegistrar = Depends(get_registrar),
) -> InviteStatusResponse:
    try:
        invite_id_bytes = to_bytes(hexstr=invite_id)
    except ValueError:
        invite_id_bytes = b""
    if len(invite_id_bytes) != 32:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid invite id",
        )
    return InviteStatusResponse(
        invite_id=to_hex(invite_id_bytes), state=registrar.invite_state(invite_id_bytes)
    )
