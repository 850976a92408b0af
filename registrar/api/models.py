"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from typing import Annotated

from eth_utils import to_bytes, to_checksum_address
from pydantic import AfterValidator, BaseModel, Field

from registrar.domain.invite import Invite, InviteState

Address = Annotated[
    str,
    Field(description="0x-prefixed 20-byte address", examples=["0x0000000000000000000000000000000000000000"]),
    AfterValidator(to_checksum_address),
]


class RegisterWithInviteRequest(BaseModel):
    """Request model for invite consumption."""

    label: str = Field(..., description="Label being claimed")
    recipient: Address
    expiration: int = Field(..., ge=0, lt=2**256, description="Unix timestamp, inclusive")
    issuer: Address
    signature: str = Field(..., pattern=r"^0x([0-9a-fA-F]{2})*$", description="Issuer signature (hex)")

    def to_invite(self) -> Invite:
        return Invite(
            label=self.label,
            recipient=self.recipient,
            expiration=self.expiration,
            issuer=self.issuer,
            signature=to_bytes(hexstr=self.signature),
        )


class RegisterRequest(BaseModel):
    """Request model for owner-only direct registration."""

    label: str
    recipient: Address


class RegistrationResponse(BaseModel):
    """Response model for a claimed name."""

    label: str
    owner: str
    node: str


class AvailabilityResponse(BaseModel):
    label: str
    available: bool


class IssuerResponse(BaseModel):
    issuer: str
    whitelisted: bool


class InviteStatusResponse(BaseModel):
    invite_id: str
    state: InviteState


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
