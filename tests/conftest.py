"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Deterministic accounts (owner, issuer, recipient, stranger)
- A controllable clock
- A fully in-memory registrar wired with the real signature validator
"""

from unittest.mock import Mock

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount

from registrar.adapters.registry.memory import InMemoryNameRegistry
from registrar.adapters.signature.validator import UniversalSignatureValidator
from registrar.adapters.state.memory import InMemoryInviteLedger, InMemoryIssuerWhitelist
from registrar.domain.registrar import InviteRegistrar
from registrar.issuer import InviteIssuer
from tests.support import CHAIN_ID, REGISTRAR_ADDRESS, ROOT_NAME, FakeClock


@pytest.fixture
def owner_account() -> LocalAccount:
    return Account.from_key("0x" + "11" * 32)


@pytest.fixture
def issuer_account() -> LocalAccount:
    return Account.from_key("0x" + "22" * 32)


@pytest.fixture
def recipient_account() -> LocalAccount:
    return Account.from_key("0x" + "33" * 32)


@pytest.fixture
def stranger_account() -> LocalAccount:
    return Account.from_key("0x" + "44" * 32)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gateway() -> Mock:
    """Chain gateway where every account is a plain key (no code)."""
    gateway = Mock()
    gateway.get_code.return_value = b""
    return gateway


@pytest.fixture
def registry() -> InMemoryNameRegistry:
    return InMemoryNameRegistry(ROOT_NAME)


@pytest.fixture
def events() -> Mock:
    return Mock()


@pytest.fixture
def registrar(
    owner_account: LocalAccount,
    issuer_account: LocalAccount,
    registry: InMemoryNameRegistry,
    gateway: Mock,
    events: Mock,
    clock: FakeClock,
) -> InviteRegistrar:
    """In-memory registrar with issuer_account already whitelisted."""
    return InviteRegistrar(
        registrar_address=REGISTRAR_ADDRESS,
        owner=owner_account.address,
        chain_id=CHAIN_ID,
        registry=registry,
        signature_validator=UniversalSignatureValidator(gateway),
        issuers=InMemoryIssuerWhitelist({issuer_account.address}),
        used_invites=InMemoryInviteLedger(),
        events=events,
        clock=clock,
    )


@pytest.fixture
def issuer(issuer_account: LocalAccount) -> InviteIssuer:
    return InviteIssuer(issuer_account, REGISTRAR_ADDRESS)
