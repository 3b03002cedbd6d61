"""
Shared fixtures: deterministic wallets, a controllable clock and a fresh service.
"""

import os

# Must be set before dapp_sso.config builds the global settings
os.environ.setdefault("DAPP_SSO_JWT_SECRET", "test-secret")

import pytest
from eth_account import Account

from dapp_sso.sso.service import SSOService
from dapp_sso.sso.signature import sign_session

CHAIN_ID = 1
START_TIME = 1_700_000_000

OPERATOR_KEY = "0x" + "01" * 32
WALLET_KEY = "0x" + "02" * 32
OTHER_KEY = "0x" + "03" * 32


class FakeClock:
    """Clock the tests move by hand."""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def operator():
    return Account.from_key(OPERATOR_KEY)


@pytest.fixture
def wallet():
    return Account.from_key(WALLET_KEY)


@pytest.fixture
def other():
    return Account.from_key(OTHER_KEY)


@pytest.fixture
def service(clock, operator) -> SSOService:
    return SSOService(
        operator=operator.address,
        chain_id=CHAIN_ID,
        default_session_duration=24 * 60 * 60,
        max_session_duration=7 * 24 * 60 * 60,
        signature_max_age=300,
        clock=clock,
    )


def _session_signature(service: SSOService, account, duration: int, issued_at=None) -> str:
    anchor = service.now() if issued_at is None else issued_at
    effective = min(duration or service.default_session_duration, service.max_session_duration)
    nonce = service.nonce_of(account.address)
    return sign_session(account.key, nonce, anchor + effective, service.chain_id)


@pytest.fixture
def signature_for(service):
    """Sign what ``service.create_session`` will check for ``account`` right now."""

    def _sign(account, duration: int = 3600, issued_at=None) -> str:
        return _session_signature(service, account, duration, issued_at)

    return _sign


@pytest.fixture
def open_session(service):
    """Open a session for ``account`` with a freshly signed request."""

    def _open(account, duration: int = 3600, issued_at=None):
        signature = _session_signature(service, account, duration, issued_at)
        return service.create_session(account.address, duration, signature, issued_at=issued_at)

    return _open


@pytest.fixture
def registered(service, operator, other):
    """Register dApp "x" owned by ``other``."""
    service.register_dapp(operator.address, "x", "Example", "x.example", other.address)
    return "x"
