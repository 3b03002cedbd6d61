import argparse
import json

import httpx
import pytest
from eth_account import Account

from dapp_sso.auth.tokens import AccessTokenService, get_token_service
from dapp_sso.cli import build_parser, cli_login, effective_duration, main
from dapp_sso.config import settings
from dapp_sso.main import app
from dapp_sso.middleware.rate_limit import get_rate_limiter
from dapp_sso.sso.service import get_sso_service
from dapp_sso.sso.signature import SignatureVerifier

WALLET_KEY = "0x" + "02" * 32


def test_sign_outputs_verifiable_request(capsys) -> None:
    main([
        "sign",
        "--private-key", WALLET_KEY,
        "--nonce", "4",
        "--duration", "3600",
        "--issued-at", "1700000000",
        "--chain-id", "1",
    ])

    data = json.loads(capsys.readouterr().out)
    wallet = Account.from_key(WALLET_KEY).address

    assert data["wallet"] == wallet
    assert data["expiry"] == 1_700_003_600
    assert SignatureVerifier(chain_id=1).verify(wallet, 4, data["expiry"], data["signature"])


def test_sign_reads_key_from_environment(monkeypatch, capsys) -> None:
    monkeypatch.setenv("DAPP_SSO_PRIVATE_KEY", WALLET_KEY)

    main(["sign", "--nonce", "0", "--issued-at", "100", "--duration", "60"])

    assert json.loads(capsys.readouterr().out)["wallet"] == Account.from_key(WALLET_KEY).address


def test_sign_without_key_exits(monkeypatch) -> None:
    monkeypatch.delenv("DAPP_SSO_PRIVATE_KEY", raising=False)

    with pytest.raises(SystemExit):
        main(["sign", "--nonce", "0"])


def test_keygen_prints_usable_key(capsys) -> None:
    main(["keygen"])

    lines = capsys.readouterr().out.splitlines()
    address = lines[0].split()[-1]
    key = lines[1].split()[-1]

    assert Account.from_key(key).address == address


def test_no_command_prints_help(capsys) -> None:
    main([])

    assert "usage" in capsys.readouterr().out.lower()


def test_parser_requires_nonce_for_sign() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["sign"])


@pytest.mark.parametrize(
    "requested, expected",
    [
        (0, 86400),       # default
        (3600, 3600),
        (700000, 604800),  # capped
    ],
)
def test_effective_duration(requested, expected) -> None:
    assert effective_duration(requested, 86400, 604800) == expected


def test_sign_zero_duration_uses_default(capsys) -> None:
    main(["sign", "--private-key", WALLET_KEY, "--nonce", "0", "--duration", "0", "--issued-at", "1000"])

    data = json.loads(capsys.readouterr().out)

    assert data["expiry"] == 1000 + settings.default_session_duration_seconds


def test_sign_caps_duration_at_maximum(capsys) -> None:
    main([
        "sign",
        "--private-key", WALLET_KEY,
        "--nonce", "0",
        "--duration", "7200",
        "--max-duration", "3600",
        "--issued-at", "1000",
    ])

    assert json.loads(capsys.readouterr().out)["expiry"] == 4600


@pytest.mark.asyncio
async def test_login_with_maximum_below_default(monkeypatch, capsys, service, operator, wallet) -> None:
    service.set_max_session_duration(operator.address, 3600)
    tokens = AccessTokenService(secret="cli-test-secret", chain_id=service.chain_id)
    app.dependency_overrides[get_sso_service] = lambda: service
    app.dependency_overrides[get_token_service] = lambda: tokens
    get_rate_limiter().reset()

    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        httpx,
        "AsyncClient",
        lambda **kwargs: real_client(transport=httpx.ASGITransport(app=app), **kwargs),
    )
    try:
        await cli_login(argparse.Namespace(url="http://testserver", private_key=WALLET_KEY, duration=0))
    finally:
        app.dependency_overrides.clear()

    assert "Access token" in capsys.readouterr().out
    info = service.get_session_info(wallet.address)
    assert info.is_active
    assert info.expiry_time == service.now() + 3600
