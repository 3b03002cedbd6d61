#!/usr/bin/env python3
"""Command line client for signing in to the dApp SSO API"""

import argparse
import asyncio
import json
import os
import time
from typing import List, Optional

import httpx
from eth_account import Account

from dapp_sso.config import settings
from dapp_sso.sso.signature import sign_session

DEFAULT_BASE_URL = os.getenv("DAPP_SSO_URL", f"http://{settings.host}:{settings.port}")


def _private_key(args: argparse.Namespace) -> str:
    key = args.private_key or os.getenv("DAPP_SSO_PRIVATE_KEY")
    if not key:
        raise SystemExit("❌ Provide --private-key or set DAPP_SSO_PRIVATE_KEY")
    return key


def print_session(data: dict) -> None:
    """Pretty print a session snapshot"""
    state = "🟢 active" if data.get("is_active") else "⚪ inactive"
    print(f"\nWallet:     {data.get('wallet')}")
    print(f"Session:    #{data.get('session_id')} ({state})")
    print(f"Expires at: {data.get('expiry_time')}")
    dapps = data.get("connected_dapps") or []
    print(f"Connected:  {', '.join(dapps) if dapps else '-'}")


def effective_duration(requested: int, default: int, maximum: int) -> int:
    """Duration the server will sign against: 0 means default, capped at maximum."""
    return min(requested or default, maximum)


def cli_keygen() -> None:
    account = Account.create()
    print(f"Address:     {account.address}")
    print(f"Private key: 0x{bytes(account.key).hex()}")


def cli_sign(args: argparse.Namespace) -> None:
    """Sign a session request offline"""
    key = _private_key(args)
    duration = effective_duration(
        args.duration,
        settings.default_session_duration_seconds,
        args.max_duration,
    )
    expiry = args.issued_at + duration
    signature = sign_session(key, args.nonce, expiry, args.chain_id)
    print(json.dumps({
        "wallet": Account.from_key(key).address,
        "duration": args.duration,
        "issued_at": args.issued_at,
        "expiry": expiry,
        "signature": signature,
    }, indent=2))


async def cli_login(args: argparse.Namespace) -> None:
    """Fetch nonce, sign and open a session"""
    key = _private_key(args)
    wallet = Account.from_key(key).address

    async with httpx.AsyncClient(base_url=args.url, timeout=30) as client:
        response = await client.get(f"/sessions/{wallet}/nonce")
        response.raise_for_status()
        params = response.json()

        duration = effective_duration(
            args.duration,
            params["default_session_duration"],
            params["max_session_duration"],
        )
        issued_at = int(params["server_time"])
        signature = sign_session(key, params["nonce"], issued_at + duration, params["chain_id"])

        print(f"🔐 Signing in {wallet} (nonce {params['nonce']}, chain {params['chain_id']})...")
        response = await client.post("/sessions", json={
            "wallet": wallet,
            "duration": args.duration,
            "signature": signature,
            "issued_at": issued_at,
        })
        if response.status_code != 200:
            print(f"❌ Sign-in failed ({response.status_code}): {response.text}")
            return
        data = response.json()

    print_session(data)
    print(f"\nAccess token: {data['access_token']}")


async def cli_info(args: argparse.Namespace) -> None:
    async with httpx.AsyncClient(base_url=args.url, timeout=30) as client:
        response = await client.get(f"/sessions/{args.wallet}")
        response.raise_for_status()
        print_session(response.json())


async def cli_can_connect(args: argparse.Namespace) -> None:
    async with httpx.AsyncClient(base_url=args.url, timeout=30) as client:
        response = await client.get(
            f"/dapps/{args.dapp_id}/auto-connect",
            params={"wallet": args.wallet},
        )
        response.raise_for_status()
        allowed = response.json()["can_auto_connect"]
    print(f"{'✅' if allowed else '🚫'} {args.wallet} -> {args.dapp_id}: {allowed}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="dApp SSO CLI")
    parser.add_argument("--url", default=DEFAULT_BASE_URL, help="API base URL")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("keygen", help="Generate a throwaway wallet")

    sign_parser = subparsers.add_parser("sign", help="Sign a session request offline")
    sign_parser.add_argument("--private-key", help="Wallet private key (hex)")
    sign_parser.add_argument("--nonce", type=int, required=True, help="Wallet's current nonce")
    sign_parser.add_argument("--duration", type=int, default=settings.default_session_duration_seconds)
    sign_parser.add_argument("--issued-at", type=int, default=None, help="Unix time the expiry counts from")
    sign_parser.add_argument("--chain-id", type=int, default=settings.chain_id)
    sign_parser.add_argument(
        "--max-duration",
        type=int,
        default=settings.max_session_duration_seconds,
        help="Server's maximum session duration",
    )

    login_parser = subparsers.add_parser("login", help="Open a session against the API")
    login_parser.add_argument("--private-key", help="Wallet private key (hex)")
    login_parser.add_argument("--duration", type=int, default=0, help="Seconds (0 for server default)")

    info_parser = subparsers.add_parser("info", help="Show a wallet's session")
    info_parser.add_argument("wallet", help="Wallet address")

    connect_parser = subparsers.add_parser("can-connect", help="Check auto-connect for a dApp")
    connect_parser.add_argument("wallet", help="Wallet address")
    connect_parser.add_argument("dapp_id", help="dApp id")

    subparsers.add_parser("serve", help="Run the API server")

    return parser


def serve() -> None:
    import uvicorn
    uvicorn.run(
        "dapp_sso.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    command = args.command.lower()

    if command == "keygen":
        cli_keygen()

    elif command == "sign":
        if args.issued_at is None:
            args.issued_at = int(time.time())
        cli_sign(args)

    elif command == "login":
        asyncio.run(cli_login(args))

    elif command == "info":
        asyncio.run(cli_info(args))

    elif command == "can-connect":
        asyncio.run(cli_can_connect(args))

    elif command == "serve":
        serve()

    else:
        print(f"❌ Unknown command: {command}")
        parser.print_help()


if __name__ == "__main__":
    main()
