"""
Wallet session endpoints.
"""

from fastapi import APIRouter, Depends

from dapp_sso.auth import AccessTokenService, TokenPayload, get_token_service, require_wallet
from dapp_sso.sso.address import normalize_wallet
from dapp_sso.sso.errors import SSOError
from dapp_sso.sso.service import SSOService, get_sso_service
from dapp_sso.types import (
    CreateSessionRequest,
    CreateSessionResponse,
    ExtendSessionRequest,
    NonceResponse,
    SessionInfoResponse,
)

from .errors import http_error


router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("/{wallet}/nonce", response_model=NonceResponse)
async def get_nonce(
    wallet: str,
    service: SSOService = Depends(get_sso_service),
):
    """
    Everything a wallet needs to sign a session request.

    The wallet signs keccak256(wallet, nonce, expiry, chain_id) with
    expiry = issued_at + duration.
    """
    try:
        wallet = normalize_wallet(wallet)
    except SSOError as e:
        raise http_error(e)
    return NonceResponse(
        wallet=wallet,
        nonce=service.nonce_of(wallet),
        chain_id=service.chain_id,
        server_time=service.now(),
        default_session_duration=service.default_session_duration,
        max_session_duration=service.max_session_duration,
    )


@router.post("", response_model=CreateSessionResponse)
async def create_session(
    request: CreateSessionRequest,
    service: SSOService = Depends(get_sso_service),
    tokens: AccessTokenService = Depends(get_token_service),
):
    """
    Verify the wallet's signature and open a session.

    Returns the session plus a bearer token for the wallet's own
    extend, disconnect and execute calls.
    """
    try:
        wallet = normalize_wallet(request.wallet)
        info = service.create_session(
            wallet=wallet,
            requested_duration=request.duration,
            signature=request.signature,
            issued_at=request.issued_at,
        )
    except SSOError as e:
        raise http_error(e)

    token = tokens.issue(wallet_address=wallet, session_id=info.session_id)
    return CreateSessionResponse(
        **SessionInfoResponse.from_info(wallet, info).model_dump(),
        access_token=token.access_token,
        token_expires_at=token.expires_at,
    )


@router.get("/{wallet}", response_model=SessionInfoResponse)
async def get_session_info(
    wallet: str,
    service: SSOService = Depends(get_sso_service),
):
    """Public snapshot of a wallet's session."""
    try:
        wallet = normalize_wallet(wallet)
        info = service.get_session_info(wallet)
    except SSOError as e:
        raise http_error(e)
    return SessionInfoResponse.from_info(wallet, info)


@router.post("/extend", response_model=SessionInfoResponse)
async def extend_session(
    request: ExtendSessionRequest,
    auth: TokenPayload = Depends(require_wallet),
    service: SSOService = Depends(get_sso_service),
):
    """Extend the caller's own session, capped at now + max duration."""
    try:
        info = service.extend_session(auth.sub, request.additional_duration)
    except SSOError as e:
        raise http_error(e)
    return SessionInfoResponse.from_info(auth.sub, info)


@router.post("/disconnect")
async def disconnect_wallet(
    auth: TokenPayload = Depends(require_wallet),
    service: SSOService = Depends(get_sso_service),
):
    """End the caller's session. Connected dApps are kept until the next session."""
    try:
        service.disconnect_wallet(auth.sub)
    except SSOError as e:
        raise http_error(e)
    return {"wallet": auth.sub, "session_id": auth.session_id, "disconnected": True}
