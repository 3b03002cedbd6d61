"""
dApp-facing endpoints: lookup, auto-connect check, connect, forwarding.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from dapp_sso.auth import TokenPayload, require_wallet
from dapp_sso.sso.errors import SSOError
from dapp_sso.sso.service import SSOService, get_sso_service
from dapp_sso.types import (
    AutoConnectResponse,
    ConnectRequest,
    ConnectResponse,
    DappResponse,
    ExecuteRequest,
    ExecuteResponse,
)

from .errors import http_error


router = APIRouter(prefix="/dapps", tags=["dapps"])


@router.get("/{dapp_id}", response_model=DappResponse)
async def get_dapp(
    dapp_id: str,
    service: SSOService = Depends(get_sso_service),
):
    info = service.get_dapp(dapp_id)
    if info is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "DAPP_NOT_FOUND", "message": f"dApp {dapp_id!r} is not registered"},
        )
    return DappResponse.from_info(dapp_id, info)


@router.get("/{dapp_id}/auto-connect", response_model=AutoConnectResponse)
async def can_auto_connect(
    dapp_id: str,
    wallet: str = Query(description="Wallet address to check"),
    service: SSOService = Depends(get_sso_service),
):
    """
    Whether the dApp can skip its connect prompt for this wallet.

    Never fails: unknown wallets and dApps simply report false.
    """
    return AutoConnectResponse(
        wallet=wallet,
        dapp_id=dapp_id,
        can_auto_connect=service.can_auto_connect(wallet, dapp_id),
    )


@router.post("/{dapp_id}/connect", response_model=ConnectResponse)
async def connect_to_dapp(
    dapp_id: str,
    request: ConnectRequest,
    service: SSOService = Depends(get_sso_service),
):
    """Record the wallet's connection to this dApp for its current session."""
    try:
        connected = service.connect_to_dapp(dapp_id, request.wallet)
    except SSOError as e:
        raise http_error(e)
    return ConnectResponse(wallet=request.wallet, dapp_id=dapp_id, connected=connected)


@router.post("/{dapp_id}/execute", response_model=ExecuteResponse)
async def execute_transaction(
    dapp_id: str,
    request: ExecuteRequest,
    auth: TokenPayload = Depends(require_wallet),
    service: SSOService = Depends(get_sso_service),
):
    """
    Forward an operation through the relay on the caller's behalf.

    The relay's own success flag and result are returned unchanged.
    """
    try:
        result = await service.execute_transaction(
            wallet=auth.sub,
            target=request.target,
            payload=request.payload,
            dapp_id=dapp_id,
        )
    except SSOError as e:
        raise http_error(e)
    return ExecuteResponse(success=result.success, result=result.result)
