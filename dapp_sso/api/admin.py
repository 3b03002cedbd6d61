"""
Operator endpoints for registry governance and session limits.

All routes require the bearer token of the current operator's session.
"""

from fastapi import APIRouter, Depends

from dapp_sso.auth import TokenPayload, require_operator
from dapp_sso.sso.errors import SSOError
from dapp_sso.sso.service import SSOService, get_sso_service
from dapp_sso.types import (
    DappResponse,
    DurationRequest,
    RegisterDappRequest,
    SessionSettingsResponse,
    TransferOperatorRequest,
    VerificationRequest,
)

from .errors import http_error


router = APIRouter(prefix="/admin", tags=["admin"])


def _settings_response(service: SSOService) -> SessionSettingsResponse:
    return SessionSettingsResponse(
        operator=service.operator,
        chain_id=service.chain_id,
        default_session_duration=service.default_session_duration,
        max_session_duration=service.max_session_duration,
    )


@router.post("/dapps", response_model=DappResponse)
async def register_dapp(
    request: RegisterDappRequest,
    auth: TokenPayload = Depends(require_operator),
    service: SSOService = Depends(get_sso_service),
):
    """Register a dApp. Registration also marks it verified."""
    try:
        info = service.register_dapp(
            auth.sub,
            request.dapp_id,
            request.name,
            request.domain,
            request.owner,
        )
    except SSOError as e:
        raise http_error(e)
    return DappResponse.from_info(request.dapp_id, info)


@router.post("/dapps/{dapp_id}/deactivate", response_model=DappResponse)
async def deactivate_dapp(
    dapp_id: str,
    auth: TokenPayload = Depends(require_operator),
    service: SSOService = Depends(get_sso_service),
):
    try:
        info = service.deactivate_dapp(auth.sub, dapp_id)
    except SSOError as e:
        raise http_error(e)
    return DappResponse.from_info(dapp_id, info)


@router.post("/dapps/{dapp_id}/reactivate", response_model=DappResponse)
async def reactivate_dapp(
    dapp_id: str,
    auth: TokenPayload = Depends(require_operator),
    service: SSOService = Depends(get_sso_service),
):
    try:
        info = service.reactivate_dapp(auth.sub, dapp_id)
    except SSOError as e:
        raise http_error(e)
    return DappResponse.from_info(dapp_id, info)


@router.post("/dapps/{dapp_id}/verification", response_model=DappResponse)
async def set_dapp_verification(
    dapp_id: str,
    request: VerificationRequest,
    auth: TokenPayload = Depends(require_operator),
    service: SSOService = Depends(get_sso_service),
):
    try:
        info = service.set_dapp_verification(auth.sub, dapp_id, request.verified)
    except SSOError as e:
        raise http_error(e)
    return DappResponse.from_info(dapp_id, info)


@router.get("/settings", response_model=SessionSettingsResponse)
async def get_settings(
    auth: TokenPayload = Depends(require_operator),
    service: SSOService = Depends(get_sso_service),
):
    return _settings_response(service)


@router.put("/settings/session-duration", response_model=SessionSettingsResponse)
async def set_session_duration(
    request: DurationRequest,
    auth: TokenPayload = Depends(require_operator),
    service: SSOService = Depends(get_sso_service),
):
    try:
        service.set_session_duration(auth.sub, request.duration)
    except SSOError as e:
        raise http_error(e)
    return _settings_response(service)


@router.put("/settings/max-session-duration", response_model=SessionSettingsResponse)
async def set_max_session_duration(
    request: DurationRequest,
    auth: TokenPayload = Depends(require_operator),
    service: SSOService = Depends(get_sso_service),
):
    try:
        service.set_max_session_duration(auth.sub, request.duration)
    except SSOError as e:
        raise http_error(e)
    return _settings_response(service)


@router.post("/operator", response_model=SessionSettingsResponse)
async def transfer_operator(
    request: TransferOperatorRequest,
    auth: TokenPayload = Depends(require_operator),
    service: SSOService = Depends(get_sso_service),
):
    """Hand the operator role to another wallet."""
    try:
        service.transfer_operator(auth.sub, request.new_operator)
    except SSOError as e:
        raise http_error(e)
    return _settings_response(service)
