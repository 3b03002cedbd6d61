from typing import Any, List, Optional
from pydantic import BaseModel, Field

from dapp_sso.sso.models import AppInfo, SessionInfo


class SessionInfoResponse(BaseModel):
    wallet: str
    session_id: int
    expiry_time: int
    is_active: bool = Field(description="Stored flag combined with expiry at read time")
    connected_dapps: List[str] = Field(default_factory=list)

    @classmethod
    def from_info(cls, wallet: str, info: SessionInfo) -> "SessionInfoResponse":
        return cls(
            wallet=wallet,
            session_id=info.session_id,
            expiry_time=info.expiry_time,
            is_active=info.is_active,
            connected_dapps=list(info.connected_dapps),
        )


class CreateSessionResponse(SessionInfoResponse):
    access_token: str
    token_type: str = "bearer"
    token_expires_at: int


class NonceResponse(BaseModel):
    wallet: str
    nonce: int
    chain_id: int
    server_time: int
    default_session_duration: int
    max_session_duration: int


class DappResponse(BaseModel):
    dapp_id: str
    name: str
    domain: str
    owner: str
    is_verified: bool
    is_active: bool

    @classmethod
    def from_info(cls, dapp_id: str, info: AppInfo) -> "DappResponse":
        return cls(
            dapp_id=dapp_id,
            name=info.name,
            domain=info.domain,
            owner=info.owner,
            is_verified=info.is_verified,
            is_active=info.is_active,
        )


class AutoConnectResponse(BaseModel):
    wallet: str
    dapp_id: str
    can_auto_connect: bool


class ConnectResponse(BaseModel):
    wallet: str
    dapp_id: str
    connected: bool


class ExecuteResponse(BaseModel):
    success: bool
    result: Optional[Any] = None


class SessionSettingsResponse(BaseModel):
    operator: str
    chain_id: int
    default_session_duration: int
    max_session_duration: int
