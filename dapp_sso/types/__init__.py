from .requests import (
    ConnectRequest,
    CreateSessionRequest,
    DurationRequest,
    ExecuteRequest,
    ExtendSessionRequest,
    RegisterDappRequest,
    TransferOperatorRequest,
    VerificationRequest,
)
from .responses import (
    AutoConnectResponse,
    ConnectResponse,
    CreateSessionResponse,
    DappResponse,
    ExecuteResponse,
    NonceResponse,
    SessionInfoResponse,
    SessionSettingsResponse,
)

__all__ = [
    "ConnectRequest",
    "CreateSessionRequest",
    "DurationRequest",
    "ExecuteRequest",
    "ExtendSessionRequest",
    "RegisterDappRequest",
    "TransferOperatorRequest",
    "VerificationRequest",
    "AutoConnectResponse",
    "ConnectResponse",
    "CreateSessionResponse",
    "DappResponse",
    "ExecuteResponse",
    "NonceResponse",
    "SessionInfoResponse",
    "SessionSettingsResponse",
]
