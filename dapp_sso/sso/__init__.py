from .errors import (
    DappAlreadyRegistered,
    DappNotActive,
    DappNotConnected,
    DappNotVerified,
    DappUnavailable,
    DurationExceedsMax,
    ExecutorUnavailable,
    InvalidInput,
    InvalidSignatureFormat,
    ReentrantCall,
    SessionInvalid,
    SignatureInvalid,
    SignatureMismatch,
    SSOError,
    Unauthorized,
)
from .events import EventBus, EventType, SSOEvent
from .executor import ExecutionResult, HttpRelayExecutor, TransactionExecutor
from .models import AppInfo, SessionInfo, WalletSession
from .registry import AppRegistry
from .service import SSOService, get_sso_service
from .signature import SignatureVerifier, session_digest, sign_session
from .store import SessionStore

__all__ = [
    "SSOService",
    "get_sso_service",
    "AppRegistry",
    "SessionStore",
    "SignatureVerifier",
    "session_digest",
    "sign_session",
    "EventBus",
    "EventType",
    "SSOEvent",
    "ExecutionResult",
    "HttpRelayExecutor",
    "TransactionExecutor",
    "AppInfo",
    "SessionInfo",
    "WalletSession",
    "SSOError",
    "InvalidInput",
    "DurationExceedsMax",
    "Unauthorized",
    "SignatureInvalid",
    "InvalidSignatureFormat",
    "SignatureMismatch",
    "SessionInvalid",
    "DappUnavailable",
    "DappNotVerified",
    "DappNotActive",
    "DappNotConnected",
    "DappAlreadyRegistered",
    "ReentrantCall",
    "ExecutorUnavailable",
]
