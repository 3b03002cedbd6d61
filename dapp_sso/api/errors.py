"""
Translate session and registry errors into HTTP responses.
"""

from typing import List, Tuple, Type

from fastapi import HTTPException, status

from dapp_sso.sso.errors import (
    DappAlreadyRegistered,
    DappUnavailable,
    ExecutorUnavailable,
    InvalidInput,
    ReentrantCall,
    SessionInvalid,
    SignatureInvalid,
    SSOError,
    Unauthorized,
)

# Most specific first; subclasses inherit their parent's status.
_STATUS_BY_ERROR: List[Tuple[Type[SSOError], int]] = [
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (SignatureInvalid, status.HTTP_401_UNAUTHORIZED),
    (SessionInvalid, status.HTTP_401_UNAUTHORIZED),
    (Unauthorized, status.HTTP_403_FORBIDDEN),
    (DappUnavailable, status.HTTP_403_FORBIDDEN),
    (DappAlreadyRegistered, status.HTTP_409_CONFLICT),
    (ReentrantCall, status.HTTP_409_CONFLICT),
    (ExecutorUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(error: SSOError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def http_error(error: SSOError) -> HTTPException:
    """HTTPException carrying the error's stable code and message."""
    return HTTPException(
        status_code=status_for(error),
        detail={"code": error.code, "message": error.message},
    )
