"""
FastAPI authentication dependencies.
"""

from typing import Optional

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dapp_sso.sso.service import SSOService, get_sso_service

from .models import AuthError, TokenExpiredError, TokenPayload
from .tokens import AccessTokenService, get_token_service


# HTTP Bearer token scheme
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_wallet(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: AccessTokenService = Depends(get_token_service),
    service: SSOService = Depends(get_sso_service),
) -> TokenPayload:
    """
    Require a bearer token for the wallet's current session.

    Raises HTTPException 401 if the token is missing, invalid, expired, or
    was issued for a session that has since been replaced.
    """
    if credentials is None:
        raise _unauthorized("Authentication required")

    try:
        payload = tokens.verify(credentials.credentials)
    except TokenExpiredError:
        raise _unauthorized("Token has expired")
    except AuthError as e:
        raise _unauthorized(str(e))

    current = service.get_session_info(payload.sub)
    if current.session_id != payload.session_id:
        raise _unauthorized("Session has been replaced. Please sign in again.")

    # Picked up by RequestLoggingMiddleware and by logs emitted in the handler
    request.state.wallet = payload.sub
    request.state.session_id = payload.session_id
    structlog.contextvars.bind_contextvars(wallet=payload.sub, session_id=payload.session_id)

    return payload


async def require_operator(
    auth: TokenPayload = Depends(require_wallet),
    service: SSOService = Depends(get_sso_service),
) -> TokenPayload:
    """Require the authenticated wallet to be the current operator."""
    if auth.sub != service.operator:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "UNAUTHORIZED", "message": "Operator privileges required"},
        )
    return auth
