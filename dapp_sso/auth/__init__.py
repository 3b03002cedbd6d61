from .models import (
    AccessToken,
    AuthError,
    TokenExpiredError,
    TokenPayload,
)
from .tokens import AccessTokenService, get_token_service
from .middleware import require_operator, require_wallet

__all__ = [
    "AccessToken",
    "AccessTokenService",
    "AuthError",
    "TokenExpiredError",
    "TokenPayload",
    "get_token_service",
    "require_operator",
    "require_wallet",
]
