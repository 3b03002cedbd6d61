"""
Access tokens for wallets that opened a session.

A token only identifies the caller (wallet + session id) for the "self"
operations; whether the session is still valid is decided by SSOService.
"""

import time
from typing import Optional

import jwt

from dapp_sso.config import settings

from .models import AccessToken, AuthError, TokenExpiredError, TokenPayload


class AccessTokenService:
    """Issue and verify HS256 access tokens bound to a wallet session."""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
        chain_id: Optional[int] = None,
    ):
        self.secret = secret if secret is not None else settings.jwt_secret
        if not self.secret:
            raise ValueError(
                "DAPP_SSO_JWT_SECRET must be set for access token signing. "
                "This is required for authentication security."
            )
        self.algorithm = algorithm or settings.jwt_algorithm
        self.ttl_seconds = ttl_seconds or settings.access_token_ttl_seconds
        self.chain_id = settings.chain_id if chain_id is None else chain_id

    def issue(self, wallet_address: str, session_id: int, now: Optional[int] = None) -> AccessToken:
        """Generate an access token for the wallet's new session."""
        issued_at = int(time.time()) if now is None else now
        expires_at = issued_at + self.ttl_seconds
        payload = {
            "sub": wallet_address,
            "session_id": session_id,
            "chain_id": self.chain_id,
            "exp": expires_at,
            "iat": issued_at,
            "type": "access",
        }
        token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
        return AccessToken(
            access_token=token,
            expires_at=expires_at,
            session_id=session_id,
            wallet_address=wallet_address,
            chain_id=self.chain_id,
        )

    def verify(self, token: str) -> TokenPayload:
        """Verify an access token and return the payload."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Access token has expired")
        except jwt.InvalidTokenError as e:
            raise AuthError(f"Invalid access token: {e}")

        if payload.get("type") != "access":
            raise AuthError("Invalid token type")
        if payload.get("chain_id") != self.chain_id:
            raise AuthError("Token was issued for another chain")

        try:
            return TokenPayload(**payload)
        except ValueError as e:
            raise AuthError(f"Malformed token payload: {e}")


# Singleton instance
_token_service: Optional[AccessTokenService] = None


def get_token_service() -> AccessTokenService:
    """Get the singleton access token service."""
    global _token_service
    if _token_service is None:
        _token_service = AccessTokenService()
    return _token_service
