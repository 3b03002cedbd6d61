"""
Bearer token models and errors.
"""

from typing import Optional

from pydantic import BaseModel


class AuthError(Exception):
    """Base authentication error."""
    pass


class TokenExpiredError(AuthError):
    """Access token has expired."""
    pass



class TokenPayload(BaseModel):
    """JWT token payload."""
    sub: str  # wallet address
    session_id: int
    chain_id: int
    exp: int  # expiration timestamp
    iat: int  # issued at timestamp
    type: str = "access"


class AccessToken(BaseModel):
    """Token handed to a wallet after it opens a session."""
    access_token: str
    token_type: str = "bearer"
    expires_at: int
    session_id: int
    wallet_address: str
    chain_id: Optional[int] = None
