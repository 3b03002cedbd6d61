import os

from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        env_prefix="DAPP_SSO_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the legacy unprefixed JWT secret when the prefixed one is unset."""

        super().model_post_init(__context)

        if not self.jwt_secret:
            fallback = os.getenv("JWT_SECRET")
            if fallback:
                object.__setattr__(self, "jwt_secret", fallback)

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Domain separation
    chain_id: int = Field(
        default=1,
        ge=0,
        description="Chain identifier mixed into every session signature",
    )

    # Session lifetimes (seconds)
    default_session_duration_seconds: int = Field(
        default=24 * 60 * 60,
        ge=1,
        description="Session length used when a wallet requests duration 0",
    )
    max_session_duration_seconds: int = Field(
        default=7 * 24 * 60 * 60,
        ge=1,
        description="Upper bound for requested and extended session lengths",
    )
    signature_max_age_seconds: int = Field(
        default=300,
        ge=0,
        description="Allowed distance between a client's issued_at and server time",
    )

    # Registry governance
    operator_address: str = Field(
        default=ZERO_ADDRESS,
        validation_alias=AliasChoices("DAPP_SSO_OPERATOR_ADDRESS", "OPERATOR_ADDRESS"),
        description="Initial privileged operator identity",
    )
    strict_registry: bool = Field(
        default=False,
        description="Reject deactivate/reactivate on dApp ids that were never registered",
    )

    # Bearer tokens
    jwt_secret: str = Field(default="", description="HMAC secret for access tokens")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_ttl_seconds: int = Field(
        default=7 * 24 * 60 * 60,
        ge=60,
        description="Lifetime of bearer tokens issued on session creation",
    )

    # Transaction forwarding
    relay_url: Optional[str] = Field(
        default=None,
        description="Relay endpoint that executes forwarded wallet operations",
    )
    relay_timeout_seconds: float = Field(default=15.0, gt=0, description="Relay request timeout")

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True, description="Throttle session creation attempts")
    session_rate_limit: int = Field(
        default=10,
        ge=1,
        description="Session creation attempts allowed per client per window",
    )
    session_rate_window_seconds: int = Field(default=60, ge=1, description="Rate limit window")

    # Notifications
    event_history_size: int = Field(
        default=500,
        ge=0,
        description="Number of recent notifications kept for GET /events",
    )


# Global settings instance
settings = Settings()
