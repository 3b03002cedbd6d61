from typing import Any, Optional
from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    wallet: str = Field(description="Wallet address opening the session")
    duration: int = Field(default=0, ge=0, description="Requested session length in seconds; 0 for the default")
    signature: str = Field(description="Hex signature over (wallet, nonce, expiry, chain_id)")
    issued_at: Optional[int] = Field(default=None, ge=0, description="Client timestamp the signed expiry was computed from")


class ExtendSessionRequest(BaseModel):
    additional_duration: int = Field(ge=0, description="Seconds to add to the current expiry")


class ConnectRequest(BaseModel):
    wallet: str = Field(description="Wallet connecting to the dApp")


class ExecuteRequest(BaseModel):
    target: str = Field(description="Operation or contract the relay should invoke")
    payload: Any = Field(default=None, description="Opaque call data passed through to the relay")


class RegisterDappRequest(BaseModel):
    dapp_id: str = Field(description="Registry key for the dApp")
    name: str = Field(default="", description="Display name")
    domain: str = Field(default="", description="dApp origin, informational only")
    owner: str = Field(description="Identity administratively associated with the dApp")


class VerificationRequest(BaseModel):
    verified: bool = Field(description="Whether the dApp is trusted for auto-connect")


class DurationRequest(BaseModel):
    duration: int = Field(ge=0, description="Duration in seconds")


class TransferOperatorRequest(BaseModel):
    new_operator: str = Field(description="Identity receiving the operator role")
