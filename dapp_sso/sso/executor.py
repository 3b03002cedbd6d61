"""
Forwarding of wallet operations to an external executor.

The session layer only decides whether a wallet may forward a call; what the
call does, and whether it succeeds, belongs to the executor. Results are
handed back to the caller unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from .errors import ExecutorUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionRequest:
    wallet: str
    dapp_id: str
    target: str
    payload: Any


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome reported by the executor."""

    success: bool
    result: Any = None


class TransactionExecutor(Protocol):
    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        ...


class UnconfiguredExecutor:
    """Placeholder used when no relay endpoint is configured."""

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        raise ExecutorUnavailable("No relay endpoint configured for forwarded operations")


class HttpRelayExecutor:
    """
    POSTs forwarded operations to a relay service.

    Any HTTP response counts as the operation's own result: 2xx means
    success, anything else failure, and the decoded body is returned as-is.
    Only transport failures raise.
    """

    def __init__(
        self,
        relay_url: str,
        timeout_seconds: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.relay_url = relay_url
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        body = {
            "wallet": request.wallet,
            "dappId": request.dapp_id,
            "target": request.target,
            "payload": request.payload,
        }
        try:
            if self._client is not None:
                response = await self._client.post(self.relay_url, json=body)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.post(self.relay_url, json=body)
        except httpx.HTTPError as e:
            logger.error(f"Relay request to {self.relay_url} failed: {e}")
            raise ExecutorUnavailable(f"Relay unreachable: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = response.text

        return ExecutionResult(success=response.is_success, result=result)
