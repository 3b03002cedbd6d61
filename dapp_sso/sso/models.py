"""
Session and registry records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Set, Tuple

from dapp_sso.config import ZERO_ADDRESS


@dataclass
class WalletSession:
    """
    The current session of one wallet.

    ``connected_dapps`` keeps connection order and ``dapp_access`` answers
    membership; both change only through ``record_connection``.
    """

    session_id: int = 0
    expiry_time: int = 0
    is_active: bool = False
    connected_dapps: List[str] = field(default_factory=list)
    dapp_access: Set[str] = field(default_factory=set)

    def is_valid(self, now: int) -> bool:
        return self.is_active and self.expiry_time > now

    def is_connected(self, dapp_id: str) -> bool:
        return dapp_id in self.dapp_access

    def record_connection(self, dapp_id: str) -> bool:
        """Append ``dapp_id`` unless already present. Returns True if it was new."""
        if dapp_id in self.dapp_access:
            return False
        self.connected_dapps.append(dapp_id)
        self.dapp_access.add(dapp_id)
        return True


@dataclass(frozen=True)
class SessionInfo:
    """Read-only view of a wallet session as reported to callers."""

    session_id: int
    expiry_time: int
    is_active: bool
    connected_dapps: Tuple[str, ...]

    @classmethod
    def of(cls, session: WalletSession | None, now: int) -> "SessionInfo":
        if session is None:
            return cls(session_id=0, expiry_time=0, is_active=False, connected_dapps=())
        return cls(
            session_id=session.session_id,
            expiry_time=session.expiry_time,
            is_active=session.is_valid(now),
            connected_dapps=tuple(session.connected_dapps),
        )


@dataclass
class AppInfo:
    """Registry entry for one dApp."""

    name: str = ""
    domain: str = ""
    owner: str = ZERO_ADDRESS
    is_verified: bool = False
    is_active: bool = False

    @property
    def accepts_connections(self) -> bool:
        return self.is_verified and self.is_active
