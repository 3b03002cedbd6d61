"""
Per-wallet session state and counters.

Three tables: current session by wallet, nonce by wallet, and one global
session id counter. The store performs no validation; SSOService decides
what may change and holds the lock around every mutation.
"""

from __future__ import annotations

from typing import Dict, Optional

from .models import WalletSession


class SessionStore:
    def __init__(self) -> None:
        self._sessions: Dict[str, WalletSession] = {}
        self._nonces: Dict[str, int] = {}
        self._session_counter = 0

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def session_counter(self) -> int:
        return self._session_counter

    def get(self, wallet: str) -> Optional[WalletSession]:
        return self._sessions.get(wallet)

    def nonce_of(self, wallet: str) -> int:
        return self._nonces.get(wallet, 0)

    def open(self, wallet: str, expiry_time: int) -> WalletSession:
        """Consume the wallet's nonce and replace its session with a fresh one."""
        self._nonces[wallet] = self.nonce_of(wallet) + 1
        self._session_counter += 1
        session = WalletSession(
            session_id=self._session_counter,
            expiry_time=expiry_time,
            is_active=True,
        )
        self._sessions[wallet] = session
        return session

    def count_valid(self, now: int) -> int:
        return sum(1 for session in self._sessions.values() if session.is_valid(now))
