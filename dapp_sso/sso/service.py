"""
Wallet session single sign-on service.

Composes the dApp registry, the session store and the signature verifier
into the operations wallets, dApps and the operator call.

Flow:
1. Wallet reads its nonce and signs (wallet, nonce, expiry, chain_id)
2. ``create_session`` verifies the signature, consumes the nonce and opens
   a fresh session
3. dApps call ``can_auto_connect`` to skip the connect prompt, and
   ``connect_to_dapp`` to record the connection
4. The wallet may ``extend_session`` or ``disconnect_wallet``

Every mutating operation runs under one lock and either completes fully or
raises without changing state.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional

from dapp_sso.config import Settings, settings as default_settings
from dapp_sso.logging_config import get_audit_logger

from .address import is_valid_wallet, normalize_wallet
from .errors import (
    DappNotConnected,
    DurationExceedsMax,
    InvalidInput,
    ReentrantCall,
    SessionInvalid,
    SSOError,
    Unauthorized,
)
from .events import (
    DappConnected,
    DappRegistered,
    DappVerificationChanged,
    EventBus,
    OperatorTransferred,
    SessionCreated,
    SessionExtended,
    WalletDisconnected,
)
from .executor import (
    ExecutionRequest,
    ExecutionResult,
    HttpRelayExecutor,
    TransactionExecutor,
    UnconfiguredExecutor,
)
from .models import AppInfo, SessionInfo, WalletSession
from .registry import AppRegistry
from .signature import SignatureInput, SignatureVerifier
from .store import SessionStore

logger = logging.getLogger(__name__)
audit = get_audit_logger()

Clock = Callable[[], int]


def _system_clock() -> int:
    return int(time.time())


def _require_duration(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{name} must be an integer number of seconds")
    if value < 0:
        raise InvalidInput(f"{name} must not be negative")
    return value


class SSOService:
    """
    Session and access-control state machine.

    Usage:
        service = SSOService(operator="0xOperator...", chain_id=1)
        service.register_dapp(operator, "x", "X", "x.example", owner)

        nonce = service.nonce_of(wallet)
        # wallet signs session_digest(wallet, nonce, now + 3600, chain_id)
        service.create_session(wallet, 3600, signature)

        service.can_auto_connect(wallet, "x")   # True
        service.connect_to_dapp("x", wallet)
    """

    def __init__(
        self,
        operator: str,
        chain_id: int = 1,
        default_session_duration: int = 24 * 60 * 60,
        max_session_duration: int = 7 * 24 * 60 * 60,
        signature_max_age: int = 300,
        strict_registry: bool = False,
        clock: Optional[Clock] = None,
        executor: Optional[TransactionExecutor] = None,
        events: Optional[EventBus] = None,
    ):
        if default_session_duration <= 0 or max_session_duration <= 0:
            raise InvalidInput("Session durations must be positive")
        if default_session_duration > max_session_duration:
            raise DurationExceedsMax("Default session duration exceeds the maximum")

        self._operator = normalize_wallet(operator)
        self._default_session_duration = default_session_duration
        self._max_session_duration = max_session_duration
        self.chain_id = chain_id
        self.signature_max_age = signature_max_age

        self.clock: Clock = clock or _system_clock
        self.verifier = SignatureVerifier(chain_id)
        self.registry = AppRegistry(strict=strict_registry)
        self.store = SessionStore()
        self.executor: TransactionExecutor = executor or UnconfiguredExecutor()
        self.events = events or EventBus()

        self._lock = threading.RLock()
        self._creating = False

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None, **overrides: Any) -> "SSOService":
        config = config or default_settings
        executor = overrides.pop("executor", None)
        if executor is None and config.relay_url:
            executor = HttpRelayExecutor(config.relay_url, config.relay_timeout_seconds)
        kwargs: Dict[str, Any] = dict(
            operator=config.operator_address,
            chain_id=config.chain_id,
            default_session_duration=config.default_session_duration_seconds,
            max_session_duration=config.max_session_duration_seconds,
            signature_max_age=config.signature_max_age_seconds,
            strict_registry=config.strict_registry,
            executor=executor,
            events=EventBus(history_size=config.event_history_size),
        )
        kwargs.update(overrides)
        return cls(**kwargs)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def operator(self) -> str:
        return self._operator

    @property
    def default_session_duration(self) -> int:
        return self._default_session_duration

    @property
    def max_session_duration(self) -> int:
        return self._max_session_duration

    def now(self) -> int:
        return int(self.clock())

    def nonce_of(self, wallet: str) -> int:
        return self.store.nonce_of(normalize_wallet(wallet))

    def get_dapp(self, dapp_id: str) -> Optional[AppInfo]:
        return self.registry.get(dapp_id)

    def stats(self) -> Dict[str, int]:
        now = self.now()
        with self._lock:
            return {
                "registered_dapps": len(self.registry),
                "wallets": len(self.store),
                "valid_sessions": self.store.count_valid(now),
                "sessions_created": self.store.session_counter,
            }

    # ------------------------------------------------------------------
    # Governance (operator only)
    # ------------------------------------------------------------------

    def _only_operator(self, caller: str) -> None:
        if not is_valid_wallet(caller) or normalize_wallet(caller) != self._operator:
            audit.warning("operator_check_failed", caller=caller)
            raise Unauthorized("Caller is not the operator")

    def transfer_operator(self, caller: str, new_operator: str) -> None:
        """Hand the operator role to another identity."""
        with self._lock:
            self._only_operator(caller)
            new_operator = normalize_wallet(new_operator)
            previous, self._operator = self._operator, new_operator
            audit.info("operator_transferred", previous=previous, new=new_operator)
            self.events.publish(OperatorTransferred(
                timestamp=self.now(),
                previous_operator=previous,
                new_operator=new_operator,
            ))

    def register_dapp(
        self,
        caller: str,
        dapp_id: str,
        name: str,
        domain: str,
        owner: str,
    ) -> AppInfo:
        with self._lock:
            self._only_operator(caller)
            owner = normalize_wallet(owner)
            info = self.registry.register(dapp_id, name, domain, owner)
            audit.info("dapp_registered", dapp_id=dapp_id, domain=domain, owner=owner)
            self.events.publish(DappRegistered(
                timestamp=self.now(),
                dapp_id=dapp_id,
                name=name,
                domain=domain,
                owner=owner,
            ))
            return info

    def deactivate_dapp(self, caller: str, dapp_id: str) -> AppInfo:
        with self._lock:
            self._only_operator(caller)
            info = self.registry.set_active(dapp_id, False)
            audit.info("dapp_deactivated", dapp_id=dapp_id)
            return info

    def reactivate_dapp(self, caller: str, dapp_id: str) -> AppInfo:
        with self._lock:
            self._only_operator(caller)
            info = self.registry.set_active(dapp_id, True)
            audit.info("dapp_reactivated", dapp_id=dapp_id)
            return info

    def set_dapp_verification(self, caller: str, dapp_id: str, verified: bool) -> AppInfo:
        """Grant or revoke verification independently of registration."""
        with self._lock:
            self._only_operator(caller)
            info = self.registry.set_verified(dapp_id, verified)
            audit.info("dapp_verification_changed", dapp_id=dapp_id, verified=verified)
            self.events.publish(DappVerificationChanged(
                timestamp=self.now(),
                dapp_id=dapp_id,
                is_verified=verified,
            ))
            return info

    def set_session_duration(self, caller: str, duration: int) -> None:
        with self._lock:
            self._only_operator(caller)
            duration = _require_duration("duration", duration)
            if duration == 0:
                raise InvalidInput("Session duration must be greater than zero")
            if duration > self._max_session_duration:
                raise DurationExceedsMax(
                    f"Session duration {duration}s exceeds maximum {self._max_session_duration}s"
                )
            self._default_session_duration = duration
            audit.info("session_duration_set", duration=duration)

    def set_max_session_duration(self, caller: str, duration: int) -> None:
        """Set the ceiling. The current default is left as is."""
        with self._lock:
            self._only_operator(caller)
            duration = _require_duration("duration", duration)
            if duration == 0:
                raise InvalidInput("Maximum session duration must be greater than zero")
            self._max_session_duration = duration
            audit.info("max_session_duration_set", duration=duration)
            if self._default_session_duration > duration:
                logger.warning(
                    f"Default session duration {self._default_session_duration}s "
                    f"now exceeds maximum {duration}s; new sessions are clamped"
                )

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    @contextmanager
    def _non_reentrant(self) -> Iterator[None]:
        if self._creating:
            raise ReentrantCall("create_session re-entered")
        self._creating = True
        try:
            yield
        finally:
            self._creating = False

    def _signature_anchor(self, issued_at: Optional[int], now: int) -> int:
        if issued_at is None:
            return now
        issued_at = _require_duration("issued_at", issued_at)
        # A future anchor would push expiry past now + max_session_duration
        if issued_at > now:
            raise InvalidInput(f"issued_at {issued_at} is ahead of server time {now}")
        if now - issued_at > self.signature_max_age:
            raise InvalidInput(
                f"issued_at {issued_at} is more than {self.signature_max_age}s before server time {now}"
            )
        return issued_at

    def create_session(
        self,
        wallet: str,
        requested_duration: int,
        signature: SignatureInput,
        issued_at: Optional[int] = None,
    ) -> SessionInfo:
        """
        Open a new session for ``wallet``, replacing any previous one.

        Args:
            wallet: Wallet address claiming the session
            requested_duration: Seconds; 0 selects the default duration
            signature: Wallet's signature over
                (wallet, current nonce, expiry, chain_id)
            issued_at: Client timestamp the expiry was computed from; server
                time when omitted

        Returns:
            SessionInfo for the new session

        Raises:
            DurationExceedsMax: requested_duration above the maximum
            InvalidSignatureFormat / SignatureMismatch: signature rejected
            ReentrantCall: called again from inside a session creation
        """
        wallet = normalize_wallet(wallet)
        requested_duration = _require_duration("requested_duration", requested_duration)

        with self._lock, self._non_reentrant():
            if requested_duration > self._max_session_duration:
                raise DurationExceedsMax(
                    f"Requested duration {requested_duration}s exceeds maximum "
                    f"{self._max_session_duration}s"
                )
            now = self.now()
            anchor = self._signature_anchor(issued_at, now)
            duration = min(
                requested_duration or self._default_session_duration,
                self._max_session_duration,
            )
            expiry_time = anchor + duration
            if expiry_time <= now:
                raise InvalidInput("Signed session expiry has already passed")

            nonce = self.store.nonce_of(wallet)
            try:
                self.verifier.verify(wallet, nonce, expiry_time, signature)
            except SSOError as e:
                logger.warning(f"Session signature rejected for {wallet} at nonce {nonce}: {e}")
                raise

            session = self.store.open(wallet, expiry_time)
            logger.info(
                f"Session {session.session_id} created for {wallet}, expires at {expiry_time}"
            )
            self.events.publish(SessionCreated(
                timestamp=now,
                wallet=wallet,
                session_id=session.session_id,
                expiry_time=expiry_time,
            ))
            return SessionInfo.of(session, now)

    def _valid_session(self, wallet: str, now: int) -> WalletSession:
        session = self.store.get(wallet)
        if session is None:
            raise SessionInvalid(f"No session for {wallet}")
        if not session.is_active:
            raise SessionInvalid(f"Session {session.session_id} is disconnected")
        if session.expiry_time <= now:
            raise SessionInvalid(f"Session {session.session_id} expired at {session.expiry_time}")
        return session

    def connect_to_dapp(self, dapp_id: str, wallet: str) -> bool:
        """
        Record that ``wallet`` connected to ``dapp_id`` in its current session.

        Connecting again is a successful no-op; the connected event still fires.
        """
        wallet = normalize_wallet(wallet)
        with self._lock:
            now = self.now()
            session = self._valid_session(wallet, now)
            self.registry.require_available(dapp_id)

            if session.record_connection(dapp_id):
                logger.info(f"{wallet} connected to dApp {dapp_id} in session {session.session_id}")
            self.events.publish(DappConnected(
                timestamp=now,
                wallet=wallet,
                dapp_id=dapp_id,
                session_id=session.session_id,
            ))
            return True

    def can_auto_connect(self, wallet: str, dapp_id: str) -> bool:
        """True when the wallet has a valid session and the dApp is verified and active."""
        if not is_valid_wallet(wallet):
            return False
        wallet = normalize_wallet(wallet)
        with self._lock:
            session = self.store.get(wallet)
            if session is None or not session.is_valid(self.now()):
                return False
            return self.registry.accepts_connections(dapp_id)

    def get_session_info(self, wallet: str) -> SessionInfo:
        """Snapshot whose ``is_active`` already accounts for expiry."""
        wallet = normalize_wallet(wallet)
        with self._lock:
            return SessionInfo.of(self.store.get(wallet), self.now())

    def extend_session(self, wallet: str, additional_duration: int) -> SessionInfo:
        """
        Push the expiry of the wallet's valid session back.

        The new expiry may not pass ``now + max_session_duration``.
        """
        wallet = normalize_wallet(wallet)
        additional_duration = _require_duration("additional_duration", additional_duration)
        if additional_duration == 0:
            raise InvalidInput("Additional duration must be greater than zero")

        with self._lock:
            now = self.now()
            session = self._valid_session(wallet, now)
            new_expiry = session.expiry_time + additional_duration
            if new_expiry > now + self._max_session_duration:
                raise DurationExceedsMax(
                    f"Extended expiry {new_expiry} passes the limit "
                    f"{now + self._max_session_duration}"
                )
            session.expiry_time = new_expiry
            logger.info(f"Session {session.session_id} of {wallet} extended to {new_expiry}")
            self.events.publish(SessionExtended(
                timestamp=now,
                wallet=wallet,
                session_id=session.session_id,
                expiry_time=new_expiry,
            ))
            return SessionInfo.of(session, now)

    def disconnect_wallet(self, wallet: str) -> None:
        """Mark the session inactive. Expired sessions may still be disconnected."""
        wallet = normalize_wallet(wallet)
        with self._lock:
            session = self.store.get(wallet)
            if session is None or not session.is_active:
                raise SessionInvalid(f"No active session for {wallet}")
            session.is_active = False
            logger.info(f"Session {session.session_id} of {wallet} disconnected")
            self.events.publish(WalletDisconnected(
                timestamp=self.now(),
                wallet=wallet,
                session_id=session.session_id,
            ))

    # ------------------------------------------------------------------
    # Forwarding
    # ------------------------------------------------------------------

    async def execute_transaction(
        self,
        wallet: str,
        target: str,
        payload: Any,
        dapp_id: str,
    ) -> ExecutionResult:
        """
        Forward an operation on behalf of ``wallet`` through ``dapp_id``.

        The wallet needs a valid session and an existing connection to a
        verified, active dApp. The executor's result is returned unchanged.
        """
        wallet = normalize_wallet(wallet)
        if not target:
            raise InvalidInput("Target must not be empty")

        with self._lock:
            session = self._valid_session(wallet, self.now())
            self.registry.require_available(dapp_id)
            if not session.is_connected(dapp_id):
                raise DappNotConnected(dapp_id)
            request = ExecutionRequest(
                wallet=wallet,
                dapp_id=dapp_id,
                target=target,
                payload=payload,
            )

        logger.info(f"Forwarding {wallet} call to {target} via dApp {dapp_id}")
        result = await self.executor.execute(request)
        logger.info(f"Forwarded call to {target} finished with success={result.success}")
        return result


# Singleton instance
_sso_service: Optional[SSOService] = None


def get_sso_service() -> SSOService:
    """Get the singleton SSO service instance."""
    global _sso_service
    if _sso_service is None:
        _sso_service = SSOService.from_settings()
    return _sso_service
