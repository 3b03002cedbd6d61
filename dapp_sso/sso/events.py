"""
Session and registry notifications.

Events are published after the state change they describe has been
committed. Subscribers run synchronously in publish order; a failing
subscriber is logged and does not undo the change.
"""

from __future__ import annotations

import logging
import uuid
from collections import deque
from enum import Enum
from typing import Callable, Deque, Dict, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Notifications emitted by SSOService."""

    SESSION_CREATED = "session_created"
    DAPP_CONNECTED = "dapp_connected"
    DAPP_REGISTERED = "dapp_registered"
    SESSION_EXTENDED = "session_extended"
    WALLET_DISCONNECTED = "wallet_disconnected"

    # Governance
    OPERATOR_TRANSFERRED = "operator_transferred"
    DAPP_VERIFICATION_CHANGED = "dapp_verification_changed"


class SSOEvent(BaseModel):
    """Common envelope."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    event_type: EventType
    timestamp: int


class SessionCreated(SSOEvent):
    event_type: EventType = EventType.SESSION_CREATED
    wallet: str
    session_id: int
    expiry_time: int


class DappConnected(SSOEvent):
    """Fires on every successful connect, including repeats."""

    event_type: EventType = EventType.DAPP_CONNECTED
    wallet: str
    dapp_id: str
    session_id: int


class DappRegistered(SSOEvent):
    event_type: EventType = EventType.DAPP_REGISTERED
    dapp_id: str
    name: str
    domain: str
    owner: str


class SessionExtended(SSOEvent):
    event_type: EventType = EventType.SESSION_EXTENDED
    wallet: str
    session_id: int
    expiry_time: int


class WalletDisconnected(SSOEvent):
    event_type: EventType = EventType.WALLET_DISCONNECTED
    wallet: str
    session_id: int


class OperatorTransferred(SSOEvent):
    event_type: EventType = EventType.OPERATOR_TRANSFERRED
    previous_operator: str
    new_operator: str


class DappVerificationChanged(SSOEvent):
    event_type: EventType = EventType.DAPP_VERIFICATION_CHANGED
    dapp_id: str
    is_verified: bool


EventCallback = Callable[[SSOEvent], None]


class EventBus:
    """In-process fan-out with a bounded history of recent events."""

    def __init__(self, history_size: int = 500):
        self._callbacks: Dict[Optional[EventType], List[EventCallback]] = {}
        self._history: Deque[SSOEvent] = deque(maxlen=history_size)

    def subscribe(
        self,
        callback: EventCallback,
        event_type: Optional[EventType] = None,
    ) -> None:
        """Register a callback for one event type, or for all when None."""
        self._callbacks.setdefault(event_type, []).append(callback)

    def unsubscribe(
        self,
        callback: EventCallback,
        event_type: Optional[EventType] = None,
    ) -> None:
        if event_type in self._callbacks:
            self._callbacks[event_type] = [
                cb for cb in self._callbacks[event_type] if cb != callback
            ]

    def publish(self, event: SSOEvent) -> None:
        self._history.append(event)
        callbacks = self._callbacks.get(event.event_type, []) + self._callbacks.get(None, [])
        for callback in callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Event callback error for {event.event_type.value}: {e}")

    def recent(
        self,
        limit: int = 50,
        event_type: Optional[EventType] = None,
    ) -> List[SSOEvent]:
        """Most recent events first."""
        events = [
            event for event in reversed(self._history)
            if event_type is None or event.event_type == event_type
        ]
        return events[:limit]
