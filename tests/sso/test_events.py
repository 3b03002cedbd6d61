"""
Tests for the in-process event bus.
"""

from dapp_sso.sso.events import (
    DappConnected,
    EventBus,
    EventType,
    SessionCreated,
    WalletDisconnected,
)


def _created(session_id: int, timestamp: int = 100) -> SessionCreated:
    return SessionCreated(
        timestamp=timestamp,
        wallet="0xW",
        session_id=session_id,
        expiry_time=timestamp + 3600,
    )


class TestEventBus:

    def test_type_specific_and_wildcard_subscribers(self):
        bus = EventBus()
        created, everything = [], []
        bus.subscribe(created.append, EventType.SESSION_CREATED)
        bus.subscribe(everything.append)

        bus.publish(_created(1))
        bus.publish(WalletDisconnected(timestamp=101, wallet="0xW", session_id=1))

        assert [e.session_id for e in created] == [1]
        assert [e.event_type for e in everything] == [
            EventType.SESSION_CREATED,
            EventType.WALLET_DISCONNECTED,
        ]

    def test_unsubscribe(self):
        bus = EventBus()
        seen = []
        bus.subscribe(seen.append, EventType.SESSION_CREATED)
        bus.unsubscribe(seen.append, EventType.SESSION_CREATED)

        bus.publish(_created(1))

        assert seen == []

    def test_failing_subscriber_does_not_stop_others(self):
        bus = EventBus()
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(broken)
        bus.subscribe(seen.append)

        bus.publish(_created(1))

        assert len(seen) == 1
        assert len(bus.recent()) == 1

    def test_recent_is_newest_first_and_filtered(self):
        bus = EventBus()
        bus.publish(_created(1))
        bus.publish(DappConnected(timestamp=101, wallet="0xW", dapp_id="x", session_id=1))
        bus.publish(_created(2))

        assert [e.session_id for e in bus.recent()] == [2, 1, 1]
        assert [e.session_id for e in bus.recent(event_type=EventType.SESSION_CREATED)] == [2, 1]
        assert len(bus.recent(limit=1)) == 1

    def test_history_is_bounded(self):
        bus = EventBus(history_size=2)
        for session_id in range(1, 5):
            bus.publish(_created(session_id))

        assert [e.session_id for e in bus.recent()] == [4, 3]

    def test_events_get_unique_ids(self):
        first, second = _created(1), _created(1)

        assert first.id != second.id
        assert first.model_dump()["event_type"] == EventType.SESSION_CREATED
