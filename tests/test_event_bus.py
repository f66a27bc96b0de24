"""EventBus 테스트"""

from src.core.event_bus import MAX_DEPTH, EventBus, GameEvent
from src.core.event_types import EventTypes


def _event(event_type: str = EventTypes.ITEM_MOVED, source: str = "inventory_service") -> GameEvent:
    return GameEvent(event_type=event_type, data={"save_id": "s1"}, source=source)


class TestSubscribeEmit:
    def test_handler_receives_ids(self) -> None:
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_MOVED, received.append)
        bus.emit(_event())
        assert len(received) == 1
        assert received[0].data == {"save_id": "s1"}

    def test_handlers_called_in_order(self) -> None:
        bus = EventBus()
        calls = []
        bus.subscribe(EventTypes.ITEM_CRAFTED, lambda e: calls.append("toast"))
        bus.subscribe(EventTypes.ITEM_CRAFTED, lambda e: calls.append("log"))
        bus.emit(_event(EventTypes.ITEM_CRAFTED))
        assert calls == ["toast", "log"]

    def test_other_event_types_ignored(self) -> None:
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_EQUIPPED, received.append)
        bus.emit(_event(EventTypes.ITEM_TRASHED))
        assert received == []

    def test_unsubscribe(self) -> None:
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_MOVED, received.append)
        bus.unsubscribe(EventTypes.ITEM_MOVED, received.append)
        bus.emit(_event())
        assert received == []
        assert bus.handler_count == 0

    def test_unsubscribe_unknown_handler_is_harmless(self) -> None:
        bus = EventBus()
        bus.unsubscribe(EventTypes.ITEM_MOVED, lambda e: None)


class TestChainGuards:
    def test_depth_limit(self) -> None:
        bus = EventBus()
        calls = 0

        def relay(event: GameEvent) -> None:
            nonlocal calls
            calls += 1
            bus.emit(_event(source=f"relay_{calls}"))

        bus.subscribe(EventTypes.ITEM_MOVED, relay)
        bus.emit(_event())
        assert calls == MAX_DEPTH

    def test_duplicate_in_chain_blocked(self) -> None:
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_MOVED, received.append)
        bus.emit(_event())
        bus.emit(_event())
        assert len(received) == 1

    def test_reset_chain_allows_next_transaction(self) -> None:
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_MOVED, received.append)
        bus.emit(_event())
        bus.reset_chain()
        bus.emit(_event())
        assert len(received) == 2


class TestHandlerError:
    def test_failing_handler_does_not_stop_others(self) -> None:
        bus = EventBus()
        results = []

        def broken(event: GameEvent) -> None:
            raise RuntimeError("toast renderer crashed")

        bus.subscribe(EventTypes.ITEM_CONSUMED, broken)
        bus.subscribe(EventTypes.ITEM_CONSUMED, lambda e: results.append("saved"))
        bus.emit(_event(EventTypes.ITEM_CONSUMED))
        assert results == ["saved"]

    def test_clear(self) -> None:
        bus = EventBus()
        bus.subscribe(EventTypes.ITEM_MOVED, lambda e: None)
        bus.subscribe(EventTypes.BUFF_APPLIED, lambda e: None)
        assert bus.handler_count == 2
        bus.clear()
        assert bus.handler_count == 0
