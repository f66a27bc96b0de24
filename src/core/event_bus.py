"""EventBus - 스토어 → 구독자(UI 알림, 저장, 로그) 이벤트 통신

규칙:
- 엔진 Core는 EventBus를 모른다. 발행은 스토어(서비스)만 한다
- 이벤트는 식별자(ID)만 전달한다. 스냅샷 객체 전달 금지
- 전파 깊이 최대 MAX_DEPTH 단계
- 한 트랜잭션 안에서 동일 source의 동일 이벤트 중복 발행 금지
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Set

from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # 한 트랜잭션 내 이벤트 전파 최대 깊이


@dataclass
class GameEvent:
    """이벤트 데이터 컨테이너

    Args:
        event_type: 이벤트 유형 (예: "item_equipped", "item_crafted")
        data: 이벤트 데이터 (save_id, instance_id 등 ID 위주)
        source: 발행한 서비스 이름
    """

    event_type: str
    data: Dict[str, Any]
    source: str

    # 내부 추적용 (외부에서 설정하지 않음)
    _depth: int = field(default=0, repr=False)


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """동기식 이벤트 버스

    사용 패턴:
        bus = EventBus()
        bus.subscribe("item_moved", toast.on_item_moved)
        bus.emit(GameEvent(event_type="item_moved", data={"save_id": "s1"}, source="inventory_service"))
        bus.reset_chain()  # 트랜잭션 종료
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0
        self._emitted_in_chain: Set[str] = set()  # "source:event_type"

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("EventBus subscribe: %s → %s", event_type, _name(handler))

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type)
        if not handlers or handler not in handlers:
            logger.warning("Handler not registered: %s → %s", event_type, _name(handler))
            return
        handlers.remove(handler)
        logger.debug("EventBus unsubscribe: %s → %s", event_type, _name(handler))

    def emit(self, event: GameEvent) -> None:
        """등록된 핸들러를 동기 호출.

        1. 전파 깊이 MAX_DEPTH 초과 시 무시
        2. 같은 체인에서 동일 source:event_type 재발행 시 무시
        핸들러 예외는 로그만 남기고 다음 핸들러로 진행 (커밋은 이미 끝난 상태).
        """
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                "EventBus depth exceeded (%d): %s:%s dropped",
                MAX_DEPTH,
                event.source,
                event.event_type,
            )
            return

        chain_key = f"{event.source}:{event.event_type}"
        if chain_key in self._emitted_in_chain:
            logger.warning("EventBus duplicate blocked: %s", chain_key)
            return

        self._emitted_in_chain.add(chain_key)
        event._depth = self._current_depth

        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            logger.debug("EventBus: no subscribers for %s", event.event_type)
            return

        logger.debug(
            "EventBus emit: %s (source=%s, depth=%d, handlers=%d)",
            event.event_type,
            event.source,
            self._current_depth,
            len(handlers),
        )

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "EventBus handler error: %s (event=%s)",
                        _name(handler),
                        event.event_type,
                    )
        finally:
            self._current_depth -= 1

    def reset_chain(self) -> None:
        """트랜잭션 종료 시 호출. 중복 추적 초기화."""
        self._emitted_in_chain.clear()
        self._current_depth = 0

    def clear(self) -> None:
        """모든 구독 해제 (테스트용)"""
        self._handlers.clear()
        self.reset_chain()

    @property
    def handler_count(self) -> int:
        return sum(len(h) for h in self._handlers.values())


def _name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", repr(handler))
