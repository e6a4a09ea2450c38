"""행 단위 변경 알림 피드 (프로세스 내 pub/sub)

서비스 계층이 커밋에 성공한 뒤 publish 하고, 실시간 WebSocket 엔드포인트가
테이블/행 조건으로 subscribe 한다. 알림은 "다시 읽어라"는 신호일 뿐이며
클라이언트는 델타를 적용하지 않고 항상 권위 있는 상태를 재조회한다.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from app.core.config import settings

logger = logging.getLogger(__name__)

RowPredicate = Callable[[dict[str, Any]], bool]

RESYNC_EVENT = "RESYNC"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event: str  # 'INSERT', 'UPDATE', 'DELETE', 'RESYNC'
    row: dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> dict[str, Any]:
        if self.event == RESYNC_EVENT:
            return {"type": "resync"}
        return {"type": "change", "table": self.table, "event": self.event, "row": self.row}


class Subscription:
    """구독 1건 (대기열이 가득 차면 밀린 알림을 버리고 resync 1건으로 대체)"""

    def __init__(
        self,
        feed: "ChangeFeed",
        tables: frozenset[str] | None,
        predicate: RowPredicate | None,
        maxsize: int,
    ):
        self._feed = feed
        self._tables = tables
        self._predicate = predicate
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=maxsize)
        self.overflow_count = 0

    def matches(self, event: ChangeEvent) -> bool:
        if self._tables is not None and event.table not in self._tables:
            return False
        if self._predicate is not None and not self._predicate(event.row):
            return False
        return True

    def deliver(self, event: ChangeEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.overflow_count += 1
            while not self._queue.empty():
                self._queue.get_nowait()
            self._queue.put_nowait(ChangeEvent(table=event.table, event=RESYNC_EVENT))
            logger.warning(f"실시간 구독 대기열 초과 → resync 전환 (overflow={self.overflow_count})")

    async def get(self) -> ChangeEvent:
        return await self._queue.get()

    def get_nowait(self) -> ChangeEvent | None:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self._feed.unsubscribe(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChangeEvent:
        return await self.get()


class ChangeFeed:
    """변경 알림 브로커"""

    def __init__(self, queue_size: int | None = None):
        self._queue_size = queue_size or settings.live_queue_size
        self._subscriptions: set[Subscription] = set()

    def subscribe(
        self,
        tables: set[str] | frozenset[str] | None = None,
        predicate: RowPredicate | None = None,
    ) -> Subscription:
        subscription = Subscription(
            self,
            frozenset(tables) if tables is not None else None,
            predicate,
            self._queue_size,
        )
        self._subscriptions.add(subscription)
        logger.debug(f"실시간 구독 추가: tables={tables}, total={len(self._subscriptions)}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscriptions.discard(subscription)

    def publish(self, event: ChangeEvent) -> int:
        """조건이 맞는 모든 구독자에게 전달, 전달한 구독자 수 반환"""
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.matches(event):
                subscription.deliver(event)
                delivered += 1
        logger.debug(f"변경 알림 발행: table={event.table}, event={event.event}, delivered={delivered}")
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)


def room_code_predicate(room_code: str) -> RowPredicate:
    """row['room_code'] == room_code 조건"""
    return lambda row: row.get("room_code") == room_code


change_feed = ChangeFeed()
