import asyncio
import inspect
import logging
import time
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

ExpireCallback = Callable[[], Awaitable[None] | None]


class QuestionTimer:
    """문제당 카운트다운 (시간 초과 콜백은 최대 한 번만 실행, 취소 가능)"""

    def __init__(self, seconds: float, on_expire: ExpireCallback):
        if seconds <= 0:
            raise ValueError(f"제한 시간은 0보다 커야 합니다: {seconds}")
        self.seconds = seconds
        self._on_expire = on_expire
        self._task: asyncio.Task | None = None
        self._started_at: float | None = None
        self._fired = False
        self._cancelled = False

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._cancelled

    def start(self) -> None:
        if self._task is not None:
            raise RuntimeError("이미 시작된 타이머입니다")
        self._started_at = time.monotonic()
        self._task = asyncio.create_task(self._run())

    def remaining(self) -> float:
        if self._started_at is None:
            return self.seconds
        return max(0.0, self.seconds - (time.monotonic() - self._started_at))

    def cancel(self) -> None:
        """만료 전 취소 (이미 만료됐으면 아무것도 안 함)"""
        if self._fired or self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """타이머(및 만료 콜백)가 끝날 때까지 대기"""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._cancelled:
                raise

    async def _run(self) -> None:
        await asyncio.sleep(self.seconds)
        if self._cancelled or self._fired:
            return
        self._fired = True
        logger.debug(f"문제 시간 초과: seconds={self.seconds}")
        result = self._on_expire()
        if inspect.isawaitable(result):
            await result
