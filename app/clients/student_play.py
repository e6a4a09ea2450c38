"""학생 플레이 화면 로직

자동 모드와 수동 모드는 진행 방식이 달라 별도 클래스로 둔다.
- 자동 모드: 학생마다 자기 인덱스를 가지고, 답을 내거나 시간이 끝나면 스스로 다음 문제로 넘어간다.
- 수동 모드: 방의 current_question_index가 유일한 기준이다. 알림을 받으면 항상 방 상태를
  다시 읽고 그 값에 맞춘다.

두 모드가 공유하는 것은 AnswerGate 하나다. 시간 초과와 학생의 답 선택 중 먼저 온
쪽만 기록하고 나머지는 무시한다.
"""
import asyncio
import logging
import time
from enum import Enum
from typing import Any, AsyncIterator, Callable

from app.clients.api_client import RoomApiClient
from app.clients.timer import QuestionTimer
from app.core.config import settings
from app.exceptions import BaseAppError, ParticipantNotFoundError, RoomClosedError, RoomNotFoundError
from app.schemas import answer as answer_schema, room as room_schema

logger = logging.getLogger(__name__)

# 시간 초과 시 기록되는 답
TIME_UP_ANSWER = ""

# 방이 종료/삭제되었거나 참가 기록이 사라진 경우
ROOM_GONE_ERRORS = (RoomClosedError, RoomNotFoundError, ParticipantNotFoundError)


class PlayStatus(str, Enum):
    LOADING = "loading"
    WAITING = "waiting"  # 수동 모드: 교사가 아직 시작하지 않음
    ANSWERING = "answering"
    ANSWERED = "answered"
    RESULTS = "results"  # 수동 모드: 교사가 정답 공개
    FINISHED = "finished"
    CLOSED = "closed"


class AnswerGate:
    """문제 하나에 대한 '이미 답했음' 플래그 + 시간 측정 + 타이머"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.question_index: int | None = None
        self.answered = False
        self.started_at: float | None = None
        self.timer: QuestionTimer | None = None

    def begin(self, question_index: int, time_limit: int | None, on_time_up) -> None:
        """새 문제 시작 (이전 타이머는 취소)"""
        self.stop_timer()
        self.question_index = question_index
        self.answered = False
        self.started_at = self._clock()
        if time_limit:
            self.timer = QuestionTimer(time_limit, on_time_up)
            self.timer.start()

    def claim(self) -> bool:
        """먼저 도착한 쪽만 True"""
        if self.answered or self.question_index is None:
            return False
        self.answered = True
        self.stop_timer()
        return True

    def release(self) -> None:
        # 제출 실패 시 학생이 다시 누를 수 있도록
        self.answered = False

    def elapsed_seconds(self) -> int:
        if self.started_at is None:
            return 0
        return round(self._clock() - self.started_at)

    def stop_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()


class AutomaticPlaySession:
    """자동 모드: 학생별 독립 진행"""

    def __init__(
        self,
        api: RoomApiClient,
        room_code: str,
        participant_id: int,
        advance_delay: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api = api
        self.room_code = room_code
        self.participant_id = participant_id
        self.advance_delay = settings.auto_advance_delay_seconds if advance_delay is None else advance_delay
        self.gate = AnswerGate(clock)
        self.status = PlayStatus.LOADING
        self.room: room_schema.RoomResponse | None = None
        # 처음 읽은 방 ID (코드가 같은 다른 방을 따라가지 않도록)
        self.room_id: int | None = None
        self.questions: list[room_schema.RoomQuestionResponse] = []
        self.current_index = 0
        self.results: list[answer_schema.AnswerResponse] = []
        self.last_error: Exception | None = None

    @property
    def score(self) -> int:
        return sum(1 for a in self.results if a.is_correct)

    @property
    def current_question(self) -> room_schema.RoomQuestionResponse | None:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    async def start(self) -> None:
        self.room = await self.api.get_room(self.room_code)
        self.room_id = self.room.id
        if not self.room.is_active:
            self._close()
            return
        self.questions = (await self.api.get_questions(self.room_code)).questions
        self._begin(0)

    def _begin(self, index: int) -> None:
        self.current_index = index
        self.status = PlayStatus.ANSWERING
        self.gate.begin(index, self.room.time_limit_per_question if self.room else None, self._on_time_up)

    async def answer(self, given_answer: str) -> answer_schema.AnswerSubmitResponse | None:
        """답 선택 (이미 답했거나 시간이 끝난 문제면 무시)"""
        if self.status != PlayStatus.ANSWERING or not self.gate.claim():
            return None
        return await self._submit(given_answer)

    async def _on_time_up(self) -> None:
        if self.status != PlayStatus.ANSWERING or not self.gate.claim():
            return
        try:
            await self._submit(TIME_UP_ANSWER)
        except BaseAppError as e:
            logger.warning(f"시간 초과 답안 기록 실패: participant_id={self.participant_id}, error={e.message}")

    async def _submit(self, given_answer: str) -> answer_schema.AnswerSubmitResponse | None:
        index = self.current_index
        try:
            result = await self.api.submit_answer(
                self.participant_id,
                index,
                given_answer,
                time_taken_seconds=self.gate.elapsed_seconds(),
            )
        except ROOM_GONE_ERRORS:
            self._close()
            return None
        except BaseAppError as e:
            self.gate.release()
            self.last_error = e
            raise

        self.results.append(result.answer)
        self.status = PlayStatus.ANSWERED
        await self._advance_after_delay()
        return result

    async def _advance_after_delay(self) -> None:
        if self.advance_delay > 0:
            await asyncio.sleep(self.advance_delay)
        if self.status == PlayStatus.CLOSED:
            return
        if self.current_index + 1 < len(self.questions):
            self._begin(self.current_index + 1)
        else:
            await self._finish()

    async def _finish(self) -> None:
        try:
            await self.api.finish(self.participant_id)
        except ROOM_GONE_ERRORS:
            self._close()
            return
        self.gate.stop_timer()
        self.status = PlayStatus.FINISHED
        logger.info(f"자동 모드 완료: participant_id={self.participant_id}, score={self.score}/{len(self.questions)}")

    def _close(self) -> None:
        self.gate.stop_timer()
        self.status = PlayStatus.CLOSED

    async def handle_message(self, message: dict[str, Any]) -> None:
        """자동 모드는 방 종료 여부만 확인"""
        if message.get("type") == "change" and message.get("table") != "rooms":
            return
        await self.resync()

    async def resync(self) -> None:
        if self.status == PlayStatus.FINISHED:
            return
        try:
            room = await self.api.get_room(self.room_code)
        except RoomNotFoundError:
            logger.info(f"방 삭제 감지: room_code={self.room_code}, participant_id={self.participant_id}")
            self._close()
            return
        if self.room_id is not None and room.id != self.room_id:
            logger.info(f"참여 코드가 다른 방으로 바뀜: room_code={self.room_code}, room_id={self.room_id}")
            self._close()
            return
        self.room = room
        if not room.is_active:
            logger.info(f"방 종료 감지: room_code={self.room_code}, participant_id={self.participant_id}")
            self._close()

    async def run(self, messages: AsyncIterator[dict[str, Any]]) -> None:
        async for message in messages:
            await self.handle_message(message)
            if self.status in (PlayStatus.CLOSED, PlayStatus.FINISHED):
                break


class ManualPlaySession:
    """수동 모드: 교사가 진행하는 방 인덱스를 따라감"""

    def __init__(
        self,
        api: RoomApiClient,
        room_code: str,
        participant_id: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api = api
        self.room_code = room_code
        self.participant_id = participant_id
        self.gate = AnswerGate(clock)
        self.status = PlayStatus.LOADING
        self.room: room_schema.RoomResponse | None = None
        # 처음 읽은 방 ID (코드가 같은 다른 방을 따라가지 않도록)
        self.room_id: int | None = None
        self.questions: list[room_schema.RoomQuestionResponse] = []
        self.current_index: int | None = None
        self.stats: answer_schema.QuestionStatsResponse | None = None
        self.results: dict[int, answer_schema.AnswerResponse] = {}
        self.last_error: Exception | None = None

    @property
    def score(self) -> int:
        return sum(1 for a in self.results.values() if a.is_correct)

    @property
    def current_question(self) -> room_schema.RoomQuestionResponse | None:
        if self.current_index is not None and 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    async def start(self) -> None:
        self.questions = (await self.api.get_questions(self.room_code)).questions
        await self.reconcile()

    def _close(self) -> None:
        self.gate.stop_timer()
        self.status = PlayStatus.CLOSED

    async def reconcile(self, room: room_schema.RoomResponse | None = None) -> None:
        """권위 있는 방 상태에 로컬 화면을 맞춤

        알림 내용은 믿지 않고 항상 방을 다시 읽는다. 스냅샷처럼 방 전체가 함께 온
        경우에만 room 인자로 받는다.
        """
        if room is None:
            try:
                room = await self.api.get_room(self.room_code)
            except RoomNotFoundError:
                logger.info(f"방 삭제 감지: room_code={self.room_code}, participant_id={self.participant_id}")
                self._close()
                return

        if self.room_id is None:
            self.room_id = room.id
        elif room.id != self.room_id:
            logger.info(f"참여 코드가 다른 방으로 바뀜: room_code={self.room_code}, room_id={self.room_id}")
            self._close()
            return
        self.room = room

        if not self.room.is_active:
            if self.status != PlayStatus.CLOSED:
                logger.info(f"방 종료 감지: room_code={self.room_code}, participant_id={self.participant_id}")
            self._close()
            return

        index = self.room.current_question_index
        if index is None:
            self.status = PlayStatus.WAITING
            return

        if self.room.show_results:
            if index != self.current_index:
                # 정답 공개 중에 처음 들어온 경우
                self.current_index = index
                self.gate.begin(index, None, self._on_time_up)
            self.gate.stop_timer()
            self.stats = await self.api.question_stats(self.room_code, index)
            self.status = PlayStatus.RESULTS
            return

        self.stats = None
        if index != self.current_index:
            self.current_index = index
            self.gate.begin(index, self.room.time_limit_per_question, self._on_time_up)
            self.status = PlayStatus.ANSWERING
            logger.debug(f"새 문제: room_code={self.room_code}, index={index}")
        elif self.status == PlayStatus.RESULTS:
            # 정답 숨기기
            self.status = PlayStatus.ANSWERED if self.gate.answered else PlayStatus.ANSWERING
        elif self.status in (PlayStatus.WAITING, PlayStatus.LOADING):
            self.status = PlayStatus.ANSWERED if self.gate.answered else PlayStatus.ANSWERING

    async def answer(self, given_answer: str) -> answer_schema.AnswerSubmitResponse | None:
        if self.status != PlayStatus.ANSWERING or not self.gate.claim():
            return None
        return await self._submit(given_answer)

    async def _on_time_up(self) -> None:
        if self.status != PlayStatus.ANSWERING or not self.gate.claim():
            return
        try:
            await self._submit(TIME_UP_ANSWER)
        except BaseAppError as e:
            logger.warning(f"시간 초과 답안 기록 실패: participant_id={self.participant_id}, error={e.message}")

    async def _submit(self, given_answer: str) -> answer_schema.AnswerSubmitResponse | None:
        # 제출 도중 인덱스가 바뀌어도 학생이 본 문제 기준으로 기록
        index = self.gate.question_index
        try:
            result = await self.api.submit_answer(
                self.participant_id,
                index,
                given_answer,
                time_taken_seconds=self.gate.elapsed_seconds(),
            )
        except ROOM_GONE_ERRORS:
            self._close()
            return None
        except BaseAppError as e:
            self.gate.release()
            self.last_error = e
            raise

        self.results[index] = result.answer
        if self.status == PlayStatus.ANSWERING and self.current_index == index:
            self.status = PlayStatus.ANSWERED
        return result

    async def handle_message(self, message: dict[str, Any]) -> None:
        message_type = message.get("type")
        if message_type == "snapshot":
            await self.reconcile(room_schema.RoomResponse.model_validate(message["room"]))
        elif message_type == "resync":
            await self.resync()
        elif message_type == "change" and message.get("table") == "rooms":
            await self.reconcile()

    async def resync(self) -> None:
        """재연결 후 전체 상태 재조회 (방이 같을 때만 문제 목록도 다시 읽음)"""
        await self.reconcile()
        if self.status != PlayStatus.CLOSED:
            self.questions = (await self.api.get_questions(self.room_code)).questions

    async def run(self, messages: AsyncIterator[dict[str, Any]]) -> None:
        """알림 스트림 소비 (방이 닫히면 종료)"""
        async for message in messages:
            await self.handle_message(message)
            if self.status == PlayStatus.CLOSED:
                break
