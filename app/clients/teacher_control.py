import logging
from typing import Any, AsyncIterator

from app.clients.api_client import RoomApiClient
from app.exceptions import LastQuestionError
from app.schemas import (
    answer as answer_schema,
    participant as participant_schema,
    room as room_schema,
)

logger = logging.getLogger(__name__)

LAST_QUESTION_NOTICE = "마지막 문제입니다. 퀴즈를 종료하려면 종료 버튼을 누르세요."


class TeacherControlView:
    """교사 진행 화면

    방/참가자/현재 문제 집계를 보관하고, 알림을 받으면 해당 데이터를 다시 읽는다.
    """

    def __init__(self, api: RoomApiClient, room_code: str):
        self.api = api
        self.room_code = room_code
        self.room: room_schema.RoomResponse | None = None
        self.questions: list[room_schema.RoomQuestionResponse] = []
        self.participants: list[participant_schema.ParticipantResponse] = []
        self.finished_count = 0
        self.stats: answer_schema.QuestionStatsResponse | None = None
        self.notice: str | None = None

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def current_question(self) -> room_schema.RoomQuestionResponse | None:
        if self.room is None or self.room.current_question_index is None:
            return None
        index = self.room.current_question_index
        if 0 <= index < len(self.questions):
            return self.questions[index]
        return None

    @property
    def is_last_question(self) -> bool:
        if self.room is None or self.room.current_question_index is None:
            return False
        return self.room.current_question_index >= len(self.questions) - 1

    async def load(self) -> None:
        """전체 상태 조회 (최초 진입/재연결)"""
        self.room = await self.api.get_room(self.room_code)
        self.questions = (await self.api.get_questions(self.room_code)).questions
        await self.refresh_participants()
        await self.refresh_stats()

    resync = load

    async def refresh_room(self) -> None:
        self.room = await self.api.get_room(self.room_code)

    async def refresh_participants(self) -> None:
        result = await self.api.list_participants(self.room_code)
        self.participants = result.participants
        self.finished_count = result.finished_count

    async def refresh_stats(self) -> None:
        if self.room is None or self.room.current_question_index is None:
            self.stats = None
            return
        self.stats = await self.api.question_stats(self.room_code, self.room.current_question_index)

    async def handle_message(self, message: dict[str, Any]) -> None:
        message_type = message.get("type")
        if message_type == "snapshot":
            self.room = room_schema.RoomResponse.model_validate(message["room"])
            participants = [participant_schema.ParticipantResponse.model_validate(p) for p in message["participants"]]
            self.participants = participants
            self.finished_count = sum(1 for p in participants if p.finished_at is not None)
            await self.refresh_stats()
        elif message_type == "resync":
            await self.resync()
        elif message_type == "change":
            table = message.get("table")
            if table == "participants":
                await self.refresh_participants()
            elif table == "answers":
                await self.refresh_stats()
            elif table == "rooms":
                await self.refresh_room()
                await self.refresh_stats()

    async def run(self, messages: AsyncIterator[dict[str, Any]]) -> None:
        async for message in messages:
            await self.handle_message(message)

    async def _apply(self, room: room_schema.RoomResponse) -> room_schema.RoomResponse:
        self.room = room
        self.notice = None
        await self.refresh_stats()
        return room

    async def start(self, index: int = 0) -> room_schema.RoomResponse:
        return await self._apply(await self.api.start(self.room_code, index=index))

    async def advance(self) -> room_schema.RoomResponse | None:
        """다음 문제 (마지막 문제면 상태는 그대로 두고 안내 문구만 표시)"""
        try:
            room = await self.api.advance(self.room_code)
        except LastQuestionError:
            self.notice = LAST_QUESTION_NOTICE
            logger.info(f"마지막 문제에서 다음 문제 요청: room_code={self.room_code}")
            return None
        return await self._apply(room)

    async def reveal(self) -> room_schema.RoomResponse:
        return await self._apply(await self.api.reveal(self.room_code))

    async def hide(self) -> room_schema.RoomResponse:
        return await self._apply(await self.api.hide(self.room_code))

    async def end(self) -> room_schema.RoomResponse:
        room = await self._apply(await self.api.end(self.room_code))
        logger.info(f"퀴즈 종료: room_code={self.room_code}, participants={self.participant_count}")
        return room

    async def export_csv(self) -> str:
        return await self.api.export_csv(self.room_code)
