import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import participant as participant_crud
from app.exceptions import ParticipantNotFoundError, RoomClosedError
from app.models.participant import Participant
from app.schemas import participant as participant_schema
from app.services import room_service
from app.services.change_feed import ChangeEvent, change_feed

logger = logging.getLogger(__name__)


def participant_row(participant: Participant, room_code: str) -> dict[str, Any]:
    """변경 알림용 참가자 행"""
    return {
        "id": participant.id,
        "room_id": participant.room_id,
        "room_code": room_code,
        "student_name": participant.student_name,
        "finished_at": participant.finished_at.isoformat() if participant.finished_at else None,
    }


async def join(
    session: AsyncSession,
    room_code: str,
    display_name: str,
) -> participant_schema.ParticipantResponse:
    """방 참여 (활성 방이면 항상 성공, 이름 중복 허용)

    Raises:
        RoomNotFoundError: 코드에 해당하는 활성 방이 없음
    """
    room = await room_service.get_active_room(session, room_code)

    # 자동 모드는 첫 학생 참여 시점을 시작 시각으로 본다
    if room.question_mode == "automatic" and room.started_at is None:
        room.started_at = datetime.now(timezone.utc)

    participant = await participant_crud.create_participant(session, room.id, display_name)
    logger.info(f"방 참여: room_code={room_code}, participant_id={participant.id}")

    change_feed.publish(
        ChangeEvent(table="participants", event="INSERT", row=participant_row(participant, room.room_code))
    )
    return participant_schema.ParticipantResponse.model_validate(participant)


async def get_participant(session: AsyncSession, participant_id: int) -> Participant:
    participant = await participant_crud.get_participant_by_id(session, participant_id)
    if not participant:
        raise ParticipantNotFoundError(participant_id)
    return participant


async def get_participant_in_open_room(session: AsyncSession, participant_id: int) -> Participant:
    """참가자 조회 + 방이 닫혔으면 즉시 실패"""
    participant = await get_participant(session, participant_id)
    if not participant.room.is_active:
        raise RoomClosedError(participant.room.room_code)
    return participant


async def mark_finished(
    session: AsyncSession,
    participant_id: int,
) -> participant_schema.ParticipantResponse:
    """완료 처리 (두 번째 호출부터는 변경 없음)

    Raises:
        ParticipantNotFoundError: 참가자 없음
        RoomClosedError: 종료된 방
    """
    participant = await get_participant_in_open_room(session, participant_id)
    if participant.finished_at is not None:
        return participant_schema.ParticipantResponse.model_validate(participant)

    room_code = participant.room.room_code
    participant = await participant_crud.mark_participant_finished(session, participant)
    logger.info(f"참가자 완료: room_code={room_code}, participant_id={participant_id}")

    change_feed.publish(
        ChangeEvent(table="participants", event="UPDATE", row=participant_row(participant, room_code))
    )
    return participant_schema.ParticipantResponse.model_validate(participant)


async def list_by_room(
    session: AsyncSession,
    room_code: str,
) -> participant_schema.ParticipantListResponse:
    """방 참가자 목록 (참여 순) + 완료 인원"""
    room = await room_service.get_room(session, room_code)
    participants = await participant_crud.get_participants_by_room(session, room.id)
    responses = [participant_schema.ParticipantResponse.model_validate(p) for p in participants]
    return participant_schema.ParticipantListResponse(
        participants=responses,
        total=len(responses),
        finished_count=sum(1 for p in responses if p.finished_at is not None),
    )
