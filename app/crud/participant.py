from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.participant import Participant


async def create_participant(
    session: AsyncSession,
    room_id: int,
    student_name: str,
) -> Participant:
    """참가자 생성"""
    participant = Participant(
        room_id=room_id,
        student_name=student_name,
        joined_at=datetime.now(timezone.utc),
    )
    session.add(participant)
    await session.commit()
    await session.refresh(participant)
    return participant


async def get_participant_by_id(
    session: AsyncSession,
    participant_id: int,
) -> Participant | None:
    """ID로 참가자 조회 (방 포함)"""
    stmt = (
        select(Participant)
        .where(Participant.id == participant_id)
        .options(selectinload(Participant.room))
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_participants_by_room(
    session: AsyncSession,
    room_id: int,
    load_answers: bool = False,
) -> Sequence[Participant]:
    """방 참가자 목록 (참여 순)"""
    stmt = (
        select(Participant)
        .where(Participant.room_id == room_id)
        .order_by(Participant.joined_at, Participant.id)
    )
    if load_answers:
        stmt = stmt.options(selectinload(Participant.answers))
    result = await session.execute(stmt)
    return result.scalars().all()


async def mark_participant_finished(
    session: AsyncSession,
    participant: Participant,
) -> Participant:
    """완료 시각 기록"""
    participant.finished_at = datetime.now(timezone.utc)
    await session.commit()
    await session.refresh(participant)
    return participant
