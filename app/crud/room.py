from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.room import Room
from app.models.room_question import RoomQuestion


async def get_room_by_id(session: AsyncSession, room_id: int) -> Room | None:
    """ID로 방 조회"""
    stmt = select(Room).where(Room.id == room_id).options(selectinload(Room.quiz))
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_active_room_by_code(session: AsyncSession, room_code: str) -> Room | None:
    """참여 코드로 활성 방 조회 (활성 방 사이에서는 코드가 유일)"""
    stmt = (
        select(Room)
        .where(Room.room_code == room_code, Room.is_active.is_(True))
        .options(selectinload(Room.quiz))
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_room_by_code(
    session: AsyncSession,
    room_code: str,
    teacher_id: str | None = None,
) -> Room | None:
    """참여 코드로 방 조회 (활성 방 우선, 없으면 가장 최근에 만든 방)

    teacher_id를 주면 그 교사의 방 중에서만 찾는다.
    """
    stmt = select(Room).where(Room.room_code == room_code)
    if teacher_id is not None:
        stmt = stmt.where(Room.teacher_id == teacher_id)
    stmt = (
        stmt.options(selectinload(Room.quiz))
        .order_by(Room.is_active.desc(), Room.created_at.desc(), Room.id.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def is_room_code_in_use(session: AsyncSession, room_code: str) -> bool:
    """이 코드를 쓰는 방이 남아 있는지 확인 (종료된 방 포함, 삭제하면 풀림)"""
    stmt = select(func.count(Room.id)).where(Room.room_code == room_code)
    count = await session.scalar(stmt)
    return bool(count)


async def get_rooms_by_teacher(session: AsyncSession, teacher_id: str) -> Sequence[Room]:
    """교사의 방 목록 (최신순)"""
    stmt = (
        select(Room)
        .where(Room.teacher_id == teacher_id)
        .options(selectinload(Room.quiz))
        .order_by(Room.created_at.desc(), Room.id.desc())
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_room_questions(session: AsyncSession, room_id: int) -> Sequence[RoomQuestion]:
    """방 실행 문제 목록 (인덱스 순)"""
    stmt = (
        select(RoomQuestion)
        .where(RoomQuestion.room_id == room_id)
        .order_by(RoomQuestion.question_index)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_room_question(
    session: AsyncSession,
    room_id: int,
    question_index: int,
) -> RoomQuestion | None:
    """방 실행 문제 단건 조회"""
    stmt = select(RoomQuestion).where(
        RoomQuestion.room_id == room_id,
        RoomQuestion.question_index == question_index,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def count_room_questions(session: AsyncSession, room_id: int) -> int:
    """방 실행 문제 개수"""
    stmt = select(func.count(RoomQuestion.id)).where(RoomQuestion.room_id == room_id)
    total = await session.scalar(stmt)
    return total or 0


async def delete_room(session: AsyncSession, room: Room) -> None:
    """방 삭제 (참가자/답안/실행 문제는 cascade)"""
    await session.delete(room)
    await session.commit()
