from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.answer import Answer
from app.models.participant import Participant


async def get_answer(
    session: AsyncSession,
    participant_id: int,
    question_index: int,
) -> Answer | None:
    """참가자/문제 인덱스로 답안 조회"""
    stmt = select(Answer).where(
        Answer.participant_id == participant_id,
        Answer.question_index == question_index,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_answer(
    session: AsyncSession,
    participant_id: int,
    question_index: int,
    question_text: str,
    given_answer: str,
    correct_answer: str,
    is_correct: bool,
    time_taken_seconds: int | None = None,
) -> Answer:
    """답안 생성 (중복이면 IntegrityError)"""
    answer = Answer(
        participant_id=participant_id,
        question_index=question_index,
        question_text=question_text,
        given_answer=given_answer,
        correct_answer=correct_answer,
        is_correct=is_correct,
        time_taken_seconds=time_taken_seconds,
    )
    session.add(answer)
    await session.commit()
    await session.refresh(answer)
    return answer


async def count_question_answers(
    session: AsyncSession,
    room_id: int,
    question_index: int,
) -> tuple[int, int]:
    """방 단위 문제별 (정답 수, 전체 답안 수)"""
    stmt = (
        select(
            func.count(Answer.id),
            func.sum(case((Answer.is_correct.is_(True), 1), else_=0)),
        )
        .select_from(Answer)
        .join(Participant, Participant.id == Answer.participant_id)
        .where(Participant.room_id == room_id, Answer.question_index == question_index)
    )
    result = await session.execute(stmt)
    total, correct = result.one()
    return correct or 0, total or 0
