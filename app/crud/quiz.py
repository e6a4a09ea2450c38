from typing import Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.quiz import Quiz
from app.models.static_question import StaticQuestion
from app.schemas.quiz import QuizCreateRequest


async def get_quiz_by_id(
    session: AsyncSession,
    quiz_id: int,
    load_questions: bool = False,
) -> Quiz | None:
    """ID로 퀴즈 조회

    Args:
        session: 데이터베이스 세션
        quiz_id: 퀴즈 ID
        load_questions: 고정 문제 목록을 eager load할지 여부
    """
    stmt = select(Quiz).where(Quiz.id == quiz_id)

    if load_questions:
        stmt = stmt.options(selectinload(Quiz.static_questions))

    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_quizzes_for_teacher(
    session: AsyncSession,
    teacher_id: str | None,
) -> Sequence[Quiz]:
    """교사 본인 퀴즈 + 공개 퀴즈 조회 (최신순)"""
    stmt = select(Quiz)
    if teacher_id:
        stmt = stmt.where(or_(Quiz.teacher_id == teacher_id, Quiz.teacher_id.is_(None)))
    else:
        stmt = stmt.where(Quiz.teacher_id.is_(None))
    stmt = stmt.order_by(Quiz.created_at.desc(), Quiz.id.desc())
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_static_questions(
    session: AsyncSession,
    quiz_id: int,
) -> Sequence[StaticQuestion]:
    """고정 문제 세트를 order_index 순으로 조회"""
    stmt = (
        select(StaticQuestion)
        .where(StaticQuestion.quiz_id == quiz_id)
        .order_by(StaticQuestion.order_index)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def create_quiz(
    session: AsyncSession,
    request: QuizCreateRequest,
    teacher_id: str | None = None,
) -> Quiz:
    """퀴즈 생성 (고정 문제 세트면 문제도 함께 저장)"""
    question_count = request.question_count
    if request.quiz_type == "fixed-set":
        question_count = len(request.questions)

    quiz = Quiz(
        teacher_id=teacher_id,
        title=request.title,
        description=request.description,
        quiz_type=request.quiz_type,
        procedural_subtype=request.procedural_subtype,
        question_count=question_count,
        time_limit_seconds=request.time_limit_seconds,
    )
    session.add(quiz)
    await session.flush()

    for order_index, question in enumerate(request.questions):
        session.add(
            StaticQuestion(
                quiz_id=quiz.id,
                order_index=order_index,
                question_text=question.question_text,
                correct_answer=question.correct_answer,
                wrong_answers=list(question.wrong_answers),
            )
        )

    await session.commit()
    await session.refresh(quiz)
    return quiz
