import logging
import random

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import quiz as quiz_crud
from app.exceptions import BaseAppError, QuizNotFoundError
from app.schemas import quiz as quiz_schema
from app.services import question_supply

logger = logging.getLogger(__name__)


async def create_quiz(
    session: AsyncSession,
    request: quiz_schema.QuizCreateRequest,
    teacher_id: str | None = None,
) -> quiz_schema.QuizResponse:
    """퀴즈 생성

    절차적 퀴즈는 유형만 저장하고 문제는 방을 만들 때 생성한다. 생성기가 없는
    유형(fractions, angles)은 저장 전에 거부한다.
    """
    if request.quiz_type == "procedural":
        # 생성 가능 여부만 미리 확인
        question_supply.generate(request.procedural_subtype, 1)

    try:
        quiz = await quiz_crud.create_quiz(session, request, teacher_id=teacher_id)
    except BaseAppError:
        raise
    except Exception as e:
        logger.error(f"퀴즈 생성 실패: title={request.title}, error={e}", exc_info=True)
        await session.rollback()
        raise

    logger.info(f"퀴즈 생성: quiz_id={quiz.id}, type={quiz.quiz_type}, teacher_id={teacher_id}")
    return quiz_schema.QuizResponse.model_validate(quiz)


async def list_quizzes(
    session: AsyncSession,
    teacher_id: str | None,
) -> quiz_schema.QuizListResponse:
    """교사 퀴즈 + 공개 퀴즈 목록"""
    quizzes = await quiz_crud.get_quizzes_for_teacher(session, teacher_id)
    responses = [quiz_schema.QuizResponse.model_validate(q) for q in quizzes]
    return quiz_schema.QuizListResponse(quizzes=responses, total=len(responses))


async def get_quiz(session: AsyncSession, quiz_id: int) -> quiz_schema.QuizResponse:
    quiz = await quiz_crud.get_quiz_by_id(session, quiz_id)
    if not quiz:
        raise QuizNotFoundError(quiz_id)
    return quiz_schema.QuizResponse.model_validate(quiz)


async def preview_questions(
    session: AsyncSession,
    quiz_id: int,
    seed: int | None = None,
) -> quiz_schema.QuestionPreviewResponse:
    """문제 미리보기 (절차적 퀴즈는 매번 새로 생성되므로 방 실행 목록과 다를 수 있음)"""
    quiz = await quiz_crud.get_quiz_by_id(session, quiz_id)
    if not quiz:
        raise QuizNotFoundError(quiz_id)

    questions = await question_supply.supply_questions(session, quiz, rng=random.Random(seed))
    return quiz_schema.QuestionPreviewResponse(
        quiz_id=quiz.id,
        questions=questions,
        total=len(questions),
    )
