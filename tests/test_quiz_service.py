"""Quiz Service 테스트"""
from datetime import datetime, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import quiz as quiz_crud
from app.exceptions import QuizNotFoundError, UnsupportedQuizSubtypeError
from app.schemas import quiz as quiz_schema
from app.services import quiz_service


@pytest.fixture
def mock_db_session():
    """모킹된 DB 세션"""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def mock_quiz():
    """모킹된 절차적 퀴즈"""
    quiz = MagicMock()
    quiz.id = 1
    quiz.teacher_id = "teacher-1"
    quiz.title = "한 자리 덧셈"
    quiz.description = None
    quiz.quiz_type = "procedural"
    quiz.procedural_subtype = "addition_single"
    quiz.question_count = 5
    quiz.time_limit_seconds = 20
    quiz.created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return quiz


@pytest.mark.asyncio
async def test_create_procedural_quiz(mock_db_session, mock_quiz):
    request = quiz_schema.QuizCreateRequest(
        title="한 자리 덧셈",
        quiz_type="procedural",
        procedural_subtype="addition_single",
        question_count=5,
    )
    with patch.object(quiz_crud, "create_quiz", new_callable=AsyncMock, return_value=mock_quiz) as mock_create:
        result = await quiz_service.create_quiz(mock_db_session, request, teacher_id="teacher-1")

    assert result.id == 1
    assert result.procedural_subtype == "addition_single"
    mock_create.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("subtype", ["fractions", "angles"])
async def test_create_quiz_declared_only_subtype_rejected(mock_db_session, subtype):
    """생성기가 없는 유형은 저장하지 않음"""
    request = quiz_schema.QuizCreateRequest(
        title="분수",
        quiz_type="procedural",
        procedural_subtype=subtype,
    )
    with patch.object(quiz_crud, "create_quiz", new_callable=AsyncMock) as mock_create:
        with pytest.raises(UnsupportedQuizSubtypeError):
            await quiz_service.create_quiz(mock_db_session, request)

    mock_create.assert_not_called()


def test_create_request_accepts_legacy_type_names():
    request = quiz_schema.QuizCreateRequest(
        title="레거시",
        quiz_type="dynamic",
        dynamic_subtype="addition_double",
    )
    assert request.quiz_type == "procedural"
    assert request.procedural_subtype == "addition_double"


def test_create_request_fixed_set_requires_questions():
    with pytest.raises(ValueError):
        quiz_schema.QuizCreateRequest(title="빈 세트", quiz_type="fixed-set")


@pytest.mark.asyncio
async def test_get_quiz_not_found(mock_db_session):
    with patch.object(quiz_crud, "get_quiz_by_id", new_callable=AsyncMock, return_value=None):
        with pytest.raises(QuizNotFoundError) as exc_info:
            await quiz_service.get_quiz(mock_db_session, 999)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_list_quizzes(mock_db_session, mock_quiz):
    with patch.object(quiz_crud, "get_quizzes_for_teacher", new_callable=AsyncMock, return_value=[mock_quiz]):
        result = await quiz_service.list_quizzes(mock_db_session, "teacher-1")

    assert result.total == 1
    assert result.quizzes[0].title == "한 자리 덧셈"


@pytest.mark.asyncio
async def test_preview_questions_seed_is_reproducible(mock_db_session, mock_quiz):
    with patch.object(quiz_crud, "get_quiz_by_id", new_callable=AsyncMock, return_value=mock_quiz):
        first = await quiz_service.preview_questions(mock_db_session, 1, seed=42)
        second = await quiz_service.preview_questions(mock_db_session, 1, seed=42)

    assert first.total == 5
    assert first.questions == second.questions
