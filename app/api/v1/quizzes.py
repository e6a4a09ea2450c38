from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_teacher_id_optional
from app.models.base import get_db
from app.schemas import quiz as quiz_schema
from app.services import quiz_service

router = APIRouter(prefix="/quizzes", tags=["quizzes"])


@router.post("", response_model=quiz_schema.QuizResponse, status_code=status.HTTP_201_CREATED)
async def create_quiz(
    request: quiz_schema.QuizCreateRequest,
    teacher_id: str | None = Depends(get_teacher_id_optional),
    db: AsyncSession = Depends(get_db),
):
    """퀴즈 생성 API (헤더가 없으면 공개 퀴즈)"""
    return await quiz_service.create_quiz(db, request, teacher_id=teacher_id)


@router.get("", response_model=quiz_schema.QuizListResponse)
async def list_quizzes(
    teacher_id: str | None = Depends(get_teacher_id_optional),
    db: AsyncSession = Depends(get_db),
):
    """퀴즈 목록 조회 API (내 퀴즈 + 공개 퀴즈)"""
    return await quiz_service.list_quizzes(db, teacher_id)


@router.get("/{quiz_id}", response_model=quiz_schema.QuizResponse)
async def get_quiz(
    quiz_id: int,
    db: AsyncSession = Depends(get_db),
):
    """퀴즈 조회 API"""
    return await quiz_service.get_quiz(db, quiz_id)


@router.get("/{quiz_id}/preview", response_model=quiz_schema.QuestionPreviewResponse)
async def preview_quiz(
    quiz_id: int,
    seed: int | None = Query(None, description="절차적 생성 시드"),
    db: AsyncSession = Depends(get_db),
):
    """문제 미리보기 API"""
    return await quiz_service.preview_questions(db, quiz_id, seed=seed)
