from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import get_db
from app.schemas import answer as answer_schema, participant as participant_schema
from app.services import answer_service, participant_service

router = APIRouter(prefix="/participants", tags=["participants"])


@router.get("/{participant_id}", response_model=participant_schema.ParticipantResponse)
async def get_participant(
    participant_id: int,
    db: AsyncSession = Depends(get_db),
):
    """참가자 조회 API"""
    participant = await participant_service.get_participant(db, participant_id)
    return participant_schema.ParticipantResponse.model_validate(participant)


@router.post(
    "/{participant_id}/answers",
    response_model=answer_schema.AnswerSubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_answer(
    participant_id: int,
    request: answer_schema.AnswerSubmitRequest,
    db: AsyncSession = Depends(get_db),
):
    """답안 제출 API (같은 문제 재제출은 첫 답안 유지, recorded=False)"""
    return await answer_service.submit_answer(db, participant_id, request)


@router.post("/{participant_id}/finish", response_model=participant_schema.ParticipantResponse)
async def finish(
    participant_id: int,
    db: AsyncSession = Depends(get_db),
):
    """완료 처리 API"""
    return await participant_service.mark_finished(db, participant_id)
