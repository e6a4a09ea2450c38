from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_teacher_id_optional, require_teacher
from app.models.base import get_db
from app.schemas import (
    answer as answer_schema,
    leaderboard as leaderboard_schema,
    participant as participant_schema,
    room as room_schema,
)
from app.services import answer_service, participant_service, room_service, scoring_service

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.post("", response_model=room_schema.RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    request: room_schema.RoomCreateRequest,
    teacher_id: str = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """방 생성 API"""
    return await room_service.create_room(db, teacher_id, request)


@router.get("", response_model=room_schema.RoomListResponse)
async def list_rooms(
    teacher_id: str = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """내 방 목록 조회 API"""
    return await room_service.list_rooms(db, teacher_id)


@router.get("/{room_code}", response_model=room_schema.RoomResponse)
async def get_room(
    room_code: str,
    db: AsyncSession = Depends(get_db),
):
    """방 조회 API (종료된 방 포함)"""
    return await room_service.get_room_response(db, room_code)


@router.delete("/{room_code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_code: str,
    teacher_id: str = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """방 삭제 API"""
    await room_service.delete_room(db, room_code, teacher_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{room_code}/questions", response_model=room_schema.RoomQuestionListResponse)
async def get_room_questions(
    room_code: str,
    teacher_id: str | None = Depends(get_teacher_id_optional),
    db: AsyncSession = Depends(get_db),
):
    """방 실행 문제 목록 API (소유 교사에게만 정답 포함)"""
    return await room_service.get_run_questions(db, room_code, teacher_id=teacher_id)


@router.get(
    "/{room_code}/questions/{question_index}/stats",
    response_model=answer_schema.QuestionStatsResponse,
)
async def get_question_stats(
    room_code: str,
    question_index: int,
    db: AsyncSession = Depends(get_db),
):
    """문제별 정답 집계 API"""
    return await answer_service.question_stats(db, room_code, question_index)


@router.post("/{room_code}/start", response_model=room_schema.RoomResponse)
async def start_room(
    room_code: str,
    request: room_schema.RoomStartRequest | None = None,
    teacher_id: str = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """수동 모드 시작 API"""
    index = request.index if request else 0
    return await room_service.start(db, room_code, teacher_id, index=index)


@router.post("/{room_code}/advance", response_model=room_schema.RoomResponse)
async def advance_room(
    room_code: str,
    teacher_id: str = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """다음 문제 API (마지막 문제면 409)"""
    return await room_service.advance(db, room_code, teacher_id)


@router.post("/{room_code}/reveal", response_model=room_schema.RoomResponse)
async def reveal_results(
    room_code: str,
    teacher_id: str = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """정답 공개 API"""
    return await room_service.reveal(db, room_code, teacher_id)


@router.post("/{room_code}/hide", response_model=room_schema.RoomResponse)
async def hide_results(
    room_code: str,
    teacher_id: str = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """정답 숨기기 API"""
    return await room_service.hide(db, room_code, teacher_id)


@router.post("/{room_code}/end", response_model=room_schema.RoomResponse)
async def end_room(
    room_code: str,
    teacher_id: str = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """방 종료 API"""
    return await room_service.end(db, room_code, teacher_id)


@router.post(
    "/{room_code}/participants",
    response_model=participant_schema.ParticipantResponse,
    status_code=status.HTTP_201_CREATED,
)
async def join_room(
    room_code: str,
    request: participant_schema.JoinRoomRequest,
    db: AsyncSession = Depends(get_db),
):
    """방 참여 API"""
    return await participant_service.join(db, room_code, request.display_name)


@router.get("/{room_code}/participants", response_model=participant_schema.ParticipantListResponse)
async def list_participants(
    room_code: str,
    db: AsyncSession = Depends(get_db),
):
    """참가자 목록 API"""
    return await participant_service.list_by_room(db, room_code)


@router.get("/{room_code}/leaderboard", response_model=leaderboard_schema.LeaderboardResponse)
async def get_leaderboard(
    room_code: str,
    db: AsyncSession = Depends(get_db),
):
    """순위표 API"""
    return await scoring_service.get_leaderboard(db, room_code)


@router.get("/{room_code}/results", response_model=leaderboard_schema.RoomResultsResponse)
async def get_results(
    room_code: str,
    teacher_id: str = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """교사 결과 화면 API"""
    return await scoring_service.get_room_results(db, room_code, teacher_id=teacher_id)


@router.get("/{room_code}/results.csv")
async def export_results_csv(
    room_code: str,
    teacher_id: str = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """결과 CSV 내보내기 API"""
    content = await scoring_service.export_results_csv(db, room_code, teacher_id=teacher_id)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="results_{room_code}.csv"'},
    )
