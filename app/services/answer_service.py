import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import answer as answer_crud, room as room_crud
from app.exceptions import InvalidQuizRequestError
from app.models.answer import Answer
from app.schemas import answer as answer_schema
from app.services import participant_service, room_service
from app.services.change_feed import ChangeEvent, change_feed

logger = logging.getLogger(__name__)


def answer_row(answer: Answer, room_code: str) -> dict[str, Any]:
    """변경 알림용 답안 행"""
    return {
        "id": answer.id,
        "participant_id": answer.participant_id,
        "room_code": room_code,
        "question_index": answer.question_index,
        "is_correct": answer.is_correct,
    }


def is_correct_answer(given_answer: str, correct_answer: str) -> bool:
    """정답 판정 (대소문자/공백 정규화 없이 문자열 그대로 비교)"""
    return given_answer == correct_answer


async def record(
    session: AsyncSession,
    participant_id: int,
    question_index: int,
    question_text: str,
    given_answer: str,
    correct_answer: str,
    time_taken_seconds: int | None = None,
) -> tuple[Answer, bool]:
    """(참가자, 문제 인덱스)당 한 번만 기록

    이미 기록이 있으면 첫 답안을 그대로 돌려준다. 동시 제출로 유니크 제약에
    걸리면 롤백 후 먼저 들어간 답안을 다시 읽는다.

    Returns:
        (답안, 새로 기록했는지 여부)
    """
    existing = await answer_crud.get_answer(session, participant_id, question_index)
    if existing:
        logger.info(f"중복 답안 제출 무시: participant_id={participant_id}, question_index={question_index}")
        return existing, False

    try:
        answer = await answer_crud.create_answer(
            session,
            participant_id=participant_id,
            question_index=question_index,
            question_text=question_text,
            given_answer=given_answer,
            correct_answer=correct_answer,
            is_correct=is_correct_answer(given_answer, correct_answer),
            time_taken_seconds=time_taken_seconds,
        )
    except IntegrityError:
        await session.rollback()
        existing = await answer_crud.get_answer(session, participant_id, question_index)
        if existing is None:
            raise
        logger.info(f"동시 중복 답안 제출: participant_id={participant_id}, question_index={question_index}")
        return existing, False

    return answer, True


async def submit_answer(
    session: AsyncSession,
    participant_id: int,
    request: answer_schema.AnswerSubmitRequest,
) -> answer_schema.AnswerSubmitResponse:
    """학생 답안 제출

    문제 내용/정답은 방 실행 문제 목록에서 가져온다. 현재 진행 중인 인덱스가
    아니어도 (늦게 도착한 제출) 해당 인덱스로 기록한다.

    Raises:
        ParticipantNotFoundError: 참가자 없음
        RoomClosedError: 종료된 방
        InvalidQuizRequestError: 방 문제 범위를 벗어난 인덱스
    """
    participant = await participant_service.get_participant_in_open_room(session, participant_id)
    # 롤백 시 만료되므로 미리 꺼내 둔다
    room_id, room_code = participant.room.id, participant.room.room_code

    question = await room_crud.get_room_question(session, room_id, request.question_index)
    if not question:
        raise InvalidQuizRequestError(f"문제 인덱스가 범위를 벗어났습니다: {request.question_index}")
    question_text, correct_answer = question.question_text, question.correct_answer

    answer, recorded = await record(
        session,
        participant_id=participant_id,
        question_index=request.question_index,
        question_text=question_text,
        given_answer=request.given_answer,
        correct_answer=correct_answer,
        time_taken_seconds=request.time_taken_seconds,
    )

    if recorded:
        change_feed.publish(ChangeEvent(table="answers", event="INSERT", row=answer_row(answer, room_code)))

    return answer_schema.AnswerSubmitResponse(
        answer=answer_schema.AnswerResponse.model_validate(answer),
        recorded=recorded,
    )


async def question_stats(
    session: AsyncSession,
    room_code: str,
    question_index: int,
) -> answer_schema.QuestionStatsResponse:
    """방 단위 문제별 정답 집계"""
    room = await room_service.get_room(session, room_code)
    correct, total = await answer_crud.count_question_answers(session, room.id, question_index)
    return answer_schema.QuestionStatsResponse(
        question_index=question_index,
        correct=correct,
        total=total,
    )
