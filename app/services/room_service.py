import logging
import random
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud import quiz as quiz_crud, room as room_crud
from app.exceptions import (
    BaseAppError,
    IllegalTransitionError,
    QuizNotFoundError,
    RoomClosedError,
    RoomCodeExhaustedError,
    RoomNotFoundError,
    TeacherForbiddenError,
)
from app.models.room import Room
from app.models.room_question import RoomQuestion
from app.schemas import room as room_schema
from app.services import question_supply
from app.services.change_feed import ChangeEvent, change_feed
from app.services.room_state import RoomAction, RoomPhase, RoomState, transition

logger = logging.getLogger(__name__)


def room_row(room: Room) -> dict[str, Any]:
    """변경 알림용 방 행 (클라이언트는 이 값으로 재조회 여부만 판단)"""
    return {
        "id": room.id,
        "room_code": room.room_code,
        "is_active": room.is_active,
        "question_mode": room.question_mode,
        "current_question_index": room.current_question_index,
        "show_results": room.show_results,
        "question_started_at": room.question_started_at.isoformat() if room.question_started_at else None,
        "ended_at": room.ended_at.isoformat() if room.ended_at else None,
    }


def room_state_of(room: Room) -> RoomState:
    return RoomState.from_fields(room.is_active, room.current_question_index, room.show_results)


async def build_room_response(
    session: AsyncSession,
    room: Room,
    total_questions: int | None = None,
) -> room_schema.RoomResponse:
    """Room 모델을 RoomResponse로 변환 (명시적 phase, 문제 수 포함)"""
    if total_questions is None:
        total_questions = await room_crud.count_room_questions(session, room.id)

    return room_schema.RoomResponse(
        id=room.id,
        room_code=room.room_code,
        teacher_id=room.teacher_id,
        quiz_id=room.quiz_id,
        quiz_title=room.quiz.title if room.quiz else None,
        class_name=room.class_name,
        grade_level=room.grade_level,
        question_mode=room.question_mode,
        time_limit_per_question=room.time_limit_per_question,
        randomize_questions=room.randomize_questions,
        randomize_answers=room.randomize_answers,
        is_active=room.is_active,
        started_at=room.started_at,
        ended_at=room.ended_at,
        current_question_index=room.current_question_index,
        question_started_at=room.question_started_at,
        show_results=room.show_results,
        phase=room_state_of(room).phase.value,
        total_questions=total_questions,
        created_at=room.created_at,
    )


async def create_room(
    session: AsyncSession,
    teacher_id: str,
    request: room_schema.RoomCreateRequest,
    rng: random.Random | None = None,
) -> room_schema.RoomResponse:
    """방 생성

    문제 목록(순서/선택지 순서 포함)을 이 시점에 한 번만 확정해서 저장한다.
    참여 코드는 남아 있는 방(종료된 방 포함)과 겹치면 settings.room_code_max_attempts 만큼 재시도한다.
    """
    quiz = await quiz_crud.get_quiz_by_id(session, request.quiz_id)
    # 다른 교사의 비공개 퀴즈는 없는 것으로 취급
    if not quiz or (quiz.teacher_id is not None and quiz.teacher_id != teacher_id):
        raise QuizNotFoundError(request.quiz_id)

    rng = rng or random.Random()
    questions = await question_supply.supply_questions(session, quiz, rng=rng)
    run = question_supply.build_run(
        questions,
        procedural=quiz.quiz_type == "procedural",
        randomize_questions=request.randomize_questions,
        randomize_answers=request.randomize_answers,
        rng=rng,
    )

    # 코드 충돌로 롤백되면 quiz가 만료되므로 미리 꺼내 둔다
    quiz_id = quiz.id
    max_attempts = settings.room_code_max_attempts
    for attempt in range(1, max_attempts + 1):
        room_code = question_supply.generate_room_code(rng)
        if await room_crud.is_room_code_in_use(session, room_code):
            logger.warning(f"참여 코드 충돌 (사용 중인 코드): room_code={room_code}, attempt={attempt}/{max_attempts}")
            continue

        room = Room(
            room_code=room_code,
            teacher_id=teacher_id,
            quiz_id=quiz_id,
            class_name=request.class_name,
            grade_level=request.grade_level,
            question_mode=request.question_mode,
            time_limit_per_question=request.time_limit_per_question,
            randomize_questions=request.randomize_questions,
            randomize_answers=request.randomize_answers,
            is_active=True,
            show_results=False,
        )
        try:
            session.add(room)
            await session.flush()
            for question in run:
                session.add(
                    RoomQuestion(
                        room_id=room.id,
                        question_index=question.question_index,
                        question_text=question.question_text,
                        correct_answer=question.correct_answer,
                        answers=list(question.answers),
                    )
                )
            await session.commit()
        except IntegrityError:
            # 동시에 같은 코드로 만들어진 활성 방 (부분 유니크 인덱스)
            await session.rollback()
            logger.warning(f"참여 코드 충돌 (유니크 제약): room_code={room_code}, attempt={attempt}/{max_attempts}")
            continue

        room = await room_crud.get_room_by_id(session, room.id)
        logger.info(
            f"방 생성: room_code={room.room_code}, quiz_id={quiz_id}, mode={room.question_mode}, "
            f"questions={len(run)}, teacher_id={teacher_id}"
        )
        change_feed.publish(ChangeEvent(table="rooms", event="INSERT", row=room_row(room)))
        return await build_room_response(session, room, total_questions=len(run))

    logger.error(f"참여 코드 생성 실패: attempts={max_attempts}, teacher_id={teacher_id}")
    raise RoomCodeExhaustedError(max_attempts)


async def get_room(session: AsyncSession, room_code: str) -> Room:
    """참여 코드로 방 조회 (종료된 방 포함)"""
    room = await room_crud.get_room_by_code(session, room_code)
    if not room:
        raise RoomNotFoundError(room_code)
    return room


async def get_active_room(session: AsyncSession, room_code: str) -> Room:
    """참여 가능한 활성 방 조회"""
    room = await room_crud.get_active_room_by_code(session, room_code)
    if not room:
        raise RoomNotFoundError(room_code)
    return room


async def get_owned_room(session: AsyncSession, room_code: str, teacher_id: str) -> Room:
    """교사 소유 방 조회 (소유자가 아니면 403)

    같은 코드의 방이 여러 개 남아 있으면 요청한 교사의 방을 고른다.
    """
    room = await room_crud.get_room_by_code(session, room_code, teacher_id=teacher_id)
    if room is None:
        room = await get_room(session, room_code)
    if room.teacher_id != teacher_id:
        logger.warning(f"방 소유자 불일치: room_code={room_code}, teacher_id={teacher_id}")
        raise TeacherForbiddenError(room_code)
    return room


async def get_room_response(session: AsyncSession, room_code: str) -> room_schema.RoomResponse:
    room = await get_room(session, room_code)
    return await build_room_response(session, room)


async def list_rooms(session: AsyncSession, teacher_id: str) -> room_schema.RoomListResponse:
    """교사의 방 목록"""
    rooms = await room_crud.get_rooms_by_teacher(session, teacher_id)
    responses = [await build_room_response(session, room) for room in rooms]
    return room_schema.RoomListResponse(rooms=responses, total=len(responses))


async def get_run_questions(
    session: AsyncSession,
    room_code: str,
    teacher_id: str | None = None,
) -> room_schema.RoomQuestionListResponse:
    """방 실행 문제 목록 (소유 교사에게만 정답 포함)"""
    room = await get_room(session, room_code)
    include_correct = teacher_id is not None and teacher_id == room.teacher_id

    questions = await room_crud.get_room_questions(session, room.id)
    responses = [
        room_schema.RoomQuestionResponse(
            question_index=q.question_index,
            question_text=q.question_text,
            answers=list(q.answers),
            correct_answer=q.correct_answer if include_correct else None,
        )
        for q in questions
    ]
    return room_schema.RoomQuestionListResponse(
        room_code=room.room_code,
        questions=responses,
        total=len(responses),
    )


def _apply_state(room: Room, previous: RoomState, new: RoomState, now: datetime) -> None:
    """명시적 상태를 DB 필드로 반영"""
    if new.phase == RoomPhase.ENDED:
        room.is_active = False
        room.ended_at = now
        return

    if new.index != previous.index:
        room.question_started_at = now
    if room.started_at is None:
        room.started_at = now
    room.current_question_index = new.index
    room.show_results = new.show_results


async def apply_action(
    session: AsyncSession,
    room_code: str,
    teacher_id: str,
    action: RoomAction,
    start_index: int = 0,
) -> room_schema.RoomResponse:
    """교사 진행 조작 (start / advance / reveal / hide / end)

    Raises:
        RoomClosedError: 이미 종료된 방
        IllegalTransitionError: 자동 모드 방에 수동 조작, 또는 현재 상태에서 불가능한 조작
        LastQuestionError: 마지막 문제에서 advance (상태 변경 없음)
    """
    room = await get_owned_room(session, room_code, teacher_id)
    if not room.is_active:
        raise RoomClosedError(room_code)

    if action != RoomAction.END and room.question_mode != "manual":
        raise IllegalTransitionError("자동 모드 방에서는 교사가 문제를 진행할 수 없습니다")

    total = await room_crud.count_room_questions(session, room.id)
    previous = room_state_of(room)
    new = transition(previous, action, total, start_index=start_index)

    if new == previous:
        # reveal/hide 중복 호출은 변경 없음
        logger.debug(f"방 상태 변경 없음: room_code={room_code}, action={action.value}, phase={new.phase.value}")
        return await build_room_response(session, room, total_questions=total)

    try:
        _apply_state(room, previous, new, datetime.now(timezone.utc))
        await session.commit()
        await session.refresh(room)
    except BaseAppError:
        raise
    except Exception as e:
        logger.error(f"방 상태 저장 실패: room_code={room_code}, action={action.value}, error={e}", exc_info=True)
        await session.rollback()
        raise

    logger.info(
        f"방 상태 전이: room_code={room_code}, action={action.value}, "
        f"{previous.phase.value}({previous.index}) → {new.phase.value}({new.index})"
    )
    change_feed.publish(ChangeEvent(table="rooms", event="UPDATE", row=room_row(room)))
    return await build_room_response(session, room, total_questions=total)


async def start(session: AsyncSession, room_code: str, teacher_id: str, index: int = 0) -> room_schema.RoomResponse:
    return await apply_action(session, room_code, teacher_id, RoomAction.START, start_index=index)


async def advance(session: AsyncSession, room_code: str, teacher_id: str) -> room_schema.RoomResponse:
    return await apply_action(session, room_code, teacher_id, RoomAction.ADVANCE)


async def reveal(session: AsyncSession, room_code: str, teacher_id: str) -> room_schema.RoomResponse:
    return await apply_action(session, room_code, teacher_id, RoomAction.REVEAL)


async def hide(session: AsyncSession, room_code: str, teacher_id: str) -> room_schema.RoomResponse:
    return await apply_action(session, room_code, teacher_id, RoomAction.HIDE)


async def end(session: AsyncSession, room_code: str, teacher_id: str) -> room_schema.RoomResponse:
    return await apply_action(session, room_code, teacher_id, RoomAction.END)


async def delete_room(session: AsyncSession, room_code: str, teacher_id: str) -> None:
    """방 삭제 (소유 교사만)"""
    room = await get_owned_room(session, room_code, teacher_id)
    row = room_row(room)
    await room_crud.delete_room(session, room)
    logger.info(f"방 삭제: room_code={room_code}, teacher_id={teacher_id}")
    change_feed.publish(ChangeEvent(table="rooms", event="DELETE", row=row))
