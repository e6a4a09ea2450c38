"""클라이언트 패키지 테스트 (타이머, 오류 복원, 학생/교사 화면 흐름)"""
import asyncio

import httpx
import pytest
import pytest_asyncio
from unittest.mock import patch

from app.clients import (
    AutomaticPlaySession,
    ManualPlaySession,
    PlayStatus,
    QuestionTimer,
    RoomApiClient,
    TeacherControlView,
    error_from_response,
)
from app.clients import student_play
from app.clients.teacher_control import LAST_QUESTION_NOTICE
from app.exceptions import ApiRequestError, LastQuestionError, RoomClosedError
from app.main import app

ROOM_CHANGE = {"type": "change", "table": "rooms", "event": "UPDATE", "row": {}}
PARTICIPANT_CHANGE = {"type": "change", "table": "participants", "event": "INSERT", "row": {}}


@pytest_asyncio.fixture
async def teacher_api(client):
    api = RoomApiClient(base_url="http://test", teacher_id="teacher-1", transport=httpx.ASGITransport(app=app))
    yield api
    await api.aclose()


@pytest_asyncio.fixture
async def student_api(client):
    api = RoomApiClient(base_url="http://test", transport=httpx.ASGITransport(app=app))
    yield api
    await api.aclose()


def _fast_timer(seconds, on_expire):
    return QuestionTimer(0.01, on_expire)


@pytest.mark.asyncio
async def test_timer_fires_once():
    calls = []
    timer = QuestionTimer(0.01, lambda: calls.append(1))
    timer.start()
    await timer.wait()
    timer.cancel()

    assert calls == [1]
    assert timer.fired
    assert not timer.running


@pytest.mark.asyncio
async def test_timer_cancel_before_expiry():
    calls = []
    timer = QuestionTimer(0.05, lambda: calls.append(1))
    timer.start()
    timer.cancel()
    await timer.wait()
    await asyncio.sleep(0.08)

    assert calls == []
    assert not timer.fired


def test_timer_rejects_non_positive():
    with pytest.raises(ValueError):
        QuestionTimer(0, lambda: None)


def test_error_from_response_maps_known_code():
    response = httpx.Response(409, json={"detail": "이미 마지막 문제입니다", "code": "LastQuestionError"})

    error = error_from_response(response)

    assert isinstance(error, LastQuestionError)
    assert error.status_code == 409
    assert error.message == "이미 마지막 문제입니다"


def test_error_from_response_unknown_code():
    error = error_from_response(httpx.Response(401, json={"detail": "X-Teacher-Id 헤더가 필요합니다"}))

    assert isinstance(error, ApiRequestError)
    assert error.status_code == 401


@pytest.mark.asyncio
async def test_reads_retried_once_writes_never():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        raise httpx.ConnectError("down", request=request)

    api = RoomApiClient(base_url="http://test", transport=httpx.MockTransport(handler))
    with pytest.raises(ApiRequestError):
        await api.get_room("123456")
    assert calls == ["GET", "GET"]

    calls.clear()
    with pytest.raises(ApiRequestError):
        await api.submit_answer(1, 0, "4")
    assert calls == ["POST"]
    await api.aclose()


@pytest.mark.asyncio
async def test_manual_play_follows_teacher(create_room, teacher_api, student_api):
    room = await create_room(question_mode="manual")
    code = room["room_code"]

    view = TeacherControlView(teacher_api, code)
    await view.load()
    alice = await student_api.join(code, "Alice")
    bob = await student_api.join(code, "Bob")
    await view.handle_message(PARTICIPANT_CHANGE)
    assert view.participant_count == 2

    alice_play = ManualPlaySession(student_api, code, alice.id)
    bob_play = ManualPlaySession(student_api, code, bob.id)
    await alice_play.start()
    await bob_play.start()
    assert alice_play.status == PlayStatus.WAITING

    await view.start()
    for play in (alice_play, bob_play):
        await play.handle_message(ROOM_CHANGE)
        assert play.status == PlayStatus.ANSWERING
        assert play.current_index == 0
    assert view.current_question.correct_answer == "4"

    first = await alice_play.answer("4")
    assert first.recorded is True
    assert await alice_play.answer("5") is None
    await bob_play.answer("3")
    assert alice_play.status == PlayStatus.ANSWERED

    await view.reveal()
    for play in (alice_play, bob_play):
        await play.handle_message(ROOM_CHANGE)
        assert play.status == PlayStatus.RESULTS
        assert (play.stats.correct, play.stats.total) == (1, 2)

    await view.advance()
    await alice_play.handle_message(ROOM_CHANGE)
    assert alice_play.current_index == 1
    assert alice_play.status == PlayStatus.ANSWERING
    assert alice_play.stats is None

    await view.advance()
    assert view.is_last_question
    assert await view.advance() is None
    assert view.notice == LAST_QUESTION_NOTICE
    assert view.room.current_question_index == 2

    await view.end()
    await alice_play.handle_message(ROOM_CHANGE)
    assert alice_play.status == PlayStatus.CLOSED
    assert alice_play.score == 1


@pytest.mark.asyncio
async def test_manual_play_resync_after_missed_notifications(create_room, teacher_api, student_api):
    room = await create_room(question_mode="manual")
    code = room["room_code"]
    view = TeacherControlView(teacher_api, code)
    await view.load()
    alice = await student_api.join(code, "Alice")
    play = ManualPlaySession(student_api, code, alice.id)
    await play.start()

    # 알림 없이 두 단계 진행
    await view.start()
    await view.advance()

    await play.resync()
    assert play.current_index == 1
    assert play.status == PlayStatus.ANSWERING

    await view.end()
    await play.handle_message({"type": "resync"})
    assert play.status == PlayStatus.CLOSED


@pytest.mark.asyncio
async def test_manual_play_snapshot_message(create_room, teacher_api, student_api):
    room = await create_room(question_mode="manual")
    code = room["room_code"]
    alice = await student_api.join(code, "Alice")
    started = await teacher_api.start(code)

    play = ManualPlaySession(student_api, code, alice.id)
    play.questions = (await student_api.get_questions(code)).questions
    await play.handle_message({"type": "snapshot", "room": started.model_dump(mode="json"), "participants": []})

    assert play.current_index == 0
    assert play.status == PlayStatus.ANSWERING
    play.gate.stop_timer()


@pytest.mark.asyncio
async def test_submit_after_end_reports_closed(create_room, teacher_api, student_api):
    room = await create_room(question_mode="manual")
    code = room["room_code"]
    alice = await student_api.join(code, "Alice")
    await teacher_api.start(code)
    play = ManualPlaySession(student_api, code, alice.id)
    await play.start()

    await teacher_api.end(code)
    assert await play.answer("4") is None
    assert play.status == PlayStatus.CLOSED

    with pytest.raises(RoomClosedError):
        await student_api.submit_answer(alice.id, 1, "8")


@pytest.mark.asyncio
async def test_automatic_play_time_up_records_empty_answer(create_room, student_api, teacher_api):
    """답하지 않고 시간이 끝나면 빈 답안(오답)으로 기록하고 다음 문제로"""
    room = await create_room(question_mode="automatic", time_limit_per_question=15)
    code = room["room_code"]
    alice = await student_api.join(code, "Alice")
    play = AutomaticPlaySession(student_api, code, alice.id, advance_delay=0)

    with patch.object(student_play, "QuestionTimer", _fast_timer):
        await play.start()
        assert play.status == PlayStatus.ANSWERING

        await play.answer("4")
        assert play.current_index == 1

        # 1번, 2번 문제는 시간 초과
        await play.gate.timer.wait()
        await play.gate.timer.wait()

    assert play.status == PlayStatus.FINISHED
    assert [a.given_answer for a in play.results] == ["4", "", ""]
    assert [a.is_correct for a in play.results] == [True, False, False]
    assert play.score == 1

    leaderboard = await student_api.leaderboard(code)
    assert leaderboard.entries[0].score == 1
    assert leaderboard.entries[0].total == 3
    assert leaderboard.entries[0].finished is True

    participants = await teacher_api.list_participants(code)
    assert participants.finished_count == 1


@pytest.mark.asyncio
async def test_automatic_play_answer_wins_over_timer(create_room, student_api):
    """답을 먼저 내면 시간 초과는 무시"""
    room = await create_room(question_mode="automatic", time_limit_per_question=15)
    code = room["room_code"]
    alice = await student_api.join(code, "Alice")
    play = AutomaticPlaySession(student_api, code, alice.id, advance_delay=0)

    await play.start()
    first_timer = play.gate.timer
    await play.answer("4")

    assert not first_timer.fired
    assert not first_timer.running
    assert len(play.results) == 1
    assert play.current_index == 1
    play.gate.stop_timer()


@pytest.mark.asyncio
async def test_automatic_play_closed_room(create_room, student_api, teacher_api):
    room = await create_room(question_mode="automatic")
    code = room["room_code"]
    alice = await student_api.join(code, "Alice")
    play = AutomaticPlaySession(student_api, code, alice.id, advance_delay=0)
    await play.start()

    await teacher_api.end(code)
    await play.handle_message(ROOM_CHANGE)

    assert play.status == PlayStatus.CLOSED
    assert play.gate.timer is None or not play.gate.timer.running


@pytest.mark.asyncio
async def test_teacher_view_export_csv(create_room, teacher_api, student_api):
    room = await create_room(question_mode="manual")
    code = room["room_code"]
    alice = await student_api.join(code, "Alice")
    await student_api.submit_answer(alice.id, 0, "4", time_taken_seconds=3)

    view = TeacherControlView(teacher_api, code)
    await view.load()
    await view.end()
    csv_text = await view.export_csv()

    assert csv_text.splitlines() == ["name,score,total,percentage,total_time_seconds", "Alice,1,1,100,3"]


ROOM_DELETE = {"type": "change", "table": "rooms", "event": "DELETE", "row": {}}


@pytest.mark.asyncio
async def test_manual_play_deleted_room_closes(create_room, teacher_api, student_api):
    room = await create_room(question_mode="manual", time_limit_per_question=15)
    code = room["room_code"]
    alice = await student_api.join(code, "Alice")
    play = ManualPlaySession(student_api, code, alice.id)
    await play.start()
    await teacher_api.start(code)
    await play.handle_message(ROOM_CHANGE)
    assert play.status == PlayStatus.ANSWERING

    await teacher_api.delete_room(code)
    await play.handle_message(ROOM_DELETE)

    assert play.status == PlayStatus.CLOSED
    assert not play.gate.timer.running


@pytest.mark.asyncio
async def test_automatic_play_deleted_room_closes(create_room, teacher_api, student_api):
    room = await create_room(question_mode="automatic", time_limit_per_question=15)
    code = room["room_code"]
    alice = await student_api.join(code, "Alice")
    play = AutomaticPlaySession(student_api, code, alice.id, advance_delay=0)
    await play.start()

    await teacher_api.delete_room(code)
    await play.handle_message(ROOM_DELETE)

    assert play.status == PlayStatus.CLOSED
    assert not play.gate.timer.running


@pytest.mark.asyncio
async def test_time_up_after_room_deleted_closes(create_room, teacher_api, student_api):
    """방이 삭제된 뒤 시간 초과가 나도 예외 없이 종료 상태로"""
    room = await create_room(question_mode="automatic", time_limit_per_question=15)
    code = room["room_code"]
    alice = await student_api.join(code, "Alice")
    play = AutomaticPlaySession(student_api, code, alice.id, advance_delay=0)
    await play.start()

    await teacher_api.delete_room(code)
    await play._on_time_up()

    assert play.status == PlayStatus.CLOSED
    assert play.results == []


@pytest.mark.asyncio
async def test_manual_play_ignores_other_room_with_same_code(create_room, teacher_api, student_api, test_db_session):
    """재연결 시 같은 코드의 다른 방이 보이면 따라가지 않고 종료"""
    from app.models.room import Room

    room = await create_room(question_mode="manual")
    code = room["room_code"]
    alice = await student_api.join(code, "Alice")
    play = ManualPlaySession(student_api, code, alice.id)
    await play.start()
    assert play.room_id == room["id"]

    await teacher_api.end(code)
    test_db_session.add(
        Room(
            room_code=code,
            teacher_id="teacher-2",
            quiz_id=room["quiz_id"],
            question_mode="manual",
            current_question_index=1,
        )
    )
    await test_db_session.commit()

    await play.resync()

    assert play.status == PlayStatus.CLOSED
    assert play.room.id == room["id"]
    assert play.current_index is None
