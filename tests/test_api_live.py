"""실시간 WebSocket 테스트

TestClient는 별도 이벤트 루프에서 앱을 실행하므로 DB 엔진도 그 루프(portal)에서 만든다.
"""
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.main import app
from app.models import Base, get_db
from tests.conftest import FIXED_QUESTIONS, TEST_DATABASE_URL

TEACHER_HEADERS = {"X-Teacher-Id": "teacher-1"}


async def _create_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


@pytest.fixture
def live_client():
    with TestClient(app) as test_client:
        engine = test_client.portal.call(_create_engine)
        session_factory = async_sessionmaker(engine, expire_on_commit=False)

        async def override_get_db():
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_db] = override_get_db
        try:
            yield test_client
        finally:
            app.dependency_overrides.clear()
            test_client.portal.call(engine.dispose)


def _create_manual_room(test_client: TestClient) -> str:
    quiz = test_client.post(
        "/api/v1/quizzes",
        json={"title": "덧셈", "quiz_type": "fixed-set", "questions": FIXED_QUESTIONS},
        headers=TEACHER_HEADERS,
    ).json()
    room = test_client.post(
        "/api/v1/rooms",
        json={"quiz_id": quiz["id"], "question_mode": "manual"},
        headers=TEACHER_HEADERS,
    ).json()
    return room["room_code"]


def test_live_sends_snapshot_then_changes(live_client):
    code = _create_manual_room(live_client)

    with live_client.websocket_connect(f"/api/v1/rooms/{code}/live") as websocket:
        snapshot = websocket.receive_json()
        assert snapshot["type"] == "snapshot"
        assert snapshot["room"]["room_code"] == code
        assert snapshot["room"]["phase"] == "idle"
        assert snapshot["participants"] == []

        joined = live_client.post(f"/api/v1/rooms/{code}/participants", json={"display_name": "Alice"}).json()
        message = websocket.receive_json()
        assert message["type"] == "change"
        assert message["table"] == "participants"
        assert message["event"] == "INSERT"
        assert message["row"]["id"] == joined["id"]

        live_client.post(f"/api/v1/rooms/{code}/start", headers=TEACHER_HEADERS)
        message = websocket.receive_json()
        assert message["table"] == "rooms"
        assert message["event"] == "UPDATE"
        assert message["row"]["current_question_index"] == 0
        assert message["row"]["show_results"] is False

        live_client.post(
            f"/api/v1/participants/{joined['id']}/answers",
            json={"question_index": 0, "given_answer": "4"},
        )
        message = websocket.receive_json()
        assert message["table"] == "answers"
        assert message["row"]["is_correct"] is True

        live_client.post(f"/api/v1/rooms/{code}/end", headers=TEACHER_HEADERS)
        message = websocket.receive_json()
        assert message["row"]["is_active"] is False


def test_live_snapshot_includes_existing_participants(live_client):
    code = _create_manual_room(live_client)
    live_client.post(f"/api/v1/rooms/{code}/participants", json={"display_name": "Alice"})
    live_client.post(f"/api/v1/rooms/{code}/participants", json={"display_name": "Bob"})

    with live_client.websocket_connect(f"/api/v1/rooms/{code}/live") as websocket:
        snapshot = websocket.receive_json()

    assert [p["student_name"] for p in snapshot["participants"]] == ["Alice", "Bob"]


def test_live_unknown_room_closes_with_4404(live_client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with live_client.websocket_connect("/api/v1/rooms/000000/live") as websocket:
            websocket.receive_json()

    assert exc_info.value.code == 4404
