"""공용 테스트 픽스처 (in-memory SQLite + httpx ASGITransport)"""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.models import Base, get_db
from app.services.change_feed import change_feed

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEACHER_ID = "teacher-1"
OTHER_TEACHER_ID = "teacher-2"


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """get_db를 테스트 DB로 바꾼 API 클라이언트"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_change_feed():
    change_feed._subscriptions.clear()
    yield
    change_feed._subscriptions.clear()


@pytest.fixture
def teacher_headers():
    return {"X-Teacher-Id": TEACHER_ID}


@pytest.fixture
def other_teacher_headers():
    return {"X-Teacher-Id": OTHER_TEACHER_ID}


FIXED_QUESTIONS = [
    {"question_text": "2 + 2 = ?", "correct_answer": "4", "wrong_answers": ["3", "5", "6"]},
    {"question_text": "3 + 5 = ?", "correct_answer": "8", "wrong_answers": ["7", "9", "10"]},
    {"question_text": "9 + 1 = ?", "correct_answer": "10", "wrong_answers": ["11", "12", "9"]},
]


@pytest_asyncio.fixture
async def create_room(client, teacher_headers):
    """퀴즈 + 방 생성 헬퍼 (기본: 고정 문제 3개, 수동 모드, 선택지 섞지 않음)"""
    async def _create(question_mode: str = "manual", questions=None, **room_options) -> dict:
        quiz_response = await client.post(
            "/api/v1/quizzes",
            json={
                "title": "덧셈",
                "quiz_type": "fixed-set",
                "questions": questions or FIXED_QUESTIONS,
            },
            headers=teacher_headers,
        )
        assert quiz_response.status_code == 201
        payload = {
            "quiz_id": quiz_response.json()["id"],
            "question_mode": question_mode,
            "randomize_answers": False,
        }
        payload.update(room_options)
        room_response = await client.post("/api/v1/rooms", json=payload, headers=teacher_headers)
        assert room_response.status_code == 201
        return room_response.json()

    return _create
