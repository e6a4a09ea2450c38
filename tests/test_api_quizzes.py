"""Quizzes API 통합 테스트"""
import pytest

from tests.conftest import FIXED_QUESTIONS


@pytest.mark.asyncio
async def test_create_fixed_set_quiz(client, teacher_headers):
    response = await client.post(
        "/api/v1/quizzes",
        json={"title": "덧셈", "quiz_type": "fixed-set", "questions": FIXED_QUESTIONS},
        headers=teacher_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["quiz_type"] == "fixed-set"
    assert data["question_count"] == 3
    assert data["teacher_id"] == "teacher-1"


@pytest.mark.asyncio
async def test_create_procedural_quiz_legacy_names(client):
    """dynamic / dynamic_subtype 이름도 허용"""
    response = await client.post(
        "/api/v1/quizzes",
        json={"title": "연산", "quiz_type": "dynamic", "dynamic_subtype": "addition_double", "question_count": 5},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["quiz_type"] == "procedural"
    assert data["procedural_subtype"] == "addition_double"
    assert data["teacher_id"] is None


@pytest.mark.asyncio
async def test_create_unsupported_subtype(client):
    response = await client.post(
        "/api/v1/quizzes",
        json={"title": "분수", "quiz_type": "procedural", "procedural_subtype": "fractions", "question_count": 5},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "UnsupportedQuizSubtypeError"


@pytest.mark.asyncio
async def test_create_fixed_set_without_questions(client):
    response = await client.post("/api/v1/quizzes", json={"title": "빈 퀴즈", "quiz_type": "fixed-set"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_quizzes_visibility(client, teacher_headers, other_teacher_headers):
    """내 퀴즈 + 공개 퀴즈만 보임"""
    body = {"title": "덧셈", "quiz_type": "fixed-set", "questions": FIXED_QUESTIONS}
    await client.post("/api/v1/quizzes", json=body, headers=teacher_headers)
    await client.post("/api/v1/quizzes", json=body, headers=other_teacher_headers)
    await client.post("/api/v1/quizzes", json=body)

    response = await client.get("/api/v1/quizzes", headers=teacher_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert {q["teacher_id"] for q in data["quizzes"]} == {"teacher-1", None}


@pytest.mark.asyncio
async def test_get_quiz_not_found(client):
    response = await client.get("/api/v1/quizzes/999")

    assert response.status_code == 404
    assert response.json()["code"] == "QuizNotFoundError"


@pytest.mark.asyncio
async def test_preview_procedural_with_seed(client):
    created = await client.post(
        "/api/v1/quizzes",
        json={"title": "연산", "quiz_type": "procedural", "procedural_subtype": "addition_single", "question_count": 4},
    )
    quiz_id = created.json()["id"]

    first = await client.get(f"/api/v1/quizzes/{quiz_id}/preview", params={"seed": 42})
    second = await client.get(f"/api/v1/quizzes/{quiz_id}/preview", params={"seed": 42})

    assert first.status_code == 200
    assert first.json()["total"] == 4
    assert first.json() == second.json()
