"""HTTP API 클라이언트 (교사 화면 / 학생 화면 공용)

모든 요청에 요청 단위 타임아웃을 적용한다. 조회(GET)는 네트워크 오류 시 한 번만
재시도하고, 상태를 바꾸는 요청은 중복 부작용(답안 이중 제출 등)을 막기 위해
재시도하지 않는다. 오류 응답은 서버의 예외 클래스로 복원해서 던진다.
"""
import logging
from typing import Any

import httpx

from app.core.config import settings
from app.exceptions import ERROR_CLASSES, ApiRequestError, BaseAppError
from app.schemas import (
    answer as answer_schema,
    leaderboard as leaderboard_schema,
    participant as participant_schema,
    quiz as quiz_schema,
    room as room_schema,
)

logger = logging.getLogger(__name__)

READ_ATTEMPTS = 2


def error_from_response(response: httpx.Response) -> BaseAppError:
    """오류 응답 → 애플리케이션 예외"""
    try:
        body = response.json()
    except ValueError:
        body = {}

    detail = body.get("detail") if isinstance(body, dict) else None
    message = detail if isinstance(detail, str) else str(detail or response.text or response.reason_phrase)
    code = body.get("code") if isinstance(body, dict) else None

    error_class = ERROR_CLASSES.get(code or "")
    if error_class is None:
        return ApiRequestError(message, status_code=response.status_code)
    return error_class.from_detail(message, response.status_code)


class RoomApiClient:
    """퀴즈 방 API 클라이언트

    Args:
        base_url: API 서버 주소 (기본값: settings.api_base_url)
        teacher_id: 교사 화면이면 X-Teacher-Id 헤더로 전송
        timeout: 요청 단위 타임아웃 (초)
        transport: 테스트용 httpx transport (ASGITransport 등)
    """

    def __init__(
        self,
        base_url: str | None = None,
        teacher_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"X-Teacher-Id": teacher_id} if teacher_id else {}
        self.teacher_id = teacher_id
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            headers=headers,
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "RoomApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        attempts = READ_ATTEMPTS if method == "GET" else 1
        for attempt in range(1, attempts + 1):
            try:
                response = await self._client.request(method, f"/api/v1{path}", json=json, params=params)
                break
            except httpx.TransportError as e:
                if attempt < attempts:
                    logger.warning(f"API 조회 재시도: {method} {path}, error={e.__class__.__name__}")
                    continue
                logger.error(f"API 요청 실패: {method} {path}, error={e.__class__.__name__}: {e}")
                raise ApiRequestError(f"서버에 연결할 수 없습니다: {e.__class__.__name__}") from e

        if response.is_error:
            error = error_from_response(response)
            logger.info(f"API 오류 응답: {method} {path}, status={response.status_code}, error={error.__class__.__name__}")
            raise error
        return response

    # 퀴즈

    async def create_quiz(self, request: quiz_schema.QuizCreateRequest) -> quiz_schema.QuizResponse:
        response = await self._request("POST", "/quizzes", json=request.model_dump(mode="json"))
        return quiz_schema.QuizResponse.model_validate(response.json())

    async def list_quizzes(self) -> quiz_schema.QuizListResponse:
        response = await self._request("GET", "/quizzes")
        return quiz_schema.QuizListResponse.model_validate(response.json())

    # 방

    async def create_room(self, request: room_schema.RoomCreateRequest) -> room_schema.RoomResponse:
        response = await self._request("POST", "/rooms", json=request.model_dump(mode="json"))
        return room_schema.RoomResponse.model_validate(response.json())

    async def list_rooms(self) -> room_schema.RoomListResponse:
        response = await self._request("GET", "/rooms")
        return room_schema.RoomListResponse.model_validate(response.json())

    async def get_room(self, room_code: str) -> room_schema.RoomResponse:
        response = await self._request("GET", f"/rooms/{room_code}")
        return room_schema.RoomResponse.model_validate(response.json())

    async def delete_room(self, room_code: str) -> None:
        await self._request("DELETE", f"/rooms/{room_code}")

    async def get_questions(self, room_code: str) -> room_schema.RoomQuestionListResponse:
        response = await self._request("GET", f"/rooms/{room_code}/questions")
        return room_schema.RoomQuestionListResponse.model_validate(response.json())

    async def start(self, room_code: str, index: int = 0) -> room_schema.RoomResponse:
        response = await self._request("POST", f"/rooms/{room_code}/start", json={"index": index})
        return room_schema.RoomResponse.model_validate(response.json())

    async def advance(self, room_code: str) -> room_schema.RoomResponse:
        response = await self._request("POST", f"/rooms/{room_code}/advance")
        return room_schema.RoomResponse.model_validate(response.json())

    async def reveal(self, room_code: str) -> room_schema.RoomResponse:
        response = await self._request("POST", f"/rooms/{room_code}/reveal")
        return room_schema.RoomResponse.model_validate(response.json())

    async def hide(self, room_code: str) -> room_schema.RoomResponse:
        response = await self._request("POST", f"/rooms/{room_code}/hide")
        return room_schema.RoomResponse.model_validate(response.json())

    async def end(self, room_code: str) -> room_schema.RoomResponse:
        response = await self._request("POST", f"/rooms/{room_code}/end")
        return room_schema.RoomResponse.model_validate(response.json())

    # 참가자 / 답안

    async def join(self, room_code: str, display_name: str) -> participant_schema.ParticipantResponse:
        response = await self._request("POST", f"/rooms/{room_code}/participants", json={"display_name": display_name})
        return participant_schema.ParticipantResponse.model_validate(response.json())

    async def list_participants(self, room_code: str) -> participant_schema.ParticipantListResponse:
        response = await self._request("GET", f"/rooms/{room_code}/participants")
        return participant_schema.ParticipantListResponse.model_validate(response.json())

    async def submit_answer(
        self,
        participant_id: int,
        question_index: int,
        given_answer: str,
        time_taken_seconds: int | None = None,
    ) -> answer_schema.AnswerSubmitResponse:
        payload = answer_schema.AnswerSubmitRequest(
            question_index=question_index,
            given_answer=given_answer,
            time_taken_seconds=time_taken_seconds,
        )
        response = await self._request("POST", f"/participants/{participant_id}/answers", json=payload.model_dump())
        return answer_schema.AnswerSubmitResponse.model_validate(response.json())

    async def finish(self, participant_id: int) -> participant_schema.ParticipantResponse:
        response = await self._request("POST", f"/participants/{participant_id}/finish")
        return participant_schema.ParticipantResponse.model_validate(response.json())

    async def question_stats(self, room_code: str, question_index: int) -> answer_schema.QuestionStatsResponse:
        response = await self._request("GET", f"/rooms/{room_code}/questions/{question_index}/stats")
        return answer_schema.QuestionStatsResponse.model_validate(response.json())

    # 결과

    async def leaderboard(self, room_code: str) -> leaderboard_schema.LeaderboardResponse:
        response = await self._request("GET", f"/rooms/{room_code}/leaderboard")
        return leaderboard_schema.LeaderboardResponse.model_validate(response.json())

    async def results(self, room_code: str) -> leaderboard_schema.RoomResultsResponse:
        response = await self._request("GET", f"/rooms/{room_code}/results")
        return leaderboard_schema.RoomResultsResponse.model_validate(response.json())

    async def export_csv(self, room_code: str) -> str:
        response = await self._request("GET", f"/rooms/{room_code}/results.csv")
        return response.text
