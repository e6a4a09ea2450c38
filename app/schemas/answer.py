from datetime import datetime

from pydantic import BaseModel, Field


class AnswerSubmitRequest(BaseModel):
    """답안 제출 요청 스키마"""
    question_index: int = Field(..., ge=0, description="문제 인덱스")
    # 빈 문자열 = 시간 초과
    given_answer: str = Field("", description="선택한 답")
    time_taken_seconds: int | None = Field(None, ge=0, description="소요 시간 (초)")


class AnswerResponse(BaseModel):
    """답안 응답 스키마"""
    id: int
    participant_id: int
    question_index: int
    question_text: str
    given_answer: str
    correct_answer: str
    is_correct: bool
    time_taken_seconds: int | None
    answered_at: datetime

    model_config = {"from_attributes": True}


class AnswerSubmitResponse(BaseModel):
    """답안 제출 결과 (recorded=False면 이미 기록된 첫 답안을 반환)"""
    answer: AnswerResponse
    recorded: bool


class QuestionStatsResponse(BaseModel):
    """문제별 정답 집계"""
    question_index: int
    correct: int
    total: int
