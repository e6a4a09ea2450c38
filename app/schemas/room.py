from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

QuestionMode = Literal["automatic", "manual"]
RoomPhaseName = Literal["idle", "question_active", "results_shown", "ended"]


class RoomCreateRequest(BaseModel):
    """방 생성 요청 스키마"""
    quiz_id: int = Field(..., description="퀴즈 ID")
    question_mode: QuestionMode = Field("automatic", description="'automatic' | 'manual'")
    time_limit_per_question: int | None = Field(15, ge=5, le=600, description="문제당 제한 시간 (None = 무제한)")
    randomize_questions: bool = Field(False, description="문제 순서 섞기")
    randomize_answers: bool = Field(True, description="선택지 순서 섞기")
    class_name: str | None = Field(None, max_length=100, description="반 이름")
    grade_level: int | None = Field(None, ge=1, le=12, description="학년")

    @field_validator("class_name")
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class RoomStartRequest(BaseModel):
    """수동 모드 시작 요청"""
    index: int = Field(0, ge=0, description="시작 문제 인덱스")


class RoomResponse(BaseModel):
    """방 상태 응답 스키마"""
    id: int
    room_code: str
    teacher_id: str
    quiz_id: int
    quiz_title: str | None = None
    class_name: str | None
    grade_level: int | None
    question_mode: QuestionMode
    time_limit_per_question: int | None
    randomize_questions: bool
    randomize_answers: bool
    is_active: bool
    started_at: datetime | None
    ended_at: datetime | None
    current_question_index: int | None
    question_started_at: datetime | None
    show_results: bool
    phase: RoomPhaseName
    total_questions: int
    created_at: datetime


class RoomListResponse(BaseModel):
    """방 목록 응답 스키마"""
    rooms: list[RoomResponse]
    total: int


class RoomQuestionResponse(BaseModel):
    """방 실행 문제 (학생용: 정답 제외)"""
    question_index: int
    question_text: str
    answers: list[str]
    correct_answer: str | None = Field(None, description="정답 (교사용 조회에서만 포함)")

    model_config = {"from_attributes": True}


class RoomQuestionListResponse(BaseModel):
    """방 실행 문제 목록"""
    room_code: str
    questions: list[RoomQuestionResponse]
    total: int
