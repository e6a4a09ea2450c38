from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

QuizType = Literal["procedural", "fixed-set"]
ProceduralSubtype = Literal["addition_single", "addition_double", "fractions", "angles"]


class StaticQuestionCreate(BaseModel):
    """고정 문제 생성 스키마"""
    question_text: str = Field(..., min_length=1, description="문제 내용")
    correct_answer: str = Field(..., min_length=1, description="정답")
    wrong_answers: list[str] = Field(..., min_length=1, description="오답 선택지")

    @field_validator("question_text", "correct_answer")
    @classmethod
    def strip_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("문제 내용과 정답은 비어 있을 수 없습니다")
        return v.strip()


class QuizCreateRequest(BaseModel):
    """퀴즈 생성 요청 스키마 (프론트엔드 호환: dynamic/static 별칭 허용)"""
    title: str = Field(..., min_length=1, max_length=200, description="퀴즈 제목")
    description: str | None = Field(None, description="설명")
    quiz_type: QuizType = Field(..., description="'procedural' | 'fixed-set'")
    procedural_subtype: ProceduralSubtype | None = Field(None, description="절차적 생성 유형")
    question_count: int | None = Field(None, ge=1, le=100, description="생성할 문제 개수")
    time_limit_seconds: int | None = Field(None, ge=5, le=600, description="문제당 기본 제한 시간")
    questions: list[StaticQuestionCreate] = Field(default_factory=list, description="고정 문제 목록")

    @model_validator(mode="before")
    @classmethod
    def normalize_request(cls, data: dict) -> dict:
        """기존 프론트엔드 값(dynamic/static, dynamic_subtype)을 변환"""
        if isinstance(data, dict):
            quiz_type = data.get("quiz_type")
            if quiz_type == "dynamic":
                data["quiz_type"] = "procedural"
            elif quiz_type == "static":
                data["quiz_type"] = "fixed-set"
            if "dynamic_subtype" in data and "procedural_subtype" not in data:
                data["procedural_subtype"] = data["dynamic_subtype"]
        return data

    @model_validator(mode="after")
    def check_type_fields(self) -> "QuizCreateRequest":
        if self.quiz_type == "procedural":
            if not self.procedural_subtype:
                raise ValueError("절차적 퀴즈에는 procedural_subtype이 필요합니다")
            if self.questions:
                raise ValueError("절차적 퀴즈에는 고정 문제를 넣을 수 없습니다")
        else:
            if not self.questions:
                raise ValueError("고정 문제 세트에는 문제가 1개 이상 필요합니다")
        return self


class QuizResponse(BaseModel):
    """퀴즈 응답 스키마"""
    id: int
    teacher_id: str | None
    title: str
    description: str | None
    quiz_type: str
    procedural_subtype: str | None
    question_count: int | None
    time_limit_seconds: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class QuizListResponse(BaseModel):
    """퀴즈 목록 응답 스키마"""
    quizzes: list[QuizResponse]
    total: int


class GeneratedQuestion(BaseModel):
    """생성/로드된 문제 (표시 순서 섞기 전)"""
    question: str
    correct_answer: str
    wrong_answers: list[str]


class QuestionPreviewResponse(BaseModel):
    """퀴즈 문제 미리보기 응답"""
    quiz_id: int
    questions: list[GeneratedQuestion]
    total: int
