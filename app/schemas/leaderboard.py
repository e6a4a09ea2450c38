from datetime import datetime

from pydantic import BaseModel

from app.schemas.answer import AnswerResponse


class LeaderboardEntry(BaseModel):
    """순위표 항목"""
    rank: int
    participant_id: int
    student_name: str
    score: int
    total: int
    percentage: int
    total_time_seconds: int
    finished: bool


class LeaderboardResponse(BaseModel):
    """순위표 응답"""
    room_code: str
    entries: list[LeaderboardEntry]
    total: int


class ParticipantResult(BaseModel):
    """참가자별 상세 결과"""
    entry: LeaderboardEntry
    joined_at: datetime
    finished_at: datetime | None
    answers: list[AnswerResponse]


class RoomResultsResponse(BaseModel):
    """방 결과 응답 (교사 결과 화면)"""
    room_code: str
    quiz_title: str | None
    participant_count: int
    average_percentage: int
    results: list[ParticipantResult]
