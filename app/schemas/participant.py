from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class JoinRoomRequest(BaseModel):
    """방 참여 요청 스키마"""
    display_name: str = Field(..., max_length=50, description="학생 이름 (중복 허용)")

    @field_validator("display_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("이름을 입력해주세요")
        return v


class ParticipantResponse(BaseModel):
    """참가자 응답 스키마"""
    id: int
    room_id: int
    student_name: str
    joined_at: datetime
    finished_at: datetime | None

    model_config = {"from_attributes": True}


class ParticipantListResponse(BaseModel):
    """참가자 목록 응답 스키마"""
    participants: list[ParticipantResponse]
    total: int
    finished_count: int
