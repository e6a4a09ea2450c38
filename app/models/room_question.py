from sqlalchemy import JSON, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base


class RoomQuestion(Base):
    """방 실행마다 한 번 확정되는 문제 목록 (순서, 선택지 표시 순서 포함)"""
    __tablename__ = "room_questions"
    __table_args__ = (
        UniqueConstraint("room_id", "question_index", name="uq_room_questions_room_index"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    question_index: Mapped[int] = mapped_column(Integer, nullable=False)
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    # 교사/학생 화면 모두 이 순서를 그대로 사용
    answers: Mapped[list[str]] = mapped_column(JSON, nullable=False)

    room: Mapped["Room"] = relationship("Room", back_populates="questions")
