from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class Room(Base, TimestampMixin):
    __tablename__ = "rooms"
    __table_args__ = (
        # 참여 코드는 활성 방 사이에서만 유일
        Index(
            "uq_rooms_active_room_code",
            "room_code",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    room_code: Mapped[str] = mapped_column(String(6), nullable=False, index=True)
    teacher_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    quiz_id: Mapped[int] = mapped_column(ForeignKey("quizzes.id"), nullable=False)
    class_name: Mapped[str | None] = mapped_column(String(100), default=None)
    grade_level: Mapped[int | None] = mapped_column(Integer, default=None)

    question_mode: Mapped[str] = mapped_column(String(20), nullable=False)  # 'automatic', 'manual'
    time_limit_per_question: Mapped[int | None] = mapped_column(Integer, default=None)
    randomize_questions: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    randomize_answers: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    # 수동 모드 진행 상태 (None = 시작 전)
    current_question_index: Mapped[int | None] = mapped_column(Integer, default=None)
    question_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    show_results: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    quiz: Mapped["Quiz"] = relationship("Quiz", back_populates="rooms", lazy="selectin")
    questions: Mapped[list["RoomQuestion"]] = relationship(
        "RoomQuestion",
        back_populates="room",
        order_by="RoomQuestion.question_index",
        cascade="all, delete-orphan",
    )
    participants: Mapped[list["Participant"]] = relationship(
        "Participant",
        back_populates="room",
        order_by="Participant.joined_at",
        cascade="all, delete-orphan",
    )
