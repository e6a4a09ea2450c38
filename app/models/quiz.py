from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class Quiz(Base, TimestampMixin):
    __tablename__ = "quizzes"

    id: Mapped[int] = mapped_column(primary_key=True)
    # None이면 모든 교사에게 공개된 기본 퀴즈
    teacher_id: Mapped[str | None] = mapped_column(String(64), default=None, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    quiz_type: Mapped[str] = mapped_column(String(20), nullable=False)  # 'procedural', 'fixed-set'
    procedural_subtype: Mapped[str | None] = mapped_column(String(40), default=None)
    question_count: Mapped[int | None] = mapped_column(Integer, default=None)
    time_limit_seconds: Mapped[int | None] = mapped_column(Integer, default=None)

    static_questions: Mapped[list["StaticQuestion"]] = relationship(
        "StaticQuestion",
        back_populates="quiz",
        order_by="StaticQuestion.order_index",
        cascade="all, delete-orphan",
    )
    rooms: Mapped[list["Room"]] = relationship("Room", back_populates="quiz")
