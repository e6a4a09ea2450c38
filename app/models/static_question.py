from sqlalchemy import JSON, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class StaticQuestion(Base, TimestampMixin):
    """고정 문제 세트의 문제 은행"""
    __tablename__ = "static_questions"
    __table_args__ = (
        UniqueConstraint("quiz_id", "order_index", name="uq_static_questions_quiz_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    quiz_id: Mapped[int] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    question_type: Mapped[str] = mapped_column(String(30), nullable=False, default="multiple_choice")
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    wrong_answers: Mapped[list[str]] = mapped_column(JSON, nullable=False)

    quiz: Mapped["Quiz"] = relationship("Quiz", back_populates="static_questions")
