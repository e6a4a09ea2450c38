from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base


class Participant(Base):
    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(primary_key=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    # 이름 중복 허용
    student_name: Mapped[str] = mapped_column(String(50), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    room: Mapped["Room"] = relationship("Room", back_populates="participants", lazy="selectin")
    answers: Mapped[list["Answer"]] = relationship(
        "Answer",
        back_populates="participant",
        order_by="Answer.question_index",
        cascade="all, delete-orphan",
    )
