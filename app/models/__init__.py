from app.models.base import Base, get_db
from app.models.answer import Answer
from app.models.participant import Participant
from app.models.quiz import Quiz
from app.models.room import Room
from app.models.room_question import RoomQuestion
from app.models.static_question import StaticQuestion

__all__ = ["Base", "Quiz", "StaticQuestion", "Room", "RoomQuestion", "Participant", "Answer", "get_db"]
