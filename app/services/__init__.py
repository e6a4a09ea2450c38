from app.services import question_supply, room_state, change_feed
from app.services import room_service, participant_service, answer_service, scoring_service, quiz_service
from app.services.change_feed import ChangeEvent, ChangeFeed, Subscription
from app.services.room_state import RoomAction, RoomPhase, RoomState, transition

__all__ = [
    "question_supply",
    "room_state",
    "change_feed",
    "room_service",
    "participant_service",
    "answer_service",
    "scoring_service",
    "quiz_service",
    "ChangeEvent",
    "ChangeFeed",
    "Subscription",
    "RoomAction",
    "RoomPhase",
    "RoomState",
    "transition",
]
