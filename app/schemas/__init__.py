from app.schemas.answer import (
    AnswerResponse,
    AnswerSubmitRequest,
    AnswerSubmitResponse,
    QuestionStatsResponse,
)
from app.schemas.leaderboard import (
    LeaderboardEntry,
    LeaderboardResponse,
    ParticipantResult,
    RoomResultsResponse,
)
from app.schemas.participant import (
    JoinRoomRequest,
    ParticipantListResponse,
    ParticipantResponse,
)
from app.schemas.quiz import (
    GeneratedQuestion,
    QuestionPreviewResponse,
    QuizCreateRequest,
    QuizListResponse,
    QuizResponse,
    StaticQuestionCreate,
)
from app.schemas.room import (
    RoomCreateRequest,
    RoomListResponse,
    RoomQuestionListResponse,
    RoomQuestionResponse,
    RoomResponse,
    RoomStartRequest,
)

__all__ = [
    "QuizCreateRequest",
    "StaticQuestionCreate",
    "QuizResponse",
    "QuizListResponse",
    "GeneratedQuestion",
    "QuestionPreviewResponse",
    "RoomCreateRequest",
    "RoomStartRequest",
    "RoomResponse",
    "RoomListResponse",
    "RoomQuestionResponse",
    "RoomQuestionListResponse",
    "JoinRoomRequest",
    "ParticipantResponse",
    "ParticipantListResponse",
    "AnswerSubmitRequest",
    "AnswerResponse",
    "AnswerSubmitResponse",
    "QuestionStatsResponse",
    "LeaderboardEntry",
    "LeaderboardResponse",
    "ParticipantResult",
    "RoomResultsResponse",
]
