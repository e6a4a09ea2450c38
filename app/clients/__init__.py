from app.clients.api_client import RoomApiClient, error_from_response
from app.clients.student_play import AnswerGate, AutomaticPlaySession, ManualPlaySession, PlayStatus
from app.clients.teacher_control import TeacherControlView
from app.clients.timer import QuestionTimer

__all__ = [
    "RoomApiClient",
    "error_from_response",
    "AnswerGate",
    "AutomaticPlaySession",
    "ManualPlaySession",
    "PlayStatus",
    "TeacherControlView",
    "QuestionTimer",
]
