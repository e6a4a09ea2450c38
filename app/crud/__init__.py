from app.crud.answer import (
    count_question_answers,
    create_answer,
    get_answer,
)
from app.crud.participant import (
    create_participant,
    get_participant_by_id,
    get_participants_by_room,
    mark_participant_finished,
)
from app.crud.quiz import (
    create_quiz,
    get_quiz_by_id,
    get_quizzes_for_teacher,
    get_static_questions,
)
from app.crud.room import (
    count_room_questions,
    delete_room,
    get_active_room_by_code,
    get_room_by_code,
    get_room_by_id,
    get_room_question,
    get_room_questions,
    get_rooms_by_teacher,
    is_room_code_in_use,
)

__all__ = [
    "get_quiz_by_id",
    "get_quizzes_for_teacher",
    "get_static_questions",
    "create_quiz",
    "get_room_by_id",
    "get_room_by_code",
    "get_active_room_by_code",
    "is_room_code_in_use",
    "get_rooms_by_teacher",
    "get_room_questions",
    "get_room_question",
    "count_room_questions",
    "delete_room",
    "create_participant",
    "get_participant_by_id",
    "get_participants_by_room",
    "mark_participant_finished",
    "get_answer",
    "create_answer",
    "count_question_answers",
]
