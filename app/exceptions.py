"""커스텀 예외 클래스 정의"""


class BaseAppError(Exception):
    """애플리케이션 기본 예외 클래스"""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    @classmethod
    def from_detail(cls, message: str, status_code: int) -> "BaseAppError":
        """서버 오류 응답(detail, status)으로 예외 복원 (클라이언트용)"""
        error = cls.__new__(cls)
        BaseAppError.__init__(error, message, status_code)
        return error


class QuizNotFoundError(BaseAppError):
    """퀴즈를 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, quiz_id: int):
        super().__init__(f"퀴즈를 찾을 수 없습니다: {quiz_id}", status_code=404)


class RoomNotFoundError(BaseAppError):
    """참여 코드에 해당하는 (활성) 방이 없을 때 발생하는 예외 (404)"""

    def __init__(self, room_code: str):
        super().__init__(f"방을 찾을 수 없습니다: {room_code}", status_code=404)


class ParticipantNotFoundError(BaseAppError):
    """참가자를 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, participant_id: int):
        super().__init__(f"참가자를 찾을 수 없습니다: {participant_id}", status_code=404)


class InvalidQuizRequestError(BaseAppError):
    """잘못된 요청일 때 발생하는 예외 (400)"""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class UnsupportedQuizSubtypeError(BaseAppError):
    """선언만 되어 있고 생성기가 없는 문제 유형 (400)"""

    def __init__(self, subtype: str):
        self.subtype = subtype
        super().__init__(f"지원하지 않는 문제 유형입니다: {subtype}", status_code=400)


class IllegalTransitionError(BaseAppError):
    """현재 방 상태에서 허용되지 않는 진행 조작 (409)"""

    def __init__(self, message: str):
        super().__init__(message, status_code=409)


class LastQuestionError(IllegalTransitionError):
    """마지막 문제에서 다음 문제로 넘기려 할 때 (409, 상태는 그대로 유지)"""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"이미 마지막 문제입니다: index={index}")


class RoomClosedError(BaseAppError):
    """종료된 방에 대한 변경 시도 (410)"""

    def __init__(self, room_code: str):
        self.room_code = room_code
        super().__init__(f"종료된 방입니다: {room_code}", status_code=410)


class TeacherForbiddenError(BaseAppError):
    """방 소유자가 아닌 교사의 조작 (403)"""

    def __init__(self, room_code: str):
        super().__init__(f"이 방을 조작할 권한이 없습니다: {room_code}", status_code=403)


class RoomCodeExhaustedError(BaseAppError):
    """참여 코드 충돌이 계속될 때 (503)"""

    def __init__(self, attempts: int):
        super().__init__(
            f"참여 코드 생성에 실패했습니다 ({attempts}회 충돌). 잠시 후 다시 시도해주세요.",
            status_code=503,
        )


class ApiRequestError(BaseAppError):
    """클라이언트에서 서버 호출이 실패했을 때 (네트워크/타임아웃/알 수 없는 응답)"""

    def __init__(self, message: str, status_code: int = 503):
        super().__init__(message, status_code=status_code)


# 서버 응답의 "code" → 예외 클래스
ERROR_CLASSES: dict[str, type[BaseAppError]] = {
    cls.__name__: cls
    for cls in (
        QuizNotFoundError,
        RoomNotFoundError,
        ParticipantNotFoundError,
        InvalidQuizRequestError,
        UnsupportedQuizSubtypeError,
        IllegalTransitionError,
        LastQuestionError,
        RoomClosedError,
        TeacherForbiddenError,
        RoomCodeExhaustedError,
    )
}
