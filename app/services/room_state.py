"""수동 모드 방 진행 상태 머신

DB에는 current_question_index / show_results / is_active 세 필드로 저장되지만,
서비스 계층에서는 항상 명시적인 RoomState로 변환해서 전이를 검사한다.

    idle ──start(i)──▶ question_active(i) ──reveal──▶ results_shown(i)
                          ▲      │  ◀──hide──            │
                          └──advance (i+1 < total)───────┘
    (모든 상태) ──end──▶ ended
"""
from dataclasses import dataclass
from enum import Enum

from app.exceptions import IllegalTransitionError, InvalidQuizRequestError, LastQuestionError


class RoomPhase(str, Enum):
    IDLE = "idle"
    QUESTION_ACTIVE = "question_active"
    RESULTS_SHOWN = "results_shown"
    ENDED = "ended"


class RoomAction(str, Enum):
    START = "start"
    ADVANCE = "advance"
    REVEAL = "reveal"
    HIDE = "hide"
    END = "end"


@dataclass(frozen=True)
class RoomState:
    phase: RoomPhase
    index: int | None = None

    @classmethod
    def idle(cls) -> "RoomState":
        return cls(RoomPhase.IDLE)

    @classmethod
    def question_active(cls, index: int) -> "RoomState":
        return cls(RoomPhase.QUESTION_ACTIVE, index)

    @classmethod
    def results_shown(cls, index: int) -> "RoomState":
        return cls(RoomPhase.RESULTS_SHOWN, index)

    @classmethod
    def ended(cls, index: int | None = None) -> "RoomState":
        # 종료 시점의 인덱스는 결과 화면용으로 보존
        return cls(RoomPhase.ENDED, index)

    @classmethod
    def from_fields(
        cls,
        is_active: bool,
        current_question_index: int | None,
        show_results: bool,
    ) -> "RoomState":
        """DB 필드 → 명시적 상태

        index가 None이면 show_results 값과 무관하게 idle로 본다.
        """
        if not is_active:
            return cls.ended(current_question_index)
        if current_question_index is None:
            return cls.idle()
        if show_results:
            return cls.results_shown(current_question_index)
        return cls.question_active(current_question_index)

    @property
    def show_results(self) -> bool:
        return self.phase == RoomPhase.RESULTS_SHOWN

    @property
    def is_active(self) -> bool:
        return self.phase != RoomPhase.ENDED


def transition(
    state: RoomState,
    action: RoomAction,
    total_questions: int,
    start_index: int = 0,
) -> RoomState:
    """상태 전이 함수

    허용되지 않는 전이는 예외로 거부한다. 종료된 방 처리는 호출자가 먼저 한다
    (RoomClosedError는 방 코드가 필요하므로 서비스 계층에서 발생).

    Raises:
        LastQuestionError: 마지막 문제에서 advance
        IllegalTransitionError: 현재 상태에서 불가능한 조작
        InvalidQuizRequestError: 범위를 벗어난 시작 인덱스
    """
    if state.phase == RoomPhase.ENDED:
        raise IllegalTransitionError("이미 종료된 방입니다")

    if action == RoomAction.END:
        return RoomState.ended(state.index)

    if action == RoomAction.START:
        if state.phase != RoomPhase.IDLE:
            raise IllegalTransitionError("이미 시작된 퀴즈입니다")
        if not 0 <= start_index < total_questions:
            raise InvalidQuizRequestError(
                f"시작 인덱스가 범위를 벗어났습니다: index={start_index}, total={total_questions}"
            )
        return RoomState.question_active(start_index)

    if state.phase == RoomPhase.IDLE:
        raise IllegalTransitionError("퀴즈가 아직 시작되지 않았습니다")

    if action == RoomAction.ADVANCE:
        next_index = state.index + 1
        if next_index >= total_questions:
            raise LastQuestionError(state.index)
        return RoomState.question_active(next_index)

    if action == RoomAction.REVEAL:
        return RoomState.results_shown(state.index)

    if action == RoomAction.HIDE:
        return RoomState.question_active(state.index)

    raise IllegalTransitionError(f"알 수 없는 조작입니다: {action}")
