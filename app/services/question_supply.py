import logging
import random
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import quiz as quiz_crud
from app.exceptions import InvalidQuizRequestError, QuizNotFoundError, UnsupportedQuizSubtypeError
from app.models.quiz import Quiz
from app.schemas.quiz import GeneratedQuestion

logger = logging.getLogger(__name__)

PROCEDURAL_SUBTYPES = ("addition_single", "addition_double", "fractions", "angles")
DISTRACTOR_COUNT = 3
# 이 횟수만큼 실패하면 오프셋 범위를 두 배로 넓힘
DISTRACTOR_DRAWS_PER_WIDTH = 30
DEFAULT_PROCEDURAL_COUNT = 10


@dataclass(frozen=True)
class RunQuestion:
    """방 실행용으로 확정된 문제 (선택지 표시 순서 포함)"""
    question_index: int
    question_text: str
    correct_answer: str
    answers: list[str]


def _collect_distractors(
    rng: random.Random,
    correct: int,
    offset: int,
    upper: int | None = None,
) -> list[str]:
    """정답 주변 오답 3개 생성 (0 이하/상한 초과/정답 중복 제외)

    작은 정답 범위에서도 끝나도록 일정 횟수 실패마다 오프셋 범위를 넓힌다.
    """
    wrong: list[int] = []
    width = offset
    draws = 0
    while len(wrong) < DISTRACTOR_COUNT:
        candidate = correct + rng.randint(-width, width)
        draws += 1
        valid = candidate != correct and candidate > 0 and (upper is None or candidate <= upper)
        if valid and candidate not in wrong:
            wrong.append(candidate)
        if draws >= DISTRACTOR_DRAWS_PER_WIDTH:
            width *= 2
            draws = 0
            if upper is not None and correct + width > upper * 4:
                # 상한 안에 후보가 부족하면 상한을 풀어서라도 종료
                upper = None
    return [str(w) for w in wrong]


def generate_addition_single(rng: random.Random) -> GeneratedQuestion:
    """한 자리 덧셈"""
    a = rng.randint(1, 9)
    b = rng.randint(1, 9)
    correct = a + b
    return GeneratedQuestion(
        question=f"{a} + {b} = ?",
        correct_answer=str(correct),
        wrong_answers=_collect_distractors(rng, correct, offset=3, upper=20),
    )


def generate_addition_double(rng: random.Random) -> GeneratedQuestion:
    """두 자리 덧셈"""
    a = rng.randint(10, 99)
    b = rng.randint(10, 99)
    correct = a + b
    return GeneratedQuestion(
        question=f"{a} + {b} = ?",
        correct_answer=str(correct),
        wrong_answers=_collect_distractors(rng, correct, offset=10),
    )


_GENERATORS = {
    "addition_single": generate_addition_single,
    "addition_double": generate_addition_double,
}


def generate(
    subtype: str,
    count: int,
    rng: random.Random | None = None,
) -> list[GeneratedQuestion]:
    """절차적 문제 생성

    Args:
        subtype: 문제 유형 (addition_single, addition_double, fractions, angles)
        count: 생성할 문제 개수
        rng: 난수 생성기 (테스트에서 시드 고정용)

    Raises:
        UnsupportedQuizSubtypeError: 선언만 된 유형(fractions, angles) 또는 알 수 없는 유형
        InvalidQuizRequestError: count가 1 미만
    """
    if count < 1:
        raise InvalidQuizRequestError(f"문제 개수는 1개 이상이어야 합니다: {count}")

    generator = _GENERATORS.get(subtype)
    if generator is None:
        raise UnsupportedQuizSubtypeError(subtype)

    rng = rng or random.Random()
    return [generator(rng) for _ in range(count)]


async def load(session: AsyncSession, quiz_id: int) -> list[GeneratedQuestion]:
    """고정 문제 세트 로드 (order_index 순)"""
    quiz = await quiz_crud.get_quiz_by_id(session, quiz_id)
    if not quiz:
        raise QuizNotFoundError(quiz_id)

    questions = await quiz_crud.get_static_questions(session, quiz_id)
    return [
        GeneratedQuestion(
            question=q.question_text,
            correct_answer=q.correct_answer,
            wrong_answers=list(q.wrong_answers),
        )
        for q in questions
    ]


async def supply_questions(
    session: AsyncSession,
    quiz: Quiz,
    rng: random.Random | None = None,
) -> list[GeneratedQuestion]:
    """퀴즈 유형에 따라 문제 공급 (생성 또는 로드)"""
    if quiz.quiz_type == "procedural":
        return generate(
            quiz.procedural_subtype or "",
            quiz.question_count or DEFAULT_PROCEDURAL_COUNT,
            rng=rng,
        )
    return await load(session, quiz.id)


def shuffle_answers(
    correct: str,
    wrong: Sequence[str],
    rng: random.Random,
) -> list[str]:
    """정답 + 오답을 섞은 표시 순서"""
    answers = [correct, *wrong]
    rng.shuffle(answers)
    return answers


def build_run(
    questions: Sequence[GeneratedQuestion],
    procedural: bool,
    randomize_questions: bool,
    randomize_answers: bool,
    rng: random.Random | None = None,
) -> list[RunQuestion]:
    """방 실행용 문제 목록 확정 (문제 순서와 선택지 순서를 한 번만 섞음)"""
    if not questions:
        raise InvalidQuizRequestError("이 퀴즈에는 문제가 없습니다")

    rng = rng or random.Random()
    ordered = list(questions)
    if randomize_questions:
        rng.shuffle(ordered)

    run = []
    for index, question in enumerate(ordered):
        if procedural or randomize_answers:
            answers = shuffle_answers(question.correct_answer, question.wrong_answers, rng)
        else:
            answers = [question.correct_answer, *question.wrong_answers]
        run.append(
            RunQuestion(
                question_index=index,
                question_text=question.question,
                correct_answer=question.correct_answer,
                answers=answers,
            )
        )

    logger.debug(f"문제 실행 목록 확정: count={len(run)}, randomize_questions={randomize_questions}")
    return run


def generate_room_code(rng: random.Random | None = None) -> str:
    """6자리 숫자 참여 코드 (100000-999999)"""
    rng = rng or random.Random()
    return str(rng.randint(100000, 999999))
