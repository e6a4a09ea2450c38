import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import participant as participant_crud
from app.models.answer import Answer
from app.models.participant import Participant
from app.schemas import answer as answer_schema, leaderboard as leaderboard_schema
from app.services import room_service

logger = logging.getLogger(__name__)

CSV_HEADER = ["name", "score", "total", "percentage", "total_time_seconds"]


@dataclass(frozen=True)
class ScoreSummary:
    participant_id: int
    student_name: str
    joined_at: datetime
    finished: bool
    score: int
    answered: int
    total_time_seconds: int

    @property
    def percentage(self) -> int:
        return percentage(self.score, self.answered)

    def sort_key(self) -> tuple:
        # 점수 내림차순 → 총 소요 시간 오름차순 → 참여 순 → ID
        return (-self.score, self.total_time_seconds, self.joined_at, self.participant_id)


def round_half_up(numerator: int, denominator: int) -> int:
    """음이 아닌 정수 나눗셈 반올림 (0.5는 올림, 분모가 0이면 0)"""
    if denominator == 0:
        return 0
    return (numerator * 2 + denominator) // (denominator * 2)


def percentage(score: int, answered: int) -> int:
    """정답률 (반올림, 답안이 없으면 0)"""
    return round_half_up(score * 100, answered)


def summarize(participant: Participant, answers: Sequence[Answer]) -> ScoreSummary:
    """참가자 1명의 점수 요약"""
    return ScoreSummary(
        participant_id=participant.id,
        student_name=participant.student_name,
        joined_at=participant.joined_at,
        finished=participant.finished_at is not None,
        score=sum(1 for a in answers if a.is_correct),
        answered=len(answers),
        total_time_seconds=sum(a.time_taken_seconds or 0 for a in answers),
    )


def rank(summaries: Sequence[ScoreSummary]) -> list[leaderboard_schema.LeaderboardEntry]:
    """순위 매기기 (전순서이므로 재계산해도 순서가 같음)"""
    ordered = sorted(summaries, key=lambda s: s.sort_key())
    return [
        leaderboard_schema.LeaderboardEntry(
            rank=position,
            participant_id=s.participant_id,
            student_name=s.student_name,
            score=s.score,
            total=s.answered,
            percentage=s.percentage,
            total_time_seconds=s.total_time_seconds,
            finished=s.finished,
        )
        for position, s in enumerate(ordered, start=1)
    ]


async def _load_participants(session: AsyncSession, room_code: str, teacher_id: str | None = None):
    if teacher_id is None:
        room = await room_service.get_room(session, room_code)
    else:
        room = await room_service.get_owned_room(session, room_code, teacher_id)
    participants = await participant_crud.get_participants_by_room(session, room.id, load_answers=True)
    return room, participants


async def get_leaderboard(
    session: AsyncSession,
    room_code: str,
    teacher_id: str | None = None,
) -> leaderboard_schema.LeaderboardResponse:
    """순위표"""
    room, participants = await _load_participants(session, room_code, teacher_id)
    entries = rank([summarize(p, p.answers) for p in participants])
    return leaderboard_schema.LeaderboardResponse(
        room_code=room.room_code,
        entries=entries,
        total=len(entries),
    )


async def get_room_results(
    session: AsyncSession,
    room_code: str,
    teacher_id: str | None = None,
) -> leaderboard_schema.RoomResultsResponse:
    """교사 결과 화면: 순위 순서로 참가자별 답안 포함"""
    room, participants = await _load_participants(session, room_code, teacher_id)
    by_id = {p.id: p for p in participants}
    entries = rank([summarize(p, p.answers) for p in participants])

    results = []
    for entry in entries:
        participant = by_id[entry.participant_id]
        results.append(
            leaderboard_schema.ParticipantResult(
                entry=entry,
                joined_at=participant.joined_at,
                finished_at=participant.finished_at,
                answers=[answer_schema.AnswerResponse.model_validate(a) for a in participant.answers],
            )
        )

    average = round_half_up(sum(e.percentage for e in entries), len(entries))
    return leaderboard_schema.RoomResultsResponse(
        room_code=room.room_code,
        quiz_title=room.quiz.title if room.quiz else None,
        participant_count=len(entries),
        average_percentage=average,
        results=results,
    )


def render_csv(entries: Sequence[leaderboard_schema.LeaderboardEntry]) -> str:
    """순위표 → CSV 문자열"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for entry in entries:
        writer.writerow([
            entry.student_name,
            entry.score,
            entry.total,
            entry.percentage,
            entry.total_time_seconds,
        ])
    return buffer.getvalue()


async def export_results_csv(session: AsyncSession, room_code: str, teacher_id: str | None = None) -> str:
    """결과 CSV 내보내기 (순위표 순서)"""
    leaderboard = await get_leaderboard(session, room_code, teacher_id)
    logger.info(f"결과 CSV 내보내기: room_code={room_code}, rows={leaderboard.total}")
    return render_csv(leaderboard.entries)
