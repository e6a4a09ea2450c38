"""점수/순위표 테스트"""
import csv
import io
from datetime import datetime, timedelta

import pytest

from app.services import scoring_service
from app.services.scoring_service import ScoreSummary

BASE_TIME = datetime(2026, 1, 1, 9, 0, 0)


def _summary(pid: int, score: int, answered: int, total_time: int, joined_offset: int = 0, name: str | None = None):
    return ScoreSummary(
        participant_id=pid,
        student_name=name or f"학생{pid}",
        joined_at=BASE_TIME + timedelta(seconds=joined_offset),
        finished=True,
        score=score,
        answered=answered,
        total_time_seconds=total_time,
    )


@pytest.mark.parametrize(
    "score, answered, expected",
    [(0, 0, 0), (3, 5, 60), (5, 5, 100), (1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 200, 1), (1, 40, 3)],
)
def test_percentage_rounds_half_up(score, answered, expected):
    assert scoring_service.percentage(score, answered) == expected


@pytest.mark.parametrize(
    "numerator, denominator, expected",
    [(125, 2, 63), (25, 2, 13), (5, 2, 3), (0, 0, 0), (150, 2, 75)],
)
def test_round_half_up_for_average(numerator, denominator, expected):
    """평균 정답률도 0.5는 올림 (62.5 → 63)"""
    assert scoring_service.round_half_up(numerator, denominator) == expected


def test_rank_orders_by_score_then_time():
    entries = scoring_service.rank([
        _summary(1, score=3, answered=5, total_time=90),
        _summary(2, score=5, answered=5, total_time=60),
        _summary(3, score=3, answered=5, total_time=40),
    ])
    assert [e.participant_id for e in entries] == [2, 3, 1]
    assert [e.rank for e in entries] == [1, 2, 3]


def test_rank_is_stable_for_ties():
    """점수/시간이 같으면 참여 순 → ID 순, 입력 순서와 무관"""
    summaries = [
        _summary(5, score=2, answered=3, total_time=30, joined_offset=10),
        _summary(4, score=2, answered=3, total_time=30, joined_offset=0),
        _summary(6, score=2, answered=3, total_time=30, joined_offset=0),
    ]
    expected = [4, 6, 5]
    assert [e.participant_id for e in scoring_service.rank(summaries)] == expected
    assert [e.participant_id for e in scoring_service.rank(list(reversed(summaries)))] == expected


def test_render_csv_leaderboard_order():
    """3/5 (90초)와 5/5 (60초) → 5/5가 먼저"""
    entries = scoring_service.rank([
        _summary(1, score=3, answered=5, total_time=90, name="Kim"),
        _summary(2, score=5, answered=5, total_time=60, name="Lee"),
    ])
    rows = list(csv.reader(io.StringIO(scoring_service.render_csv(entries))))
    assert rows[0] == ["name", "score", "total", "percentage", "total_time_seconds"]
    assert rows[1] == ["Lee", "5", "5", "100", "60"]
    assert rows[2] == ["Kim", "3", "5", "60", "90"]


def test_render_csv_quotes_names_with_commas():
    entries = scoring_service.rank([_summary(1, 1, 1, 5, name="Park, Ji")])
    rows = list(csv.reader(io.StringIO(scoring_service.render_csv(entries))))
    assert rows[1][0] == "Park, Ji"
