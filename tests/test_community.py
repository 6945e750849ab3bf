"""Tests for the in-memory community stats accumulator."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from foursigma.community import CommunityStats, QuestionStats


@pytest.fixture()
def stats():
    return CommunityStats()


def test_unknown_question_returns_none(stats):
    assert stats.get("everest") is None


def test_average_and_highest(stats):
    for score in (10.0, 20.0, 0.0):
        stats.record("everest", score)

    result = stats.get("everest")
    assert result == QuestionStats(average_score=10.0, highest_score=20.0, responses=3)


def test_values_rounded_to_two_decimals(stats):
    stats.record("q1", 1.0)
    stats.record("q1", 2.0)
    stats.record("q1", 2.0)

    result = stats.get("q1")
    assert result.average_score == 1.67
    assert result.highest_score == 2.0


def test_questions_tracked_separately(stats):
    stats.record("a", 5.0)
    stats.record("b", 50.0)

    assert stats.get("a").highest_score == 5.0
    assert stats.get("b").highest_score == 50.0
    assert len(stats) == 2


def test_reset_clears_everything(stats):
    stats.record("a", 5.0)
    stats.reset()

    assert stats.get("a") is None
    assert len(stats) == 0


def test_to_dict_uses_wire_names(stats):
    stats.record("a", 3.0)
    assert stats.get("a").to_dict() == {
        "averageScore": 3.0,
        "highestScore": 3.0,
        "responses": 1,
    }


def test_concurrent_records(stats):
    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda i: stats.record("busy", float(i % 10)), range(1000)))

    assert stats.get("busy").responses == 1000
    assert stats.get("busy").highest_score == 9.0
