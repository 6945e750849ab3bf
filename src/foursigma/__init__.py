"""foursigma - scoring for the daily calibration game.

Players give a 95% confidence interval for each numeric trivia question.
Intervals that miss score nothing; hits score more the narrower they are.
"""

from __future__ import annotations

__version__ = "0.1.0"

from foursigma.community import CommunityStats, QuestionStats, community_stats
from foursigma.scoring import (
    Judgement,
    compute_score,
    in_bounds,
    judge,
    round_score,
    total_score,
)
from foursigma.session import (
    Answer,
    IntervalError,
    Question,
    QuestionJudgement,
    SessionError,
    SessionResult,
    finalize_session,
    load_session,
    session_from_dict,
)

__all__ = [
    "Answer",
    "CommunityStats",
    "IntervalError",
    "Judgement",
    "Question",
    "QuestionJudgement",
    "QuestionStats",
    "SessionError",
    "SessionResult",
    "community_stats",
    "compute_score",
    "finalize_session",
    "in_bounds",
    "judge",
    "load_session",
    "round_score",
    "session_from_dict",
    "total_score",
]
