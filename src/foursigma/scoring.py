"""Interval scoring for calibration questions.

A submitted interval ``[lower, upper]`` either contains the true value (a hit)
or it does not. Misses score zero. Hits are scored in log space so that a
range of +/-100 around 200 and +/-100,000 around 200,000 are judged on
comparable terms, and narrower well-placed ranges earn more.

The client computes preview scores with the same formula, so the operation
order below must not change.
"""

from __future__ import annotations

import functools
import math
import operator
from dataclasses import dataclass
from typing import Iterable

import numpy as np

LOG_OFFSET = 1.1
EXACT_LOWER_FACTOR = 0.95
EXACT_UPPER_FACTOR = 1.05
EXACT_GUESS_MULTIPLIER = 3


@dataclass(frozen=True)
class Judgement:
    """Outcome of scoring one interval against a true value."""

    hit: bool
    score: float  # 0.0 on a miss

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dict."""
        return {"hit": self.hit, "score": self.score}


def _as_float(value: float) -> float:
    """Convert to float, saturating ints too large for a double to +/-inf."""
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def in_bounds(lower: float, upper: float, true_value: float) -> bool:
    """Return True if ``true_value`` lies in ``[lower, upper]`` (inclusive)."""
    lower, upper, true_value = _as_float(lower), _as_float(upper), _as_float(true_value)
    return true_value >= lower and true_value <= upper


def _core_score(lower: float, upper: float, true_value: float) -> float:
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        upper_log = np.log10(np.float64(upper) + LOG_OFFSET)
        lower_log = np.log10(np.float64(lower) + LOG_OFFSET)
        answer_log = np.log10(np.float64(true_value) + LOG_OFFSET)
        width_log = upper_log - lower_log
        centered = answer_log - 2 * upper_log - 2 * lower_log
        normalized_square = np.square(centered / width_log)
        raw = np.sqrt(width_log / 4 + 2 * normalized_square)
    return float(raw)


def compute_score(lower: float, upper: float, true_value: float) -> float:
    """Score an interval against the true value.

    Args:
        lower: Lower bound of the submitted interval.
        upper: Upper bound of the submitted interval.
        true_value: The question's answer.

    Returns:
        0.0 for a miss, otherwise a non-negative score that grows as the
        interval narrows around the answer. An exact zero-width guess is
        scored on a +/-5% buffered interval and tripled.

    Never raises: values that leave the formula's domain (bounds at or below
    -1.1, zero-width log ranges) come back as ``nan`` or ``inf``. An interval
    with ``lower > upper`` can never contain a value and scores 0.0.
    """
    lower, upper, true_value = _as_float(lower), _as_float(upper), _as_float(true_value)
    if not in_bounds(lower, upper, true_value):
        return 0.0

    if lower == true_value and upper == true_value:
        buffered = _core_score(
            lower * EXACT_LOWER_FACTOR, upper * EXACT_UPPER_FACTOR, true_value
        )
        return EXACT_GUESS_MULTIPLIER * buffered

    return _core_score(lower, upper, true_value)


def judge(lower: float, upper: float, true_value: float) -> Judgement:
    """Return the hit flag and score for one interval."""
    return Judgement(
        hit=in_bounds(lower, upper, true_value),
        score=compute_score(lower, upper, true_value),
    )


def round_score(value: float, decimals: int = 2) -> float:
    """Round half up, the way the client's ``Math.round`` does.

    ``nan`` and ``inf`` pass through unchanged.
    """
    factor = 10 ** decimals
    with np.errstate(invalid="ignore", over="ignore"):
        return float(np.floor(np.float64(value) * factor + 0.5) / factor)


def total_score(scores: Iterable[float]) -> float:
    """Sum per-question scores into a session total rounded to 2 decimals."""
    # Plain left fold; sum() uses compensated summation on 3.12+.
    total = functools.reduce(operator.add, scores, 0.0)
    return round_score(total, 2)
