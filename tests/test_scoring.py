"""Tests for interval scoring."""

from __future__ import annotations

import math
import warnings

import pytest

from foursigma.scoring import (
    Judgement,
    compute_score,
    in_bounds,
    judge,
    round_score,
    total_score,
)

EVEREST = 8849


def _reference_score(lower, upper, answer):
    """Core formula written out with the math module, same operation order."""
    upper_log = math.log10(upper + 1.1)
    lower_log = math.log10(lower + 1.1)
    answer_log = math.log10(answer + 1.1)
    width_log = upper_log - lower_log
    centered = answer_log - 2 * upper_log - 2 * lower_log
    normalized_square = (centered / width_log) ** 2
    return math.sqrt(width_log / 4 + 2 * normalized_square)


class TestInBounds:
    def test_inclusive_lower(self):
        assert in_bounds(5, 10, 5) is True

    def test_inclusive_upper(self):
        assert in_bounds(5, 10, 10) is True

    def test_inside(self):
        assert in_bounds(5, 10, 7.5) is True

    def test_below_and_above(self):
        assert in_bounds(5, 10, 4.999) is False
        assert in_bounds(5, 10, 10.001) is False

    def test_inverted_bounds_never_hit(self):
        assert in_bounds(10, 5, 7) is False
        assert in_bounds(10, 5, 10) is False
        assert in_bounds(10, 5, 5) is False


class TestComputeScore:
    @pytest.mark.parametrize("lower,upper,answer", [
        (9500, 12000, EVEREST),
        (0, 8848, EVEREST),
        (-10, -1, 0),
        (1e12, 2e12, 3e12),
    ])
    def test_miss_scores_exactly_zero(self, lower, upper, answer):
        assert compute_score(lower, upper, answer) == 0
        assert in_bounds(lower, upper, answer) is False

    @pytest.mark.parametrize("lower,upper,answer", [
        (8000, 9500, EVEREST),
        (0, 10, 5),
        (1, 100_000_000, 30),
        (0.1, 0.2, 0.15),
    ])
    def test_hit_scores_positive(self, lower, upper, answer):
        assert compute_score(lower, upper, answer) > 0

    def test_exact_guess_is_tripled_buffered_score(self):
        exact = compute_score(100, 100, 100)
        assert exact > 0
        assert exact == 3 * compute_score(95, 105, 100)

    def test_exact_guess_beats_tight_range(self):
        assert compute_score(100, 100, 100) > compute_score(95, 105, 100)

    def test_narrow_beats_wide(self):
        narrow = compute_score(8700, 9000, EVEREST)
        wide = compute_score(2000, 15000, EVEREST)
        assert narrow > 0
        assert wide > 0
        assert narrow > wide

    @pytest.mark.parametrize("k", [10, 1000])
    def test_roughly_scale_invariant(self, k):
        base = compute_score(8700, 9000, EVEREST)
        scaled = compute_score(8700 * k, 9000 * k, EVEREST * k)
        assert 0.5 < scaled / base < 2.0

    def test_matches_reference_formula(self):
        score = compute_score(8000, 9500, EVEREST)
        assert score == pytest.approx(_reference_score(8000, 9500, EVEREST), abs=1e-9)
        assert 215 < score < 233

    def test_returns_builtin_float(self):
        assert type(compute_score(8000, 9500, EVEREST)) is float
        assert type(compute_score(9500, 12000, EVEREST)) is float


class TestDegenerateInputs:
    def test_exact_zero_guess_is_infinite(self):
        # zero-width log range after buffering 0
        assert math.isinf(compute_score(0, 0, 0))

    def test_bounds_below_log_domain_give_nan(self):
        assert math.isnan(compute_score(-50, -10, -20))

    def test_negative_exact_guess_does_not_raise(self):
        score = compute_score(-50, -50, -50)
        assert math.isnan(score)

    def test_no_runtime_warnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compute_score(0, 0, 0)
            compute_score(-50, -10, -20)

    def test_huge_magnitudes(self):
        score = compute_score(1e300, 1e301, 5e300)
        assert score > 0
        assert math.isfinite(score)

    def test_ints_beyond_float_range_do_not_raise(self):
        # saturate to inf, then follow the usual nan propagation
        assert math.isnan(compute_score(10**400, 10**401, 5 * 10**400))
        assert math.isnan(compute_score(1, 10**400, 5))
        assert compute_score(-(10**400), 10, 50) == 0
        assert in_bounds(1, 10**400, 5) is True

    def test_nan_true_value_is_a_miss(self):
        assert compute_score(0, 10, float("nan")) == 0
        assert in_bounds(0, 10, float("nan")) is False

    def test_infinite_bounds_do_not_raise(self):
        score = compute_score(float("-inf"), float("inf"), 5)
        assert math.isnan(score)


class TestJudge:
    def test_hit(self):
        judgement = judge(8000, 9500, EVEREST)
        assert judgement.hit is True
        assert judgement.score == compute_score(8000, 9500, EVEREST)

    def test_miss(self):
        assert judge(9500, 12000, EVEREST) == Judgement(hit=False, score=0.0)

    def test_to_dict(self):
        data = judge(9500, 12000, EVEREST).to_dict()
        assert data == {"hit": False, "score": 0.0}


class TestTotalScore:
    def test_empty(self):
        assert total_score([]) == 0

    def test_rounds_to_two_decimals(self):
        assert total_score([10, 20.456, 5]) == 35.46

    def test_accepts_generators(self):
        assert total_score(x for x in [1.5, 2.25]) == 3.75

    def test_rounds_half_up(self):
        assert total_score([0.125]) == 0.13
        assert round_score(2.5, 0) == 3.0

    def test_order_insensitive(self):
        scores = [223.91, 17.8, 0.0, 1137.49]
        assert total_score(scores) == total_score(reversed(scores))

    def test_propagates_infinity(self):
        assert math.isinf(total_score([1.0, float("inf")]))

    def test_propagates_nan(self):
        assert math.isnan(total_score([float("nan"), 2.0]))
