"""Session finalization: turn submitted intervals into judgements and a total."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Sequence

import yaml

from foursigma.community import CommunityStats, QuestionStats
from foursigma.scoring import Judgement, judge, total_score

LOGGER = logging.getLogger(__name__)


class IntervalError(ValueError):
    """A submitted interval is not a pair of finite numbers with lower <= upper."""


class SessionError(ValueError):
    """A session cannot be finalized or parsed."""


def check_bound(value: Any, name: str) -> float:
    """Validate one interval bound and return it as a float.

    Raises:
        IntervalError: If the value is not a finite real number.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise IntervalError(f"{name} must be a number")
    try:
        value = float(value)
    except OverflowError:
        raise IntervalError(f"{name} must be finite") from None
    if not math.isfinite(value):
        raise IntervalError(f"{name} must be finite")
    return value


def check_interval(lower: Any, upper: Any) -> tuple[float, float]:
    """Validate a submitted interval.

    Raises:
        IntervalError: If a bound is not a finite number or lower > upper.
    """
    lower = check_bound(lower, "lower")
    upper = check_bound(upper, "upper")
    if lower > upper:
        raise IntervalError("Lower bound cannot be greater than upper bound")
    return lower, upper


@dataclass
class Question:
    """A trivia question with a numeric answer."""

    id: str
    prompt: str
    true_value: float
    unit: str = ""
    source: str = ""
    source_url: str = ""
    answer_context: str | None = None


@dataclass
class Answer:
    """A user's interval for one question."""

    question_id: str
    lower: float
    upper: float
    submitted_at: datetime | None = None

    def __post_init__(self):
        self.lower, self.upper = check_interval(self.lower, self.upper)


@dataclass
class QuestionJudgement:
    """Scored answer to a single question."""

    question: Question
    answer: Answer
    judgement: Judgement
    community: QuestionStats | None = None

    @property
    def hit(self) -> bool:
        return self.judgement.hit

    @property
    def score(self) -> float:
        return self.judgement.score

    def to_dict(self) -> dict:
        """Convert to the client's camelCase wire format."""
        data: dict = {
            "questionId": self.question.id,
            "prompt": self.question.prompt,
            "unit": self.question.unit,
            "lower": self.answer.lower,
            "upper": self.answer.upper,
            "trueValue": self.question.true_value,
            "hit": self.hit,
            "score": self.score,
            "source": self.question.source,
            "sourceUrl": self.question.source_url,
        }
        if self.question.answer_context is not None:
            data["answerContext"] = self.question.answer_context
        if self.community is not None:
            stats = self.community.to_dict()
            data["communityStats"] = {
                "averageScore": stats["averageScore"],
                "highestScore": stats["highestScore"],
            }
        return data


@dataclass
class SessionResult:
    """All judgements for a session plus the session total."""

    judgements: list[QuestionJudgement] = field(default_factory=list)
    score: float = 0.0

    @property
    def total_questions(self) -> int:
        return len(self.judgements)

    @property
    def questions_captured(self) -> int:
        """Number of intervals that contained the true value."""
        return sum(1 for j in self.judgements if j.hit)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dict."""
        return {
            "judgements": [j.to_dict() for j in self.judgements],
            "score": self.score,
            "totalQuestions": self.total_questions,
            "questionsCaptured": self.questions_captured,
        }


def finalize_session(
    questions: Sequence[Question],
    answers: Iterable[Answer],
    community: CommunityStats | None = None,
) -> SessionResult:
    """Score every question in a session.

    Args:
        questions: Session questions in display order.
        answers: Submitted answers. Only the first answer per question counts.
        community: Optional accumulator to record scores into. When given,
            each judgement carries that question's community stats.

    Returns:
        SessionResult with one judgement per question and the rounded total.

    Raises:
        SessionError: If a question has no answer.
    """
    by_question: dict[str, Answer] = {}
    for answer in answers:
        by_question.setdefault(answer.question_id, answer)

    missing = [q.id for q in questions if q.id not in by_question]
    if missing:
        raise SessionError(f"Missing answer for question {missing[0]!r}")

    judgements: list[QuestionJudgement] = []
    for question in questions:
        answer = by_question[question.id]
        judgement = judge(answer.lower, answer.upper, question.true_value)
        stats = None
        if community is not None:
            community.record(question.id, judgement.score)
            stats = community.get(question.id)

        judgements.append(QuestionJudgement(
            question=question, answer=answer, judgement=judgement, community=stats,
        ))

    result = SessionResult(
        judgements=judgements,
        score=total_score(j.score for j in judgements),
    )
    LOGGER.debug(
        "Finalized session: %d/%d captured, score %s",
        result.questions_captured, result.total_questions, result.score,
    )
    return result


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise SessionError(f"Invalid submitted_at timestamp: {value!r}") from e


def _question_from_dict(data: dict) -> Question:
    qid = _pick(data, "id", "questionId", "question_id")
    true_value = _pick(data, "true_value", "trueValue")
    if qid is None or true_value is None:
        raise SessionError("Each question needs an id and a true_value")
    try:
        true_value = check_bound(true_value, "true_value")
    except IntervalError as e:
        raise SessionError(f"Question {qid!r}: {e}") from e
    return Question(
        id=str(qid),
        prompt=str(data.get("prompt", "")),
        true_value=true_value,
        unit=str(data.get("unit") or ""),
        source=str(data.get("source") or ""),
        source_url=str(_pick(data, "source_url", "sourceUrl", default="") or ""),
        answer_context=_pick(data, "answer_context", "answerContext"),
    )


def _answer_from_dict(data: dict) -> Answer:
    qid = _pick(data, "question_id", "questionId")
    if qid is None:
        raise SessionError("Each answer needs a question_id")
    return Answer(
        question_id=str(qid),
        lower=data.get("lower"),
        upper=data.get("upper"),
        submitted_at=_parse_datetime(_pick(data, "submitted_at", "submittedAt")),
    )


def session_from_dict(data: Any) -> tuple[list[Question], list[Answer]]:
    """Build questions and answers from a parsed session document.

    Accepts snake_case or the client's camelCase keys.

    Raises:
        SessionError: If the document is malformed.
        IntervalError: If an answer's interval is invalid.
    """
    if not isinstance(data, dict):
        raise SessionError("Session must be a mapping with 'questions' and 'answers'")
    raw_questions = data.get("questions")
    raw_answers = data.get("answers")
    if not isinstance(raw_questions, list) or not isinstance(raw_answers, list):
        raise SessionError("Session needs 'questions' and 'answers' lists")
    if not all(isinstance(q, dict) for q in raw_questions + raw_answers):
        raise SessionError("Questions and answers must be mappings")

    questions = [_question_from_dict(q) for q in raw_questions]
    answers = [_answer_from_dict(a) for a in raw_answers]
    return questions, answers


def load_session(path: str | Path) -> tuple[list[Question], list[Answer]]:
    """Read a YAML (or JSON) session file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SessionError(f"Could not parse {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise SessionError(f"Could not read {path}: {e}") from e
    return session_from_dict(data)
