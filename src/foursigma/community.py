"""In-memory community statistics per question.

Running score lists keyed by question id, used to show how a player's score
compares with everyone else who answered the same question. Nothing here is
persisted: the accumulator starts empty whenever the process starts.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from threading import Lock

from foursigma.scoring import round_score

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestionStats:
    """Aggregate of all scores recorded for one question."""

    average_score: float
    highest_score: float
    responses: int

    def to_dict(self) -> dict:
        """Convert to the client's camelCase wire format."""
        return {
            "averageScore": self.average_score,
            "highestScore": self.highest_score,
            "responses": self.responses,
        }


class CommunityStats:
    """Thread-safe keyed accumulator of per-question scores."""

    def __init__(self) -> None:
        self._scores: defaultdict[str, list[float]] = defaultdict(list)
        self._lock = Lock()

    def record(self, question_id: str, score: float) -> None:
        """Append one score for a question."""
        with self._lock:
            self._scores[question_id].append(score)

    def get(self, question_id: str) -> QuestionStats | None:
        """Return stats for a question, or None if nothing was recorded."""
        with self._lock:
            scores = list(self._scores.get(question_id, ()))
        if not scores:
            return None
        average = sum(scores) / len(scores)
        return QuestionStats(
            average_score=round_score(average),
            highest_score=round_score(max(scores)),
            responses=len(scores),
        )

    def reset(self) -> None:
        """Forget everything recorded so far."""
        with self._lock:
            count = len(self._scores)
            self._scores.clear()
        LOGGER.info("Cleared community stats for %d questions", count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._scores)


community_stats = CommunityStats()
