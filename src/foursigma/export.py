"""CSV and JSONL export utilities for finalized sessions."""

from __future__ import annotations

import csv
import io
import json
from typing import IO, Iterator

from foursigma.session import QuestionJudgement, SessionResult


def judgement_to_csv_row(qj: QuestionJudgement, session: str | None = None) -> dict:
    """Flatten a question judgement into a single CSV-friendly dict.

    Args:
        qj: The judgement to flatten.
        session: Optional session label (file name, session id, etc.).

    Returns:
        Dict with keys: session (if given), question_id, lower, upper,
        true_value, hit, score.
    """
    row: dict = {}
    if session is not None:
        row["session"] = session
    row["question_id"] = qj.question.id
    row["lower"] = qj.answer.lower
    row["upper"] = qj.answer.upper
    row["true_value"] = qj.question.true_value
    row["hit"] = qj.hit
    row["score"] = round(qj.score, 3)
    return row


def judgements_to_csv(
    rows: list[dict],
    output: IO[str] | None = None,
) -> str | None:
    """Write flattened judgement rows as CSV.

    Args:
        rows: List of dicts from judgement_to_csv_row().
        output: Optional writable stream. If None, returns CSV as string.

    Returns:
        CSV string if output is None, otherwise None (written to stream).
    """
    if not rows:
        return "" if output is None else None

    fieldnames = list(rows[0].keys())
    buf = io.StringIO() if output is None else output
    writer = csv.DictWriter(buf, fieldnames=fieldnames)
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue() if output is None else None


def session_to_jsonl_lines(result: SessionResult, session: str | None = None) -> Iterator[str]:
    """Yield one compact JSON line per judgement (no trailing newlines)."""
    for qj in result.judgements:
        data = qj.to_dict()
        if session is not None:
            data = {"session": session, **data}
        yield json.dumps(data, separators=(",", ":"))
