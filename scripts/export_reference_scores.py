#!/usr/bin/env python3
"""Export reference interval scores for the web client.

The client previews scores with its own copy of the formula. This writes the
server's results for a fixed set of intervals so the client test suite can
check that both sides agree.

Usage:
    python scripts/export_reference_scores.py
    python scripts/export_reference_scores.py --output ./client/fixtures
    python scripts/export_reference_scores.py --corpus tests/corpus/reference_intervals.yaml
"""

from __future__ import annotations

import argparse
import json
import math
import sys
from datetime import datetime, timezone
from pathlib import Path

import yaml

# Add src to path so we can import foursigma without installing
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from foursigma import __version__  # noqa: E402
from foursigma.scoring import judge  # noqa: E402

DEFAULT_CORPUS = (
    Path(__file__).resolve().parent.parent / "tests" / "corpus" / "reference_intervals.yaml"
)


def load_cases(path: Path) -> list[dict]:
    with open(path) as f:
        data = yaml.safe_load(f)
    return data["entries"]


def score_case(case: dict) -> dict:
    """Score one corpus entry and return a fixture record."""
    judgement = judge(case["lower"], case["upper"], case["true_value"])
    score = judgement.score if math.isfinite(judgement.score) else None
    return {
        "id": case["id"],
        "lower": case["lower"],
        "upper": case["upper"],
        "trueValue": case["true_value"],
        "hit": judgement.hit,
        "score": score,
        # keeps nan and inf, which JSON cannot carry
        "scoreRepr": repr(judgement.score),
    }


def main():
    parser = argparse.ArgumentParser(description="Export reference scores for client parity tests")
    parser.add_argument("--output", "-o", default="reference",
                        help="Output directory (default: reference)")
    parser.add_argument("--corpus", "-c", default=str(DEFAULT_CORPUS),
                        help="YAML file of intervals to score")
    args = parser.parse_args()

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    cases = load_cases(Path(args.corpus))
    records = []
    for case in cases:
        print(f"  Scoring: {case['id']}...")
        records.append(score_case(case))

    payload = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "entry_count": len(records),
        "entries": records,
    }

    out_path = output_dir / "reference_scores.json"
    with open(out_path, "w") as f:
        json.dump(payload, f, indent=2)
    print(f"Wrote {out_path} with {len(records)} entries")


if __name__ == "__main__":
    main()
