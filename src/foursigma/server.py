"""Minimal Flask server for scoring sessions from the game client."""

from __future__ import annotations

import logging
import math

from flask import Flask, jsonify, request

from foursigma import __version__
from foursigma.community import CommunityStats, community_stats
from foursigma.config import Settings
from foursigma.config import settings as default_settings
from foursigma.scoring import judge, total_score
from foursigma.session import (
    IntervalError,
    SessionError,
    check_bound,
    check_interval,
    finalize_session,
    session_from_dict,
)

LOGGER = logging.getLogger(__name__)


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def _json_safe(data):
    """Replace nan/inf floats with None so responses stay valid JSON."""
    if isinstance(data, float):
        return _finite_or_none(data)
    if isinstance(data, dict):
        return {k: _json_safe(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_json_safe(v) for v in data]
    return data


def create_app(
    settings: Settings | None = None,
    community: CommunityStats | None = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        settings: Runtime settings. Defaults to values from the environment.
        community: Community stats accumulator. Defaults to the process-wide one.
    """
    settings = settings or default_settings
    app = Flask(__name__)
    app.extensions["community_stats"] = community if community is not None else community_stats
    logging.basicConfig(level=settings.log_level_number)

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = settings.cors_origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        return response

    def _bad_request(message: str):
        return jsonify({"error": message}), 400

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "version": __version__})

    @app.route("/score", methods=["POST", "OPTIONS"])
    def score():
        if request.method == "OPTIONS":
            return "", 204

        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _bad_request("Request body must be a JSON object")

        missing = [k for k in ("lower", "upper", "trueValue") if k not in data]
        if missing:
            return _bad_request(f"Missing fields: {', '.join(missing)}")

        try:
            lower, upper = check_interval(data["lower"], data["upper"])
            true_value = check_bound(data["trueValue"], "trueValue")
        except IntervalError as e:
            return _bad_request(str(e))

        return jsonify(_json_safe(judge(lower, upper, true_value).to_dict()))

    @app.route("/total", methods=["POST", "OPTIONS"])
    def total():
        if request.method == "OPTIONS":
            return "", 204

        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("scores"), list):
            return _bad_request("Provide 'scores' as a JSON list")

        try:
            scores = [check_bound(s, "score") for s in data["scores"]]
        except IntervalError as e:
            return _bad_request(str(e))

        return jsonify(_json_safe({"score": total_score(scores)}))

    @app.route("/session/finalize", methods=["POST", "OPTIONS"])
    def finalize():
        if request.method == "OPTIONS":
            return "", 204

        data = request.get_json(silent=True)
        if data is None:
            return _bad_request("Request body must be JSON")

        try:
            questions, answers = session_from_dict(data)
            result = finalize_session(
                questions, answers, community=app.extensions["community_stats"],
            )
        except (IntervalError, SessionError) as e:
            LOGGER.info("Rejected session: %s", e)
            return _bad_request(str(e))

        LOGGER.info(
            "Finalized session with %d questions, score %s",
            result.total_questions, result.score,
        )
        return jsonify(_json_safe(result.to_dict()))

    @app.route("/questions/<question_id>/stats", methods=["GET"])
    def question_stats(question_id: str):
        stats = app.extensions["community_stats"].get(question_id)
        if stats is None:
            return jsonify({"error": f"No scores recorded for {question_id!r}"}), 404
        return jsonify(_json_safe(stats.to_dict()))

    return app
