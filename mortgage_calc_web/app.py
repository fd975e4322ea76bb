"""Flask JSON API for the mortgage calculator.

Routes (under ``API_PREFIX``, ``/api`` by default):

* ``POST /mortgage/calculate`` - EMI, totals, ratios and a 12 month schedule.
* ``POST /mortgage/compare`` - headline numbers of several scenarios.
* ``GET|POST|DELETE /mortgage/scenarios`` - calculations saved per browser.
* ``GET /health`` - liveness check.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional
from uuid import uuid4

from flask import Blueprint, Flask, current_app, jsonify, request, session
from werkzeug.exceptions import HTTPException

from mortgage_calc.engine import amortize, compare_scenarios
from mortgage_calc.errors import ComputationError, InvalidInputError
from mortgage_calc.payloads import amortization_payload, comparison_payload, request_payload
from mortgage_calc.validation import parse_loan_request, parse_scenarios
from mortgage_calc_web.scenario_store import ScenarioStore, create_store

logger = logging.getLogger(__name__)

mortgage = Blueprint("mortgage", __name__)


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _json_body() -> Dict[str, Any]:
    """Return the JSON object sent by the client; anything else counts as empty."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _store() -> ScenarioStore:
    return current_app.extensions["scenario_store"]


def _failure(message: str, exc: Exception, status: int = 500):
    return jsonify({"success": False, "message": message, "error": str(exc)}), status


@mortgage.post("/calculate")
def calculate():
    try:
        loan = parse_loan_request(_json_body())
    except InvalidInputError as exc:
        logger.info("Rejected mortgage calculation: %s", exc)
        return jsonify({"errors": exc.as_dicts()}), 400

    try:
        result = amortize(loan)
    except ComputationError as exc:
        logger.exception("Mortgage calculation error")
        return _failure("Failed to calculate mortgage", exc)

    return jsonify({"success": True, "results": amortization_payload(result)})


@mortgage.post("/compare")
def compare():
    scenarios = _json_body().get("scenarios")
    if not isinstance(scenarios, list):
        return jsonify({"success": False, "message": "Scenarios array is required"}), 400

    try:
        loans = parse_scenarios(scenarios)
    except InvalidInputError as exc:
        logger.info("Rejected mortgage comparison: %s", exc)
        return jsonify({"success": False, "message": "Invalid scenarios", "errors": exc.as_dicts()}), 400

    try:
        comparison = compare_scenarios(loans)
    except ComputationError as exc:
        logger.exception("Mortgage comparison error")
        return _failure("Failed to compare mortgages", exc)

    return jsonify({"success": True, "comparisons": comparison_payload(comparison)})


@mortgage.get("/scenarios")
def list_scenarios():
    user_token = _ensure_user_token()
    return jsonify({"success": True, "scenarios": _store().list_scenarios(user_token)})


@mortgage.post("/scenarios")
def save_scenario():
    user_token = _ensure_user_token()
    try:
        loan = parse_loan_request(_json_body())
    except InvalidInputError as exc:
        return jsonify({"errors": exc.as_dicts()}), 400

    try:
        result = amortize(loan)
    except ComputationError as exc:
        logger.exception("Mortgage calculation error")
        return _failure("Failed to calculate mortgage", exc)

    saved = _store().add_scenario(
        user_token,
        uuid4().hex,
        loan.name or "Scenario",
        request_payload(loan),
        amortization_payload(result),
    )
    return jsonify({"success": True, "scenario": saved}), 201


@mortgage.get("/scenarios/<scenario_id>")
def get_scenario(scenario_id: str):
    saved = _store().get_scenario(session.get("user_token"), scenario_id)
    if saved is None:
        return jsonify({"success": False, "message": "Scenario not found"}), 404
    return jsonify({"success": True, "scenario": saved})


@mortgage.delete("/scenarios/<scenario_id>")
def remove_scenario(scenario_id: str):
    if not _store().remove_scenario(session.get("user_token"), scenario_id):
        return jsonify({"success": False, "message": "Scenario not found"}), 404
    return jsonify({"success": True})


@mortgage.delete("/scenarios")
def clear_scenarios():
    removed = _store().clear_scenarios(session.get("user_token"))
    return jsonify({"success": True, "removed": removed})


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def not_found(exc):
        return jsonify({"message": "Route not found"}), 404

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException):
        return jsonify({"message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def unhandled_error(exc: Exception):
        logger.exception("Unhandled error while serving %s", request.path)
        body = {"message": "Something went wrong!", "error": str(exc) if app.debug else None}
        return jsonify(body), 500


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("FLASK_SECRET_KEY", "dev-secret-key"),
        SCENARIO_DATABASE_URL=os.environ.get("SCENARIO_DATABASE_URL"),
        SCENARIO_MAX_PER_USER=int(os.environ.get("SCENARIO_MAX_PER_USER", "10")),
        API_PREFIX=os.environ.get("API_PREFIX", "/api"),
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
    )
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(level=app.config["LOG_LEVEL"])
    app.extensions["scenario_store"] = create_store(
        app.config["SCENARIO_DATABASE_URL"], max_per_user=app.config["SCENARIO_MAX_PER_USER"]
    )

    prefix = app.config["API_PREFIX"].rstrip("/")
    app.register_blueprint(mortgage, url_prefix=f"{prefix}/mortgage")

    @app.get(f"{prefix}/health")
    def health():
        return jsonify(
            {
                "status": "ok",
                "message": "Mortgage calculator API is running",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    _register_error_handlers(app)
    return app


if __name__ == "__main__":
    port = int(os.environ.get("PORT", "5000"))
    application = create_app()
    logger.info("Starting mortgage calculator API on port %d", port)
    application.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG") == "1")
