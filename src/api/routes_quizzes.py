from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from src.domain.errors import QuizNotFoundError, StoreUnavailableError
from src.domain.models.api_models import SubmitRequest, SubmitResponse
from src.infrastructure.database import ensure_available
from src.services import analytics_service, quiz_service, scoring_service
from pq_utils.logger_utils import logger

quizzes_bp = Blueprint('quizzes_bp', __name__)

NOT_A_JSON_OBJECT = "Request body must be a JSON object"


def validation_message(error: ValidationError) -> str:
    """Flatten pydantic errors into one line, e.g. 'title: Field required'."""
    parts = []
    for err in error.errors(include_url=False):
        location = ".".join(str(part) for part in err["loc"]) or "body"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


def _json_object() -> Optional[Dict[str, Any]]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


@quizzes_bp.before_request
def require_store() -> None:
    ensure_available()


@quizzes_bp.errorhandler(StoreUnavailableError)
def handle_store_unavailable(error: StoreUnavailableError) -> Tuple[Response, int]:
    return jsonify({"error": str(error)}), 503


@quizzes_bp.errorhandler(PyMongoError)
def handle_store_error(error: PyMongoError) -> Tuple[Response, int]:
    logger.error(f"MongoDB error for path {request.path}: {error}", exc_info=True)
    return jsonify({"error": "Database error, please retry later"}), 503


@quizzes_bp.errorhandler(QuizNotFoundError)
def handle_quiz_not_found(error: QuizNotFoundError) -> Tuple[Response, int]:
    logger.warning("Quiz not found", extra={"quiz_id": error.quiz_id, "path": request.path})
    return jsonify({"error": "Quiz not found"}), 404


@quizzes_bp.route('', methods=['POST'])
def create_quiz_route():
    """Creates a quiz, its questions and its analytics record."""
    data = _json_object()
    if data is None:
        return jsonify({"error": NOT_A_JSON_OBJECT}), 400

    try:
        quiz, questions = quiz_service.create_quiz(data)
    except ValidationError as e:
        return jsonify({"error": validation_message(e)}), 400
    except PyMongoError as e:
        logger.error(f"Failed to create quiz: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 400

    body = quiz.model_dump(by_alias=True, mode="json")
    # questions stays the list of ids; documents created inline are returned alongside
    body["createdQuestions"] = [question.model_dump(by_alias=True, mode="json") for question in questions]
    return jsonify(body), 201


@quizzes_bp.route('', methods=['GET'])
def list_quizzes_route():
    """Lists published quizzes (_id, title, description, tags)."""
    return jsonify(quiz_service.list_published()), 200


@quizzes_bp.route('/<string:quiz_id>', methods=['GET'])
def get_quiz_route(quiz_id: str):
    """Serves a published quiz for playing; trait weights stay server side."""
    quiz, questions = quiz_service.get_published_quiz(quiz_id)
    return jsonify(quiz_service.to_public_dict(quiz, questions)), 200


@quizzes_bp.route('/<string:quiz_id>/submit', methods=['POST'])
def submit_quiz_route(quiz_id: str):
    """
    Scores a submission and counts the winning trait in the quiz analytics.

    A submission that scores no trait at all answers ``result: null`` and is
    not counted.
    """
    data = _json_object()
    if data is None:
        return jsonify({"error": NOT_A_JSON_OBJECT}), 400

    try:
        submission = SubmitRequest.model_validate(data)
    except ValidationError as e:
        return jsonify({"error": validation_message(e)}), 400

    if not quiz_service.quiz_exists(quiz_id):
        raise QuizNotFoundError(quiz_id)

    winner, scores = scoring_service.score_submission(quiz_id, submission.answers)
    if winner is None:
        logger.info("Submission scored no traits, not recorded", extra={"quiz_id": quiz_id})
    else:
        analytics_service.record_attempt(quiz_id, winner)

    return jsonify(SubmitResponse(result=winner, scores=scores).model_dump()), 200


@quizzes_bp.route('/<string:quiz_id>/analytics', methods=['GET'])
def get_analytics_route(quiz_id: str):
    """Returns the running attempt counters of a quiz."""
    analytics = analytics_service.get_analytics(quiz_id)
    if analytics is None:
        if not quiz_service.quiz_exists(quiz_id):
            raise QuizNotFoundError(quiz_id)
        return jsonify({"error": "Analytics not found"}), 404
    return jsonify(analytics.model_dump(by_alias=True, mode="json")), 200
