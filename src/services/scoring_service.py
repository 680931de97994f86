"""
Scoring engine: turns a submission into per-trait scores and a winning trait.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pymongo.database import Database

from src.infrastructure.database import db as flask_db
from src.infrastructure.repositories import MongoQuestionRepository
from src.domain.models.api_models import SubmittedAnswer
from src.domain.models.db_models import Number, Question
from pq_utils.logger_utils import logger


def _get_db(db_conn: Optional[Database] = None) -> Database:
    return db_conn if db_conn is not None else flask_db


def compute_scores(
    questions: Iterable[Question],
    submitted: Sequence[SubmittedAnswer],
) -> Dict[str, Number]:
    """
    Sum the trait points of every answered question.

    Questions without a matching submission, and submissions pointing at an
    unknown answer, contribute nothing. The returned dict keeps traits in the
    order they first received points.
    """
    scores: Dict[str, Number] = {}

    for question in questions:
        choice = next((s for s in submitted if s.question_id == question.id), None)
        if choice is None:
            continue

        answer = question.find_answer(choice.answer_id)
        if answer is None:
            continue

        for trait, points in answer.traits.items():
            scores[trait] = scores.get(trait, 0) + points

    return scores


def pick_winner(scores: Dict[str, Number]) -> Optional[str]:
    """
    Return the trait with the highest score, or None when nothing scored.

    Only a strictly greater score replaces the current holder, so on a tie
    the trait that was inserted first wins.
    """
    winner: Optional[str] = None
    for trait, points in scores.items():
        if winner is None or points > scores[winner]:
            winner = trait
    return winner


def score_answers(
    questions: List[Question],
    submitted: Sequence[SubmittedAnswer],
) -> Tuple[Optional[str], Dict[str, Number]]:
    scores = compute_scores(questions, submitted)
    return pick_winner(scores), scores


def score_submission(
    quiz_id: str,
    submitted: Sequence[SubmittedAnswer],
    db_conn: Optional[Database] = None,
) -> Tuple[Optional[str], Dict[str, Number]]:
    """
    Fetch the questions of ``quiz_id`` and score ``submitted`` against them.

    :return: (winning trait or None, scores by trait)
    """
    questions = MongoQuestionRepository(_get_db(db_conn)).list_for_quiz(quiz_id)
    winner, scores = score_answers(questions, submitted)

    logger.info(
        "Scored submission",
        extra={
            "quiz_id": quiz_id,
            "questions": len(questions),
            "submitted": len(submitted),
            "result": winner,
            "component": "scoring_service",
        },
    )
    return winner, scores
