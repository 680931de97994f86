from __future__ import annotations

from typing import Optional

from pymongo.database import Database

from src.infrastructure.database import db as flask_db
from src.infrastructure.repositories import MongoQuizAnalyticsRepository
from src.domain.models.db_models import QuizAnalytics
from pq_utils.logger_utils import logger


def _get_db(db_conn: Optional[Database] = None) -> Database:
    return db_conn if db_conn is not None else flask_db


def create_analytics(quiz_id: str, db_conn: Optional[Database] = None) -> QuizAnalytics:
    """Create the zeroed analytics record of a new quiz."""
    analytics = QuizAnalytics(quiz_id=quiz_id)
    MongoQuizAnalyticsRepository(_get_db(db_conn)).create(analytics)
    return analytics


def record_attempt(quiz_id: str, winning_trait: str, db_conn: Optional[Database] = None) -> QuizAnalytics:
    """
    Count one attempt of ``quiz_id`` that resulted in ``winning_trait``.

    totalAttempts, resultCounts.<trait> and lastAttemptAt change in one atomic
    MongoDB update, so concurrent submissions never lose increments. A missing
    analytics record is created rather than reported.

    :return: The analytics record after the update.
    """
    analytics = MongoQuizAnalyticsRepository(_get_db(db_conn)).increment_result(quiz_id, winning_trait)
    logger.info(
        "Recorded quiz attempt",
        extra={
            "quiz_id": quiz_id,
            "result": winning_trait,
            "total_attempts": analytics.total_attempts,
            "component": "analytics_service",
        },
    )
    return analytics


def get_analytics(quiz_id: str, db_conn: Optional[Database] = None) -> Optional[QuizAnalytics]:
    """Return the analytics record of ``quiz_id``, or None if there is none."""
    return MongoQuizAnalyticsRepository(_get_db(db_conn)).get_by_quiz_id(quiz_id)
