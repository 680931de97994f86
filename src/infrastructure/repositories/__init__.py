import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database

from src.domain.repositories import (
    IQuestionRepository,
    IQuizAnalyticsRepository,
    IQuizRepository,
    IUserRepository,
)
from src.domain.models.db_models import Question, Quiz, QuizAnalytics, User, validate_trait_name
from pq_utils.logger_utils import logger
from pq_utils.retry_utils import upsert_retry

# Fields returned by the public quiz listing (plus _id)
PUBLISHED_LISTING_PROJECTION = {"title": 1, "description": 1, "tags": 1}


def ensure_indexes(db: Database) -> None:
    """Create the indexes the data model relies on. Safe to call repeatedly."""
    db.users.create_index([("email", ASCENDING)], unique=True)
    db.questions.create_index([("quizId", ASCENDING)])
    db.quizzes.create_index([("isPublished", ASCENDING)])
    db.quiz_analytics.create_index([("quizId", ASCENDING)], unique=True)
    logger.info("MongoDB indexes ensured")


class MongoQuizRepository(IQuizRepository):
    """MongoDB implementation of the quiz repository."""

    def __init__(self, db: Database):
        self.db = db
        self.collection = self.db.quizzes

    def get_by_id(self, quiz_id: str) -> Optional[Quiz]:
        quiz_data = self.collection.find_one({"_id": quiz_id})
        if not quiz_data:
            logger.warning(
                "MongoQuizRepository.get_by_id.missing",
                extra={"quiz_id": quiz_id},
            )
            return None
        return Quiz(**quiz_data)

    def exists(self, quiz_id: str) -> bool:
        return self.collection.find_one({"_id": quiz_id}, {"_id": 1}) is not None

    def create(self, quiz: Quiz) -> None:
        self.collection.insert_one(quiz.to_dict())
        logger.info(f"Created quiz '{quiz.title}' with ID: {quiz.id}")

    def list_published(self) -> List[Dict]:
        return list(self.collection.find({"isPublished": True}, PUBLISHED_LISTING_PROJECTION))


class MongoQuestionRepository(IQuestionRepository):
    """MongoDB implementation of the question repository."""

    def __init__(self, db: Database):
        self.db = db
        self.collection = self.db.questions

    def list_for_quiz(self, quiz_id: str) -> List[Question]:
        return [Question(**data) for data in self.collection.find({"quizId": quiz_id})]

    def create_many(self, questions: List[Question]) -> None:
        if not questions:
            return
        self.collection.insert_many([question.to_dict() for question in questions])
        logger.info(
            "MongoQuestionRepository.create_many.ok",
            extra={"quiz_id": questions[0].quiz_id, "count": len(questions)},
        )


class MongoQuizAnalyticsRepository(IQuizAnalyticsRepository):
    """MongoDB implementation of the quiz analytics repository."""

    def __init__(self, db: Database):
        self.db = db
        self.collection = self.db.quiz_analytics

    def get_by_quiz_id(self, quiz_id: str) -> Optional[QuizAnalytics]:
        data = self.collection.find_one({"quizId": quiz_id})
        if not data:
            logger.warning(
                "MongoQuizAnalyticsRepository.get_by_quiz_id.missing",
                extra={"quiz_id": quiz_id},
            )
            return None
        return QuizAnalytics(**data)

    def create(self, analytics: QuizAnalytics) -> None:
        self.collection.insert_one(analytics.to_dict())
        logger.info(f"Created analytics record for quiz {analytics.quiz_id}")

    @upsert_retry
    def increment_result(self, quiz_id: str, trait: str) -> QuizAnalytics:
        """
        Count one attempt won by ``trait`` in a single atomic update.

        The record is created on the fly when it is missing, so a quiz whose
        analytics insert failed at creation time heals on its first attempt.
        """
        validate_trait_name(trait)
        update_doc = {
            "$inc": {
                "totalAttempts": 1,
                f"resultCounts.{trait}": 1,
            },
            "$set": {"lastAttemptAt": datetime.now(timezone.utc)},
            "$setOnInsert": {"_id": str(uuid.uuid4())},
        }
        data = self.collection.find_one_and_update(
            {"quizId": quiz_id},
            update_doc,
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        logger.info(
            "MongoQuizAnalyticsRepository.increment_result.ok",
            extra={"quiz_id": quiz_id, "trait": trait},
        )
        return QuizAnalytics(**data)


class MongoUserRepository(IUserRepository):
    """MongoDB implementation of the user repository."""

    def __init__(self, db: Database):
        self.db = db
        self.collection = self.db.users

    def get_by_email(self, email: str) -> Optional[User]:
        data = self.collection.find_one({"email": email})
        if not data:
            return None
        return User(**data)

    def create(self, user: User) -> None:
        self.collection.insert_one(user.to_dict())
        logger.info(f"Created user with ID: {user.id}")
