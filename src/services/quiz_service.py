"""
Quiz catalog: creating quizzes and serving the published ones.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pymongo.database import Database

from src.infrastructure.database import db as flask_db
from src.infrastructure.repositories import MongoQuestionRepository, MongoQuizRepository
from src.domain.errors import QuizNotFoundError
from src.domain.models.api_models import QuizCreateRequest
from src.domain.models.db_models import Answer, Question, Quiz
from src.services import analytics_service
from pq_utils.logger_utils import logger


def _get_db(db_conn: Optional[Database] = None) -> Database:
    return db_conn if db_conn is not None else flask_db


def create_quiz(payload: Dict[str, Any], db_conn: Optional[Database] = None) -> Tuple[Quiz, List[Question]]:
    """
    Create a quiz with its questions and its empty analytics record.

    The quiz, its questions and the analytics record are three separate
    writes; nothing rolls back the earlier ones if a later one fails.

    Items of ``questions`` that are plain ids are stored as references as
    they are; inline question objects are created as Question documents.

    :param payload: Raw request body; validated against QuizCreateRequest.
    :raises pydantic.ValidationError: If the payload is invalid.
    :return: The stored quiz and the questions created for it, in authored order.
    """
    db = _get_db(db_conn)
    request = QuizCreateRequest.model_validate(payload)

    quiz = Quiz(
        title=request.title,
        description=request.description,
        tags=request.tags,
        results=request.results,
        is_published=request.is_published,
        created_by=request.created_by,
    )
    questions: List[Question] = []
    for item in request.questions:
        if isinstance(item, str):
            quiz.questions.append(item)
            continue
        question = Question(
            quiz_id=quiz.id,
            text=item.text,
            answers=[Answer(text=answer.text, traits=answer.traits) for answer in item.answers],
        )
        questions.append(question)
        quiz.questions.append(question.id)

    MongoQuizRepository(db).create(quiz)
    MongoQuestionRepository(db).create_many(questions)
    analytics_service.create_analytics(quiz.id, db_conn=db)

    logger.info(
        "Created quiz",
        extra={
            "quiz_id": quiz.id,
            "questions": len(quiz.questions),
            "created_questions": len(questions),
            "published": quiz.is_published,
            "component": "quiz_service",
        },
    )
    return quiz, questions


def list_published(db_conn: Optional[Database] = None) -> List[Dict[str, Any]]:
    """Published quizzes reduced to _id, title, description and tags."""
    return MongoQuizRepository(_get_db(db_conn)).list_published()


def quiz_exists(quiz_id: str, db_conn: Optional[Database] = None) -> bool:
    return MongoQuizRepository(_get_db(db_conn)).exists(quiz_id)


def get_published_quiz(quiz_id: str, db_conn: Optional[Database] = None) -> Tuple[Quiz, List[Question]]:
    """
    Load a published quiz and its questions in the quiz's order.

    :raises QuizNotFoundError: If the quiz is missing or not published.
    """
    db = _get_db(db_conn)
    quiz = MongoQuizRepository(db).get_by_id(quiz_id)
    if quiz is None or not quiz.is_published:
        raise QuizNotFoundError(quiz_id)

    by_id = {question.id: question for question in MongoQuestionRepository(db).list_for_quiz(quiz_id)}
    ordered = [by_id[question_id] for question_id in quiz.questions if question_id in by_id]
    return quiz, ordered


def to_public_dict(quiz: Quiz, questions: List[Question]) -> Dict[str, Any]:
    """Quiz as shown to players: answers without their trait weights."""
    data = quiz.model_dump(by_alias=True, mode="json")
    data["questions"] = [
        {
            "_id": question.id,
            "text": question.text,
            "answers": [{"_id": answer.id, "text": answer.text} for answer in question.answers],
        }
        for question in questions
    ]
    return data
