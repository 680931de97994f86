import os
import pytest
from unittest.mock import MagicMock


# Set required environment variables before any application imports
os.environ.setdefault('MONGO_URI', 'mongodb://localhost:27017/persona_quiz_test')
os.environ.setdefault('FLASK_ENV', 'testing')


@pytest.fixture
def mock_db():
    """Provides a mocked MongoDB database."""
    return MagicMock()


@pytest.fixture
def app(mock_db):
    """Create an app instance bound to the mocked database."""
    from app import create_app
    app = create_app(db_conn=mock_db)
    app.config.update({
        "TESTING": True,
    })
    yield app


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def example_question_docs():
    """
    Two questions as stored in MongoDB:
    Q1: A1 {bold: 2}, A2 {shy: 3}
    Q2: A3 {bold: 1}, A4 {shy: 1}
    """
    return [
        {
            "_id": "Q1",
            "quizId": "quiz-1",
            "text": "At a party you...",
            "answers": [
                {"_id": "A1", "text": "Start a conversation", "traits": {"bold": 2}},
                {"_id": "A2", "text": "Find a quiet corner", "traits": {"shy": 3}},
            ],
        },
        {
            "_id": "Q2",
            "quizId": "quiz-1",
            "text": "On a free weekend you...",
            "answers": [
                {"_id": "A3", "text": "Try something new", "traits": {"bold": 1}},
                {"_id": "A4", "text": "Stay home", "traits": {"shy": 1}},
            ],
        },
    ]
