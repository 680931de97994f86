import pytest
from pymongo.errors import AutoReconnect


def _analytics_doc(trait, total=1):
    return {
        "_id": "analytics-1",
        "quizId": "quiz-1",
        "totalAttempts": total,
        "resultCounts": {trait: total},
    }


class TestCreateQuiz:
    """Tests for POST /api/quizzes."""

    def test_create_quiz_success(self, client, mock_db):
        response = client.post('/api/quizzes', json={
            "title": "Bold or shy?",
            "tags": ["personality"],
            "questions": [
                {"text": "At a party you...", "answers": [{"text": "Talk", "traits": {"bold": 2}}]},
            ],
        })

        assert response.status_code == 201
        body = response.json
        assert body["title"] == "Bold or shy?"
        assert body["isPublished"] is False
        assert body["_id"]
        created = body["createdQuestions"][0]
        assert body["questions"] == [created["_id"]]
        assert created["quizId"] == body["_id"]
        assert created["answers"][0]["traits"] == {"bold": 2}
        mock_db.quiz_analytics.insert_one.assert_called_once()

    def test_create_quiz_with_question_ids(self, client, mock_db):
        """A Quiz-shaped body referencing existing questions by id."""
        response = client.post('/api/quizzes', json={"title": "T", "questions": ["q-1", "q-2"]})

        assert response.status_code == 201
        assert response.json["questions"] == ["q-1", "q-2"]
        assert response.json["createdQuestions"] == []
        mock_db.questions.insert_many.assert_not_called()
        stored_quiz = mock_db.quizzes.insert_one.call_args[0][0]
        assert stored_quiz["questions"] == ["q-1", "q-2"]

    def test_create_quiz_mixing_ids_and_inline_questions(self, client, mock_db):
        response = client.post('/api/quizzes', json={
            "title": "T",
            "questions": [
                "q-1",
                {"text": "New one", "answers": [{"text": "Yes", "traits": {"bold": 1}}]},
            ],
        })

        assert response.status_code == 201
        new_id = response.json["createdQuestions"][0]["_id"]
        assert response.json["questions"] == ["q-1", new_id]
        assert len(mock_db.questions.insert_many.call_args[0][0]) == 1

    @pytest.mark.parametrize("points", ["NaN", "Infinity", "-Infinity"])
    def test_create_quiz_rejects_non_finite_points(self, client, mock_db, points):
        body = (
            '{"title": "T", "questions": [{"text": "Q", "answers": '
            '[{"text": "A", "traits": {"bold": ' + points + '}}]}]}'
        )

        response = client.post('/api/quizzes', data=body, content_type='application/json')

        assert response.status_code == 400
        assert "traits" in response.json["error"]
        mock_db.quizzes.insert_one.assert_not_called()

    def test_create_quiz_missing_title(self, client, mock_db):
        response = client.post('/api/quizzes', json={"description": "No title"})

        assert response.status_code == 400
        assert "title" in response.json["error"]
        mock_db.quizzes.insert_one.assert_not_called()

    def test_create_quiz_requires_json_object(self, client):
        response = client.post('/api/quizzes', data="not json", content_type='text/plain')

        assert response.status_code == 400
        assert 'error' in response.json

    def test_create_quiz_persistence_failure(self, client, mock_db):
        mock_db.quiz_analytics.insert_one.side_effect = AutoReconnect("connection lost")

        response = client.post('/api/quizzes', json={"title": "Quiz"})

        assert response.status_code == 400
        assert "connection lost" in response.json["error"]


class TestListQuizzes:
    """Tests for GET /api/quizzes."""

    def test_lists_only_published(self, client, mock_db):
        mock_db.quizzes.find.return_value = [
            {"_id": "quiz-1", "title": "Published", "description": "Yes", "tags": ["a"]},
        ]

        response = client.get('/api/quizzes')

        assert response.status_code == 200
        assert response.json == [{"_id": "quiz-1", "title": "Published", "description": "Yes", "tags": ["a"]}]
        assert mock_db.quizzes.find.call_args[0][0] == {"isPublished": True}

    def test_store_error_returns_503(self, client, mock_db):
        mock_db.quizzes.find.side_effect = AutoReconnect("connection lost")

        response = client.get('/api/quizzes')

        assert response.status_code == 503


class TestGetQuiz:
    """Tests for GET /api/quizzes/<id>."""

    def test_published_quiz_without_traits(self, client, mock_db, example_question_docs):
        mock_db.quizzes.find_one.return_value = {
            "_id": "quiz-1",
            "title": "Bold or shy?",
            "isPublished": True,
            "questions": ["Q1", "Q2"],
        }
        mock_db.questions.find.return_value = example_question_docs

        response = client.get('/api/quizzes/quiz-1')

        assert response.status_code == 200
        answers = response.json["questions"][0]["answers"]
        assert answers == [
            {"_id": "A1", "text": "Start a conversation"},
            {"_id": "A2", "text": "Find a quiet corner"},
        ]

    def test_unpublished_quiz_is_not_found(self, client, mock_db):
        mock_db.quizzes.find_one.return_value = {"_id": "quiz-1", "title": "Draft", "isPublished": False}

        response = client.get('/api/quizzes/quiz-1')

        assert response.status_code == 404
        assert response.json == {"error": "Quiz not found"}


class TestSubmitQuiz:
    """Tests for POST /api/quizzes/<id>/submit."""

    def test_bold_result(self, client, mock_db, example_question_docs):
        mock_db.quizzes.find_one.return_value = {"_id": "quiz-1"}
        mock_db.questions.find.return_value = example_question_docs
        mock_db.quiz_analytics.find_one_and_update.return_value = _analytics_doc("bold")

        response = client.post('/api/quizzes/quiz-1/submit', json={
            "answers": [{"questionId": "Q1", "answerId": "A1"}, {"questionId": "Q2", "answerId": "A4"}]
        })

        assert response.status_code == 200
        assert response.json == {"result": "bold", "scores": {"bold": 2, "shy": 1}}
        update = mock_db.quiz_analytics.find_one_and_update.call_args[0][1]
        assert update["$inc"] == {"totalAttempts": 1, "resultCounts.bold": 1}

    def test_scores_keep_contribution_order(self, client, mock_db, example_question_docs):
        mock_db.quizzes.find_one.return_value = {"_id": "quiz-1"}
        mock_db.questions.find.return_value = example_question_docs
        mock_db.quiz_analytics.find_one_and_update.return_value = _analytics_doc("shy")

        response = client.post('/api/quizzes/quiz-1/submit', json={
            "answers": [{"questionId": "Q2", "answerId": "A3"}, {"questionId": "Q1", "answerId": "A2"}]
        })

        assert response.json["result"] == "shy"
        assert list(response.json["scores"].items()) == [("shy", 3), ("bold", 1)]

    def test_malformed_pairs_are_ignored(self, client, mock_db, example_question_docs):
        mock_db.quizzes.find_one.return_value = {"_id": "quiz-1"}
        mock_db.questions.find.return_value = example_question_docs
        mock_db.quiz_analytics.find_one_and_update.return_value = _analytics_doc("shy")

        response = client.post('/api/quizzes/quiz-1/submit', json={
            "answers": [
                {"questionId": "Q1", "answerId": "stale"},
                {"questionId": 42, "answerId": None},
                "garbage",
                {"questionId": "Q2", "answerId": "A4"},
            ]
        })

        assert response.status_code == 200
        assert response.json == {"result": "shy", "scores": {"shy": 1}}

    def test_nothing_scored_is_not_recorded(self, client, mock_db, example_question_docs):
        mock_db.quizzes.find_one.return_value = {"_id": "quiz-1"}
        mock_db.questions.find.return_value = example_question_docs

        response = client.post('/api/quizzes/quiz-1/submit', json={"answers": []})

        assert response.status_code == 200
        assert response.json == {"result": None, "scores": {}}
        mock_db.quiz_analytics.find_one_and_update.assert_not_called()

    def test_unknown_quiz(self, client, mock_db):
        mock_db.quizzes.find_one.return_value = None

        response = client.post('/api/quizzes/missing/submit', json={"answers": []})

        assert response.status_code == 404
        assert response.json == {"error": "Quiz not found"}
        mock_db.questions.find.assert_not_called()

    def test_missing_answers(self, client, mock_db):
        response = client.post('/api/quizzes/quiz-1/submit', json={"choices": []})

        assert response.status_code == 400
        assert "answers" in response.json["error"]


class TestQuizAnalytics:
    """Tests for GET /api/quizzes/<id>/analytics."""

    def test_returns_counters(self, client, mock_db):
        mock_db.quiz_analytics.find_one.return_value = _analytics_doc("bold", total=2)

        response = client.get('/api/quizzes/quiz-1/analytics')

        assert response.status_code == 200
        assert response.json["totalAttempts"] == 2
        assert response.json["resultCounts"] == {"bold": 2}
        assert response.json["lastAttemptAt"] is None

    def test_unknown_quiz(self, client, mock_db):
        mock_db.quiz_analytics.find_one.return_value = None
        mock_db.quizzes.find_one.return_value = None

        response = client.get('/api/quizzes/missing/analytics')

        assert response.status_code == 404
        assert response.json == {"error": "Quiz not found"}
