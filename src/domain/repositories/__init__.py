from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from ..models.db_models import Question, Quiz, QuizAnalytics, User

class IQuizRepository(ABC):
    """Interface for a quiz repository."""
    @abstractmethod
    def get_by_id(self, quiz_id: str) -> Optional[Quiz]:
        pass

    @abstractmethod
    def create(self, quiz: Quiz) -> None:
        pass

    @abstractmethod
    def list_published(self) -> List[Dict]:
        pass

class IQuestionRepository(ABC):
    """Interface for a question repository."""
    @abstractmethod
    def list_for_quiz(self, quiz_id: str) -> List[Question]:
        pass

    @abstractmethod
    def create_many(self, questions: List[Question]) -> None:
        pass

class IQuizAnalyticsRepository(ABC):
    """Interface for a quiz analytics repository."""
    @abstractmethod
    def get_by_quiz_id(self, quiz_id: str) -> Optional[QuizAnalytics]:
        pass

    @abstractmethod
    def create(self, analytics: QuizAnalytics) -> None:
        pass

    @abstractmethod
    def increment_result(self, quiz_id: str, trait: str) -> QuizAnalytics:
        pass

class IUserRepository(ABC):
    """Interface for a user repository."""
    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def create(self, user: User) -> None:
        pass
