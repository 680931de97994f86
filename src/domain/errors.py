"""
Custom application-specific exceptions.
"""

class BaseAppException(Exception):
    """Base exception for the application."""
    pass

class QuizNotFoundError(BaseAppException):
    """Raised when a quiz is not found in the database."""

    def __init__(self, quiz_id: str):
        super().__init__(f"Quiz not found: {quiz_id}")
        self.quiz_id = quiz_id

class StoreUnavailableError(BaseAppException):
    """Raised when MongoDB cannot be reached."""
    pass

class InvalidTraitError(BaseAppException, ValueError):
    """Raised for trait names that cannot be used as a result counter key."""
    pass
