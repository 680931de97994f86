import uuid
from pydantic import BaseModel, Field, ConfigDict, FiniteFloat, PrivateAttr, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Dict, Union
from datetime import datetime, timezone
from enum import Enum

from src.domain.errors import InvalidTraitError

# Trait points may be fractional but must be finite; ints stay ints so scores render as authored
Number = Union[int, FiniteFloat]


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


def _utc_now():
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def validate_trait_name(trait: str) -> str:
    """
    Trait names end up as field paths (``resultCounts.<trait>``) in MongoDB
    updates, so they must be non-empty and free of '.' and a leading '$'.
    """
    if not trait:
        raise InvalidTraitError("Trait name must not be empty")
    if "." in trait or trait.startswith("$"):
        raise InvalidTraitError(f"Trait name '{trait}' may not contain '.' or start with '$'")
    return trait


# Stored and serialized with camelCase keys (quizId, isPublished, ...)
DOCUMENT_CONFIG = ConfigDict(
    populate_by_name=True,
    alias_generator=to_camel,
    use_enum_values=True,
)


class User(BaseModel):
    """User model, kept for future authentication."""
    model_config = DOCUMENT_CONFIG

    id: str = Field(default_factory=_new_id, alias="_id")
    email: str
    password_hash: str
    role: UserRole = UserRole.USER

    def to_dict(self):
        """Convert model to dictionary for MongoDB."""
        return self.model_dump(by_alias=True)


class Answer(BaseModel):
    """An answer embedded in a question, weighted towards one or more traits."""
    model_config = DOCUMENT_CONFIG

    id: str = Field(default_factory=_new_id, alias="_id")
    text: str = Field(..., min_length=1)
    traits: Dict[str, Number]

    @field_validator("traits")
    @classmethod
    def _check_trait_names(cls, traits: Dict[str, Number]) -> Dict[str, Number]:
        for trait in traits:
            validate_trait_name(trait)
        return traits


class Question(BaseModel):
    """A question of a quiz. Answers live inside the question document."""
    model_config = DOCUMENT_CONFIG

    id: str = Field(default_factory=_new_id, alias="_id")
    quiz_id: str
    text: str = Field(..., min_length=1)
    answers: List[Answer] = Field(default_factory=list)

    _answer_index: Optional[Dict[str, int]] = PrivateAttr(default=None)

    def find_answer(self, answer_id: Optional[str]) -> Optional[Answer]:
        """Look up an embedded answer by id; the id index is built on first use."""
        if self._answer_index is None:
            index: Dict[str, int] = {}
            for position, answer in enumerate(self.answers):
                index.setdefault(answer.id, position)
            self._answer_index = index

        position = self._answer_index.get(answer_id)
        if position is None:
            return None
        return self.answers[position]

    def to_dict(self):
        """Convert model to dictionary for MongoDB."""
        return self.model_dump(by_alias=True)


class ResultDescriptor(BaseModel):
    """Describes the outcome shown for a winning trait."""
    model_config = DOCUMENT_CONFIG

    trait: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class Quiz(BaseModel):
    """A quiz; its questions are stored separately and referenced by id."""
    model_config = DOCUMENT_CONFIG

    id: str = Field(default_factory=_new_id, alias="_id")
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    questions: List[str] = Field(default_factory=list)  # Question ids, in order
    results: List[ResultDescriptor] = Field(default_factory=list)
    is_published: bool = False
    created_by: Optional[str] = None  # User id
    created_at: datetime = Field(default_factory=_utc_now)

    def to_dict(self):
        """Convert model to dictionary for MongoDB."""
        return self.model_dump(by_alias=True)


class QuizAnalytics(BaseModel):
    """Running attempt counters for one quiz."""
    model_config = DOCUMENT_CONFIG

    id: str = Field(default_factory=_new_id, alias="_id")
    quiz_id: str
    total_attempts: int = 0
    result_counts: Dict[str, int] = Field(default_factory=dict)
    last_attempt_at: Optional[datetime] = None

    def to_dict(self):
        """Convert model to dictionary for MongoDB."""
        return self.model_dump(by_alias=True)
