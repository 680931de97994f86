from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional, Union

from .db_models import DOCUMENT_CONFIG, Number, ResultDescriptor, validate_trait_name


class AnswerPayload(BaseModel):
    """An answer as authored in a quiz creation request."""
    model_config = DOCUMENT_CONFIG

    text: str = Field(..., min_length=1)
    traits: Dict[str, Number]

    @field_validator("traits")
    @classmethod
    def _check_trait_names(cls, traits: Dict[str, Number]) -> Dict[str, Number]:
        for trait in traits:
            validate_trait_name(trait)
        return traits


class QuestionPayload(BaseModel):
    """A question as authored in a quiz creation request."""
    model_config = DOCUMENT_CONFIG

    text: str = Field(..., min_length=1)
    answers: List[AnswerPayload] = Field(default_factory=list)


class QuizCreateRequest(BaseModel):
    """Request model for the quiz creation endpoint."""
    model_config = DOCUMENT_CONFIG

    title: str = Field(..., min_length=1, description="Quiz title shown in listings.")
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    # Existing question ids are kept as references; objects become new questions
    questions: List[Union[str, QuestionPayload]] = Field(default_factory=list)
    results: List[ResultDescriptor] = Field(default_factory=list)
    is_published: bool = False
    created_by: Optional[str] = Field(None, description="Id of the authoring user.")


class SubmittedAnswer(BaseModel):
    """One (questionId, answerId) pair of a submission."""
    model_config = DOCUMENT_CONFIG

    question_id: Optional[str] = None
    answer_id: Optional[str] = None

    @field_validator("question_id", "answer_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Optional[str]:
        # Stale or malformed ids simply fail to match later on
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return None


class SubmitRequest(BaseModel):
    """Request model for the quiz submission endpoint."""
    answers: List[SubmittedAnswer]

    @field_validator("answers", mode="before")
    @classmethod
    def _drop_non_objects(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
        return value


class SubmitResponse(BaseModel):
    """Response model for a scored submission."""
    result: Optional[str]
    scores: Dict[str, Number]
