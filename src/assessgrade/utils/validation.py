"""
Input Validation Utilities

Validation of question payloads coming from the question generator and
loading of question/answer files, with errors mapped to ValidationError.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import ValidationError
from ..evaluation.types import Question, QuestionType
from .logging import get_logger

logger = get_logger(__name__)

GroundTruthPayload = Optional[Union[str, List[Union[None, str, List[Optional[str]]]]]]


class QuestionDataModel(BaseModel):
    """Pydantic model for validating generated question data."""

    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    id: str
    type: QuestionType
    topic: str = "General"
    prompt: str = Field(validation_alias=AliasChoices('prompt', 'question', 'sentence'))
    marks: float = 1.0
    options: List[str] = Field(default_factory=list)
    answer_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices('answer_key', 'answerKey', 'correctAnswer')
    )
    keywords: GroundTruthPayload = None
    acceptable: GroundTruthPayload = None
    accepted_answers: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices('accepted_answers', 'acceptedAnswers')
    )
    case_sensitive: bool = Field(
        default=False, validation_alias=AliasChoices('case_sensitive', 'caseSensitive')
    )

    @field_validator('id', 'prompt')
    @classmethod
    def validate_not_blank(cls, v):
        """Identifiers and prompt text must carry content."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator('id', 'answer_key', mode='before')
    @classmethod
    def coerce_scalar(cls, v):
        """Numeric ids and keys (e.g. option index 2) are kept as text."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('keywords', 'acceptable', 'options', 'accepted_answers', mode='before')
    @classmethod
    def coerce_terms(cls, v):
        """Numeric terms (years, counts) are compared as text."""
        def to_text(item):
            if isinstance(item, list):
                return [to_text(member) for member in item]
            if isinstance(item, (int, float)) and not isinstance(item, bool):
                return str(item)
            return item
        return to_text(v) if isinstance(v, (list, int, float)) and not isinstance(v, bool) else v

    @field_validator('case_sensitive', mode='before')
    @classmethod
    def coerce_case_sensitive(cls, v):
        if v is None:
            return False
        if isinstance(v, str):
            return v.strip().lower() in ('1', 'true', 'yes')
        return v

    @field_validator('marks')
    @classmethod
    def validate_marks(cls, v):
        """Marks weight answers in the weighted score."""
        if v < 0:
            raise ValueError("marks must be non-negative")
        return v

    @field_validator('topic', mode='before')
    @classmethod
    def default_topic(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return "General"
        return v.strip() if isinstance(v, str) else v

    def to_question(self) -> Question:
        return Question(
            id=self.id,
            type=self.type,
            topic=self.topic,
            prompt=self.prompt,
            marks=self.marks,
            options=tuple(self.options),
            answer_key=self.answer_key,
            keywords=self.keywords,
            acceptable=self.acceptable,
            accepted_answers=tuple(self.accepted_answers),
            case_sensitive=self.case_sensitive
        )


def validate_question_data(data: Dict[str, Any]) -> Question:
    """
    Validate a raw question payload.

    Args:
        data: Question dictionary (snake_case or camelCase keys)

    Returns:
        Immutable Question

    Raises:
        ValidationError: If the payload is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Question data must be a mapping", invalid_value=data)

    try:
        return QuestionDataModel.model_validate(data).to_question()
    except PydanticValidationError as e:
        first = e.errors()[0]
        field_name = '.'.join(str(part) for part in first.get('loc', ())) or None
        raise ValidationError(
            f"Invalid question {data.get('id', '<unknown>')}: {first.get('msg')}",
            field_name=field_name,
            invalid_value=first.get('input')
        ) from e


def _read_structured_file(path: Path) -> Any:
    """Read a YAML or JSON document."""
    path = Path(path)
    if not path.exists():
        raise ValidationError(f"File not found: {path}", field_name="path", invalid_value=str(path))

    with open(path, 'r', encoding='utf-8') as f:
        try:
            if path.suffix.lower() == '.json':
                return json.load(f)
            return yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValidationError(f"Could not parse {path}: {e}",
                                  field_name="path", invalid_value=str(path)) from e


def load_questions(path: Union[str, Path]) -> List[Question]:
    """
    Load and validate questions from a YAML/JSON file.

    The document is either a list of questions or a mapping with a
    ``questions`` list.
    """
    document = _read_structured_file(Path(path))
    if isinstance(document, dict):
        document = document.get('questions')
    if not isinstance(document, list):
        raise ValidationError(f"{path} must contain a list of questions", field_name="questions")

    questions = [validate_question_data(item) for item in document]
    seen = set()
    for question in questions:
        if question.id in seen:
            raise ValidationError(f"Duplicate question id: {question.id}",
                                  field_name="id", invalid_value=question.id)
        seen.add(question.id)

    logger.info(f"Loaded {len(questions)} questions from {path}")
    return questions


def load_answers(path: Union[str, Path]) -> Dict[str, Union[str, List[str]]]:
    """
    Load submitted answers keyed by question id.

    Values are a string, or a list of strings for multi-blank questions.
    """
    document = _read_structured_file(Path(path))
    if isinstance(document, dict) and isinstance(document.get('answers'), dict):
        document = document['answers']
    if not isinstance(document, dict):
        raise ValidationError(f"{path} must map question ids to answers", field_name="answers")

    answers: Dict[str, Union[str, List[str]]] = {}
    for question_id, value in document.items():
        if isinstance(value, list):
            answers[str(question_id)] = ['' if v is None else str(v) for v in value]
        else:
            answers[str(question_id)] = '' if value is None else str(value)
    return answers
