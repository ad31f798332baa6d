# survey_intel/services/answers.py
"""Answer values are a union keyed by the owning question's type.

    multiple_choice, text -> str
    checkbox              -> list[str]
    rating                -> number in [1, 5]

`normalize_answer_value` is called before an Answer row is written, so the
aggregation side can rely on these shapes.
"""
from typing import Any

from survey_intel.models.survey import QuestionType

RATING_MIN = 1
RATING_MAX = 5


class AnswerValueError(ValueError):
    """An answer does not fit the question it targets."""


def _rating(value: Any) -> int | float:
    if isinstance(value, bool):
        raise AnswerValueError("rating answers must be numbers")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise AnswerValueError(f"rating answer {value!r} is not a number") from None
    if not isinstance(value, (int, float)):
        raise AnswerValueError("rating answers must be numbers")
    if not RATING_MIN <= value <= RATING_MAX:
        raise AnswerValueError(f"rating answers must be between {RATING_MIN} and {RATING_MAX}")
    return int(value) if float(value).is_integer() else float(value)


def normalize_answer_value(question_type: str, value: Any) -> Any:
    if question_type in (QuestionType.MULTIPLE_CHOICE.value, QuestionType.TEXT.value):
        if not isinstance(value, str):
            raise AnswerValueError(f"{question_type} answers must be a string")
        return value
    if question_type == QuestionType.CHECKBOX.value:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise AnswerValueError("checkbox answers must be a list of strings")
        return value
    if question_type == QuestionType.RATING.value:
        return _rating(value)
    raise AnswerValueError(f"unsupported question type {question_type!r}")
