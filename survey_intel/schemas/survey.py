# survey_intel/schemas/survey.py
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import Field, field_validator, model_validator

from survey_intel.models.clock import utcnow
from survey_intel.models.survey import OPTION_TYPES, QuestionType
from survey_intel.schemas.base import CamelModel


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class QuestionCreate(CamelModel):
    text: str = Field(min_length=1)
    type: QuestionType
    options: Optional[List[str]] = None
    order: int = Field(ge=0)
    required: bool = False

    @model_validator(mode="after")
    def _options_match_type(self) -> "QuestionCreate":
        if self.type.value in OPTION_TYPES:
            if not self.options:
                raise ValueError(f"options are required for {self.type.value} questions")
            if len(set(self.options)) != len(self.options):
                raise ValueError("options must be unique")
        else:
            self.options = None
        return self


class SurveyCreate(CamelModel):
    title: str
    description: Optional[str] = None
    is_public: bool = True
    is_active: bool = True
    start_date: datetime = Field(default_factory=utcnow)
    end_date: Optional[datetime] = None
    questions: List[QuestionCreate] = Field(min_length=1)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def _to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(v)

    @model_validator(mode="after")
    def _check_order_and_dates(self) -> "SurveyCreate":
        orders = sorted(q.order for q in self.questions)
        if orders != list(range(len(self.questions))):
            raise ValueError("question order values must be unique and run from 0 to n-1")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate must not precede startDate")
        return self


class SurveyStatusUpdate(CamelModel):
    is_active: Optional[bool] = None
    is_public: Optional[bool] = None


class QuestionOut(CamelModel):
    id: int
    survey_id: int
    text: str
    type: str
    options: Optional[List[str]] = None
    order: int
    required: bool


class SurveyOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    user_id: int
    is_public: bool
    is_active: bool
    start_date: datetime
    end_date: Optional[datetime] = None
    created_at: datetime


class SurveyWithQuestions(SurveyOut):
    questions: List[QuestionOut] = []


class AnswerIn(CamelModel):
    question_id: int
    value: Any


class ResponseCreate(CamelModel):
    survey_id: Optional[int] = None  # optional; must match the path id when sent
    answers: List[AnswerIn] = []


class AnswerOut(CamelModel):
    id: int
    response_id: int
    question_id: int
    value: Any


class ResponseOut(CamelModel):
    id: int
    survey_id: int
    user_id: Optional[int] = None
    submitted_at: datetime


class ResponseWithAnswers(ResponseOut):
    answers: List[AnswerOut] = []


class AnalysisOut(CamelModel):
    id: int
    survey_id: int
    insights: Any
    created_at: datetime


class SurveyResults(SurveyWithQuestions):
    responses: List[ResponseWithAnswers] = []
    analysis: Optional[AnalysisOut] = None
