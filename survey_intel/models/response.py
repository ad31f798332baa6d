from datetime import datetime
from typing import Any
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, DateTime, ForeignKey, JSON
from survey_intel.db.base import Base
from survey_intel.models.clock import utcnow

class Response(Base):
    __tablename__ = "responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    survey_id: Mapped[int] = mapped_column(Integer, ForeignKey("surveys.id"), index=True, nullable=False)
    # NULL for anonymous respondents
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class Answer(Base):
    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    response_id: Mapped[int] = mapped_column(Integer, ForeignKey("responses.id"), index=True, nullable=False)
    question_id: Mapped[int] = mapped_column(Integer, ForeignKey("questions.id"), index=True, nullable=False)
    # str for multiple_choice/text, list[str] for checkbox, number for rating
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
