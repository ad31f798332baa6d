# survey_intel/services/storage.py
"""Data access for users, surveys, questions, responses, answers and analyses.

Plain functions over a caller-supplied Session. Multi-row writes commit once
at the end and roll back on any error.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, desc, func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable

from survey_intel.models.analysis import Analysis
from survey_intel.models.response import Answer, Response
from survey_intel.models.survey import Question, Survey
from survey_intel.models.user import User
from survey_intel.schemas.survey import AnswerIn, SurveyCreate
from survey_intel.services.answers import AnswerValueError, normalize_answer_value

logger = logging.getLogger(__name__)


# ---------- Users ----------
def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)

def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.execute(select(User).where(User.username == username)).scalars().first()

def create_user(db: Session, username: str, hashed_password: str) -> User:
    user = User(username=username, hashed_password=hashed_password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# ---------- Surveys ----------
def _newest_first(stmt):
    return stmt.order_by(desc(Survey.created_at), desc(Survey.id))

def create_survey_with_questions(
    db: Session, owner_id: int, payload: SurveyCreate
) -> Tuple[Survey, List[Question]]:
    survey = Survey(
        title=payload.title,
        description=payload.description or "",
        user_id=owner_id,
        is_public=payload.is_public,
        is_active=payload.is_active,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    try:
        db.add(survey)
        db.flush()  # get survey.id
        questions = [
            Question(
                survey_id=survey.id,
                text=q.text,
                type=q.type.value,
                options=q.options,
                order=q.order,
                required=q.required,
            )
            for q in sorted(payload.questions, key=lambda q: q.order)
        ]
        db.add_all(questions)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("survey %s created by user %s with %d questions", survey.id, owner_id, len(questions))
    return survey, questions

def get_survey(db: Session, survey_id: int) -> Optional[Survey]:
    return db.get(Survey, survey_id)

def get_questions_by_survey_id(db: Session, survey_id: int) -> List[Question]:
    return list(
        db.execute(
            select(Question).where(Question.survey_id == survey_id).order_by(Question.order)
        ).scalars().all()
    )

def get_survey_with_questions(db: Session, survey_id: int) -> Optional[Tuple[Survey, List[Question]]]:
    survey = get_survey(db, survey_id)
    if survey is None:
        return None
    return survey, get_questions_by_survey_id(db, survey_id)

def get_user_surveys(db: Session, user_id: int) -> List[Survey]:
    stmt = select(Survey).where(Survey.user_id == user_id, Survey.is_active.is_(True))
    return list(db.execute(_newest_first(stmt)).scalars().all())

def get_inactive_surveys(db: Session, user_id: int) -> List[Survey]:
    stmt = select(Survey).where(Survey.user_id == user_id, Survey.is_active.is_(False))
    return list(db.execute(_newest_first(stmt)).scalars().all())

def get_public_surveys(db: Session) -> List[Survey]:
    stmt = select(Survey).where(Survey.is_public.is_(True), Survey.is_active.is_(True))
    return list(db.execute(_newest_first(stmt)).scalars().all())

def _answered_survey_ids(user_id: int):
    return select(Response.survey_id).where(Response.user_id == user_id)

def get_answerable_surveys(db: Session, user_id: Optional[int] = None) -> List[Survey]:
    """Public, active surveys the user neither owns nor has answered.

    The exclusion is a subquery of the same statement, so both reads come
    from one snapshot.
    """
    if user_id is None:
        return get_public_surveys(db)
    stmt = select(Survey).where(
        Survey.is_public.is_(True),
        Survey.is_active.is_(True),
        Survey.user_id != user_id,
        Survey.id.not_in(_answered_survey_ids(user_id)),
    )
    return list(db.execute(_newest_first(stmt)).scalars().all())

def get_answered_surveys(db: Session, user_id: int) -> List[Survey]:
    stmt = select(Survey).where(Survey.id.in_(_answered_survey_ids(user_id)))
    return list(db.execute(_newest_first(stmt)).scalars().all())

def update_survey_status(
    db: Session,
    survey: Survey,
    is_active: Optional[bool] = None,
    is_public: Optional[bool] = None,
) -> Survey:
    if is_active is not None:
        survey.is_active = is_active
    if is_public is not None:
        survey.is_public = is_public
    db.commit()
    db.refresh(survey)
    return survey


# ---------- Cascading delete ----------
@dataclass(frozen=True)
class CleanupStep:
    name: str
    build: Callable[[int], Executable]


def _orm_delete(stmt):
    return stmt.execution_options(synchronize_session=False)


# Order matters: answers -> responses -> questions -> analyses -> survey.
SURVEY_DELETE_STEPS: Tuple[CleanupStep, ...] = (
    CleanupStep(
        "answers",
        lambda sid: _orm_delete(
            delete(Answer).where(
                Answer.response_id.in_(select(Response.id).where(Response.survey_id == sid))
            )
        ),
    ),
    CleanupStep("responses", lambda sid: _orm_delete(delete(Response).where(Response.survey_id == sid))),
    CleanupStep("questions", lambda sid: _orm_delete(delete(Question).where(Question.survey_id == sid))),
    CleanupStep("analyses", lambda sid: _orm_delete(delete(Analysis).where(Analysis.survey_id == sid))),
    CleanupStep("survey", lambda sid: _orm_delete(delete(Survey).where(Survey.id == sid))),
)

def delete_survey(
    db: Session, survey_id: int, steps: Sequence[CleanupStep] = SURVEY_DELETE_STEPS
) -> None:
    """Run every cleanup step in one transaction; any failure rolls all of them back."""
    current = None
    try:
        for step in steps:
            current = step.name
            db.execute(step.build(survey_id))
        db.commit()
    except Exception:
        db.rollback()
        logger.error("delete of survey %s failed at step %r; rolled back", survey_id, current)
        raise
    db.expunge_all()
    logger.info("survey %s deleted", survey_id)


# ---------- Responses & answers ----------
def create_response_with_answers(
    db: Session, survey: Survey, user_id: Optional[int], answers: Iterable[AnswerIn]
) -> Tuple[Response, List[Answer]]:
    """Validate every answer against its question, then write response + answers together.

    Raises AnswerValueError before anything is written.
    """
    questions = {q.id: q for q in get_questions_by_survey_id(db, survey.id)}
    values: List[Tuple[int, object]] = []
    seen: set[int] = set()
    for a in answers:
        question = questions.get(a.question_id)
        if question is None:
            raise AnswerValueError(f"question {a.question_id} does not belong to survey {survey.id}")
        if question.id in seen:
            raise AnswerValueError(f"question {question.id} answered more than once")
        seen.add(question.id)
        values.append((question.id, normalize_answer_value(question.type, a.value)))

    response = Response(survey_id=survey.id, user_id=user_id)
    try:
        db.add(response)
        db.flush()  # get response.id
        rows = [Answer(response_id=response.id, question_id=qid, value=value) for qid, value in values]
        db.add_all(rows)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return response, rows

def get_survey_responses(db: Session, survey_id: int) -> List[Response]:
    return list(
        db.execute(
            select(Response)
            .where(Response.survey_id == survey_id)
            .order_by(desc(Response.submitted_at), desc(Response.id))
        ).scalars().all()
    )

def get_answers_by_response(db: Session, response_ids: Sequence[int]) -> Dict[int, List[Answer]]:
    grouped: Dict[int, List[Answer]] = {rid: [] for rid in response_ids}
    if not response_ids:
        return grouped
    rows = db.execute(
        select(Answer).where(Answer.response_id.in_(response_ids)).order_by(Answer.id)
    ).scalars().all()
    for row in rows:
        grouped[row.response_id].append(row)
    return grouped

def get_response_with_answers(db: Session, response_id: int) -> Optional[Tuple[Response, List[Answer]]]:
    response = db.get(Response, response_id)
    if response is None:
        return None
    return response, get_answers_by_response(db, [response_id])[response_id]


# ---------- Analyses ----------
def create_analysis(db: Session, survey_id: int, insights: dict) -> Analysis:
    analysis = Analysis(survey_id=survey_id, insights=insights)
    db.add(analysis)
    db.commit()
    db.refresh(analysis)
    return analysis

def get_latest_analysis(db: Session, survey_id: int) -> Optional[Analysis]:
    return db.execute(
        select(Analysis)
        .where(Analysis.survey_id == survey_id)
        .order_by(desc(Analysis.created_at), desc(Analysis.id))
        .limit(1)
    ).scalars().first()


# ---------- Stats ----------
def get_user_stats(db: Session, user_id: int) -> Dict[str, int]:
    owned = select(Survey.id).where(Survey.user_id == user_id)
    total_responses = db.scalar(
        select(func.count(Response.id)).where(Response.survey_id.in_(owned))
    )
    insights = db.scalar(
        select(func.count(Analysis.id)).where(Analysis.survey_id.in_(owned))
    )
    return {"totalResponses": int(total_responses or 0), "aiInsightsGenerated": int(insights or 0)}
