# survey_intel/services/aggregation.py
"""Survey results assembly and per-question statistics.

`get_survey_results` joins a survey's questions, responses, answers and its
latest analysis into one read-only view. `compute_question_statistics` derives
the numbers used by the statistics endpoint, the CSV export and the basic
insight pass.
"""
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from survey_intel.models.survey import QuestionType
from survey_intel.schemas.survey import (
    AnalysisOut,
    AnswerOut,
    QuestionOut,
    ResponseWithAnswers,
    SurveyResults,
)
from survey_intel.services import storage

logger = logging.getLogger(__name__)

RATING_SCALE = (1, 2, 3, 4, 5)


def get_survey_results(db: Session, survey_id: int) -> Optional[SurveyResults]:
    """Return the survey with ordered questions, newest-first responses and latest analysis.

    None when the survey does not exist. The reads are independent queries;
    a response landing mid-read may or may not be included.
    """
    survey = storage.get_survey(db, survey_id)
    if survey is None:
        return None

    questions = storage.get_questions_by_survey_id(db, survey_id)
    responses = storage.get_survey_responses(db, survey_id)
    answers = storage.get_answers_by_response(db, [r.id for r in responses])
    analysis = storage.get_latest_analysis(db, survey_id)

    base = SurveyResults.model_validate(survey)
    return base.model_copy(update={
        "questions": [QuestionOut.model_validate(q) for q in questions],
        "responses": [
            ResponseWithAnswers.model_validate(r).model_copy(
                update={"answers": [AnswerOut.model_validate(a) for a in answers[r.id]]}
            )
            for r in responses
        ],
        "analysis": AnalysisOut.model_validate(analysis) if analysis is not None else None,
    })


def percentage(count: int, total: int) -> int:
    """count/total as a whole percent, rounded half up; 0 when total is 0."""
    if total <= 0:
        return 0
    return int(math.floor(count / total * 100 + 0.5))


def to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def _option_breakdown(options: Sequence[str], counts: Dict[str, int], total: int) -> Dict[str, Any]:
    return {
        "optionCounts": dict(counts),
        "options": [
            {"option": option, "count": counts[option], "percentage": percentage(counts[option], total)}
            for option in options
        ],
    }


def _multiple_choice(question, values: List[Any]) -> Dict[str, Any]:
    options = list(question.options or [])
    counts = {option: 0 for option in options}
    for value in values:
        # Values outside the declared options are ignored
        if isinstance(value, str) and value in counts:
            counts[value] += 1
    return _option_breakdown(options, counts, len(values))


def _checkbox(question, values: List[Any]) -> Dict[str, Any]:
    options = list(question.options or [])
    counts = {option: 0 for option in options}
    for value in values:
        if not isinstance(value, list):
            continue
        for selected in value:
            if isinstance(selected, str) and selected in counts:
                counts[selected] += 1
    return _option_breakdown(options, counts, len(values))


def _rating(question, values: List[Any]) -> Dict[str, Any]:
    numbers = [n for n in (to_number(v) for v in values) if n is not None]
    average = sum(numbers) / len(numbers) if numbers else 0.0
    distribution = {str(score): 0 for score in RATING_SCALE}
    for n in numbers:
        if n.is_integer() and str(int(n)) in distribution:
            distribution[str(int(n))] += 1
    return {
        "average": math.floor(average * 10 + 0.5) / 10,
        "ratedCount": len(numbers),
        "distribution": distribution,
    }


def _text(question, values: List[Any]) -> Dict[str, Any]:
    return {"responses": [v if isinstance(v, str) else str(v) for v in values]}


_STATISTICS: Dict[str, Callable[[Any, List[Any]], Dict[str, Any]]] = {
    QuestionType.MULTIPLE_CHOICE.value: _multiple_choice,
    QuestionType.CHECKBOX.value: _checkbox,
    QuestionType.RATING.value: _rating,
    QuestionType.TEXT.value: _text,
}


def compute_question_statistics(question, answers: Sequence[Any]) -> Dict[str, Any]:
    """Per-type statistics for one question.

    `answers` are the question's answers (objects with a `value`). Always
    contains `questionId`, `type` and `responseCount`; the remaining keys
    depend on the type. Unknown types get nothing else.
    """
    values = [a.value for a in answers]
    stats: Dict[str, Any] = {
        "questionId": question.id,
        "type": question.type,
        "responseCount": len(values),
    }
    handler = _STATISTICS.get(str(question.type))
    if handler is None:
        logger.warning("no statistics for question %s of type %r", question.id, question.type)
        return stats
    stats.update(handler(question, values))
    return stats


def answers_for_question(results: SurveyResults, question_id: int) -> List[AnswerOut]:
    return [a for r in results.responses for a in r.answers if a.question_id == question_id]


def compute_survey_statistics(results: SurveyResults) -> List[Dict[str, Any]]:
    return [
        {"questionText": q.text, **compute_question_statistics(q, answers_for_question(results, q.id))}
        for q in results.questions
    ]
