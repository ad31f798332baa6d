# survey_intel/ai/generators.py
"""AI-backed survey helpers.

Every call follows the same path: build a prompt, ask the backend, pull a JSON
value out of the reply, default any missing fields. A missing client, a
backend error or an unusable reply all resolve to the deterministic fallback;
none of these functions raise.
"""
import logging
from typing import Any, List, Optional

from survey_intel.ai import fallbacks, prompts
from survey_intel.ai.client import TextGenerator
from survey_intel.ai.extraction import Expected, extract_json
from survey_intel.core.config import settings
from survey_intel.models.survey import OPTION_TYPES, QuestionType
from survey_intel.schemas.ai import (
    PreviousStats,
    QuestionAnalysis,
    SuggestedQuestion,
    SurveyAnalysisResult,
    SurveyInsight,
    SurveyPrediction,
)
from survey_intel.schemas.survey import SurveyResults

logger = logging.getLogger(__name__)

ANALYSIS_FAILED = "Could not generate analysis due to an error."

_QUESTION_TYPES = {t.value for t in QuestionType}
_INSIGHT_TYPES = {"general", "improvement", "segment", "trend"}


def _request(client: Optional[TextGenerator], prompt: str, expect: Expected, what: str) -> Any:
    """Return the extracted JSON value, or None when the call or the parse failed."""
    if client is None:
        return None
    try:
        raw = client.generate(prompt)
    except Exception:
        logger.warning("%s: backend call failed, using fallback", what, exc_info=True)
        return None
    extraction = extract_json(raw, expect)
    if not extraction.ok:
        logger.warning("%s: %s, using fallback", what, extraction.error)
        return None
    return extraction.value


def _number(value: Any) -> int | float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            number = float(value.strip().rstrip("%"))
        except ValueError:
            return 0
        return int(number) if number.is_integer() else number
    return 0


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str) and v.strip()]


# ---------- Question suggestions ----------
def _suggested(item: Any) -> Optional[SuggestedQuestion]:
    if not isinstance(item, dict):
        return None
    text = item.get("text")
    qtype = item.get("type")
    if not isinstance(text, str) or not text.strip() or qtype not in _QUESTION_TYPES:
        return None
    options = None
    if qtype in OPTION_TYPES:
        options = _strings(item.get("options"))
        if not options:
            return None
    return SuggestedQuestion(text=text.strip(), type=qtype, options=options, required=bool(item.get("required")))


def generate_survey_questions(
    topic: str, description: str, num_questions: int = 5, client: Optional[TextGenerator] = None
) -> List[SuggestedQuestion]:
    try:
        value = _request(
            client,
            prompts.question_generation_prompt(topic, description, num_questions),
            "array",
            "question generation",
        )
        if value is not None:
            questions = [q for q in (_suggested(item) for item in value) if q is not None]
            if questions:
                return questions[:num_questions]
            logger.warning("question generation: no usable questions in reply, using fallback")
    except Exception:
        logger.warning("question generation failed, using fallback", exc_info=True)
    return fallbacks.default_questions(topic, num_questions)


# ---------- Predictions ----------
def generate_survey_predictions(
    title: str,
    description: str,
    question_count: int,
    required_question_count: int,
    previous_stats: Optional[PreviousStats] = None,
    client: Optional[TextGenerator] = None,
) -> SurveyPrediction:
    try:
        value = _request(
            client,
            prompts.prediction_prompt(title, description, question_count, required_question_count, previous_stats),
            "object",
            "prediction",
        )
        if value is not None:
            demographic = value.get("targetDemographic")
            return SurveyPrediction(
                expectedCompletionRate=_number(value.get("expectedCompletionRate")),
                expectedResponseCount=_number(value.get("expectedResponseCount")),
                targetDemographic=demographic if isinstance(demographic, str) and demographic else "Unknown",
                recommendations=_strings(value.get("recommendations")),
            )
    except Exception:
        logger.warning("prediction failed, using fallback", exc_info=True)
    return fallbacks.default_prediction(title, question_count, required_question_count)


# ---------- Free-text narrative ----------
def generate_detailed_analysis(
    title: str, description: str, responses: Any, client: Optional[TextGenerator] = None
) -> str:
    if client is None:
        return ANALYSIS_FAILED
    try:
        return client.generate(prompts.narrative_prompt(title, description, responses)).strip()
    except Exception:
        logger.warning("narrative analysis failed", exc_info=True)
        return ANALYSIS_FAILED


# ---------- Structured insights ----------
def _insight(item: Any) -> Optional[SurveyInsight]:
    if not isinstance(item, dict):
        return None
    kind = item.get("type")
    return SurveyInsight(
        type=kind if kind in _INSIGHT_TYPES else "general",
        title=str(item.get("title") or ""),
        description=str(item.get("description") or ""),
        confidence=_number(item.get("confidence")),
        relevance=_number(item.get("relevance")),
    )


def _ai_question_notes(value: Any) -> dict[int, str]:
    notes: dict[int, str] = {}
    if not isinstance(value, list):
        return notes
    for item in value:
        if not isinstance(item, dict):
            continue
        analysis = item.get("analysis")
        try:
            qid = int(item.get("questionId"))
        except (TypeError, ValueError):
            continue
        if isinstance(analysis, str) and analysis.strip():
            notes.setdefault(qid, analysis.strip())
    return notes


def merge_analysis(basic: SurveyAnalysisResult, ai: dict) -> SurveyAnalysisResult:
    """Lay the AI fields over the basic pass; basic values fill whatever the AI left out."""
    ai_summary = ai.get("summaryStats")
    summary = {**basic.summaryStats, **(ai_summary if isinstance(ai_summary, dict) else {})}

    raw_insights = ai.get("keyInsights")
    insights: List[SurveyInsight] = []
    if isinstance(raw_insights, list):
        insights = [i for i in map(_insight, raw_insights) if i is not None]

    notes = _ai_question_notes(ai.get("questionAnalysis"))
    per_question = [
        QuestionAnalysis(
            questionId=qa.questionId,
            questionText=qa.questionText,
            analysis=notes.get(qa.questionId, qa.analysis),
            stats=qa.stats,
        )
        for qa in basic.questionAnalysis
    ]
    return SurveyAnalysisResult(
        summaryStats=summary,
        keyInsights=insights or basic.keyInsights,
        questionAnalysis=per_question,
    )


def generate_survey_analysis(
    results: SurveyResults,
    client: Optional[TextGenerator] = None,
    min_responses: Optional[int] = None,
) -> SurveyAnalysisResult:
    basic = fallbacks.basic_analysis(results)
    threshold = settings.AI_MIN_RESPONSES_FOR_INSIGHTS if min_responses is None else min_responses
    if client is None or len(results.responses) < threshold:
        return basic
    try:
        value = _request(client, prompts.insight_prompt(results), "object", "insight generation")
        if value is None:
            return basic
        return merge_analysis(basic, value)
    except Exception:
        logger.warning("insight generation failed, using basic analysis", exc_info=True)
        return basic
