# survey_intel/ai/fallbacks.py
"""Deterministic results used when the generative backend cannot help."""
import math
from typing import List

from survey_intel.models.survey import QuestionType
from survey_intel.schemas.ai import (
    QuestionAnalysis,
    SuggestedQuestion,
    SurveyAnalysisResult,
    SurveyInsight,
    SurveyPrediction,
)
from survey_intel.schemas.survey import SurveyResults
from survey_intel.services.aggregation import (
    answers_for_question,
    compute_question_statistics,
    percentage,
)

DEFAULT_EXPECTED_RESPONSE_COUNT = 30
MIN_COMPLETION_RATE = 50
MAX_COMPLETION_RATE = 95
REQUIRED_QUESTION_PENALTY = 15

DEFAULT_RECOMMENDATIONS = [
    "Keep surveys short",
    "Use incentives",
    "Use clear and engaging language",
    "Use diverse question types",
    "Share survey results with respondents",
]


def default_questions(topic: str, num_questions: int) -> List[SuggestedQuestion]:
    library = [
        SuggestedQuestion(
            text=f"How would you rate your overall satisfaction with {topic}?",
            type=QuestionType.RATING,
            required=True,
        ),
        SuggestedQuestion(
            text=f"What aspects of {topic} are most important to you?",
            type=QuestionType.CHECKBOX,
            options=["Quality", "Price", "Features", "Customer Service", "Other"],
            required=True,
        ),
        SuggestedQuestion(
            text=f"How likely are you to recommend {topic}?",
            type=QuestionType.MULTIPLE_CHOICE,
            options=["Very likely", "Somewhat likely", "Neutral", "Somewhat unlikely", "Very unlikely"],
            required=True,
        ),
        SuggestedQuestion(
            text=f"What improvements would you suggest for {topic}?",
            type=QuestionType.TEXT,
            required=False,
        ),
        SuggestedQuestion(
            text=f"How often do you use or interact with {topic}?",
            type=QuestionType.MULTIPLE_CHOICE,
            options=["Daily", "Weekly", "Monthly", "Rarely", "Never"],
            required=True,
        ),
    ]
    return library[:max(num_questions, 0)]


def expected_completion_rate(question_count: int, required_question_count: int) -> int:
    ratio = required_question_count / question_count if question_count > 0 else 0.0
    rate = math.floor(100 - ratio * REQUIRED_QUESTION_PENALTY + 0.5)
    return int(min(max(rate, MIN_COMPLETION_RATE), MAX_COMPLETION_RATE))


def default_prediction(title: str, question_count: int, required_question_count: int) -> SurveyPrediction:
    return SurveyPrediction(
        expectedCompletionRate=expected_completion_rate(question_count, required_question_count),
        expectedResponseCount=DEFAULT_EXPECTED_RESPONSE_COUNT,
        targetDemographic=f"General audience interested in {title}",
        recommendations=list(DEFAULT_RECOMMENDATIONS),
    )


def _describe(question, stats: dict) -> str:
    count = stats["responseCount"]
    text = f"Received {count} responses to this question."
    if question.type == QuestionType.MULTIPLE_CHOICE.value and stats.get("options"):
        counts = ", ".join(f"{o['option']}: {o['count']}" for o in stats["options"])
        text += f" Option counts: {counts}."
        top = max(stats["options"], key=lambda o: o["count"])
        if top["count"] > 0:
            text += f' Most common response: "{top["option"]}" ({percentage(top["count"], count)}%).'
    elif question.type == QuestionType.RATING.value and stats.get("ratedCount"):
        text += f" Average rating: {stats['average']:.1f} out of 5."
    return text


def basic_analysis(results: SurveyResults) -> SurveyAnalysisResult:
    total = len(results.responses)
    insights = [
        SurveyInsight(
            type="general",
            title="Response Summary",
            description=f"Your survey received {total} responses.",
            confidence=1,
            relevance=10,
        )
    ]
    per_question = []
    for q in results.questions:
        stats = compute_question_statistics(q, answers_for_question(results, q.id))
        per_question.append(
            QuestionAnalysis(
                questionId=q.id,
                questionText=q.text,
                analysis=_describe(q, stats),
                stats=stats,
            )
        )
    return SurveyAnalysisResult(
        summaryStats={"totalResponses": total, "completionRate": 1 if total > 0 else 0},
        keyInsights=insights,
        questionAnalysis=per_question,
    )
