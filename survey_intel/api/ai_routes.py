# survey_intel/api/ai_routes.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from survey_intel.ai import generators
from survey_intel.ai.client import TextGenerator, get_ai_client
from survey_intel.api.survey_routes import get_owned_survey
from survey_intel.auth.context import RequestContext, require_user
from survey_intel.db.session import get_db
from survey_intel.schemas.ai import (
    GenerateQuestionsIn,
    NarrativeOut,
    PredictSurveyIn,
    SuggestedQuestion,
    SurveyPrediction,
)
from survey_intel.schemas.survey import AnalysisOut, SurveyResults
from survey_intel.services import aggregation, storage

router = APIRouter(prefix="/api", tags=["AI"])


def _results_with_responses(db: Session, ctx: RequestContext, survey_id: int, action: str) -> SurveyResults:
    get_owned_survey(db, ctx, survey_id, action)
    results = aggregation.get_survey_results(db, survey_id)
    if results is None:
        raise HTTPException(status_code=404, detail="Survey not found")
    if not results.responses:
        raise HTTPException(status_code=400, detail="No responses to analyze")
    return results


@router.post("/surveys/{survey_id}/analyze", response_model=AnalysisOut)
def analyze_survey(
    survey_id: int,
    ctx: RequestContext = Depends(require_user),
    db: Session = Depends(get_db),
    client: Optional[TextGenerator] = Depends(get_ai_client),
):
    """Generate insights for the survey and store them as its latest analysis"""
    results = _results_with_responses(db, ctx, survey_id, "analyze")
    insights = generators.generate_survey_analysis(results, client)
    return storage.create_analysis(db, survey_id, insights.model_dump())


@router.post("/surveys/{survey_id}/summary", response_model=NarrativeOut)
def narrative_summary(
    survey_id: int,
    ctx: RequestContext = Depends(require_user),
    db: Session = Depends(get_db),
    client: Optional[TextGenerator] = Depends(get_ai_client),
):
    """Free-text narrative of the responses (not stored)"""
    results = _results_with_responses(db, ctx, survey_id, "analyze")
    responses = [r.model_dump(by_alias=True, mode="json") for r in results.responses]
    summary = generators.generate_detailed_analysis(
        results.title or "Untitled Survey",
        results.description or "No description provided",
        responses,
        client,
    )
    return NarrativeOut(surveyId=survey_id, summary=summary)


@router.post("/ai/generate-questions", response_model=List[SuggestedQuestion])
def generate_questions(
    payload: GenerateQuestionsIn,
    ctx: RequestContext = Depends(require_user),
    client: Optional[TextGenerator] = Depends(get_ai_client),
):
    return generators.generate_survey_questions(
        payload.topic, payload.description, payload.num_questions, client
    )


@router.post("/ai/predict-survey", response_model=SurveyPrediction)
def predict_survey(
    payload: PredictSurveyIn,
    ctx: RequestContext = Depends(require_user),
    client: Optional[TextGenerator] = Depends(get_ai_client),
):
    required = sum(1 for q in payload.questions if q.required)
    return generators.generate_survey_predictions(
        payload.title,
        payload.description,
        len(payload.questions),
        required,
        payload.previous_stats,
        client,
    )
