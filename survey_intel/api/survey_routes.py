# survey_intel/api/survey_routes.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from survey_intel.auth.context import RequestContext, get_request_context, require_owner, require_user
from survey_intel.db.session import get_db
from survey_intel.models.survey import Survey
from survey_intel.schemas.survey import (
    AnswerOut,
    QuestionOut,
    ResponseCreate,
    ResponseWithAnswers,
    SurveyCreate,
    SurveyOut,
    SurveyResults,
    SurveyStatusUpdate,
    SurveyWithQuestions,
)
from survey_intel.services import aggregation, export, storage
from survey_intel.services.answers import AnswerValueError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/surveys", tags=["Surveys"])


def _with_questions(survey, questions) -> SurveyWithQuestions:
    return SurveyWithQuestions.model_validate(survey).model_copy(
        update={"questions": [QuestionOut.model_validate(q) for q in questions]}
    )

def get_survey_or_404(db: Session, survey_id: int) -> Survey:
    survey = storage.get_survey(db, survey_id)
    if survey is None:
        raise HTTPException(status_code=404, detail="Survey not found")
    return survey

def get_owned_survey(db: Session, ctx: RequestContext, survey_id: int, action: str) -> Survey:
    survey = get_survey_or_404(db, survey_id)
    require_owner(ctx, survey, action)
    return survey


# ---------- Collections (declared before /{survey_id}) ----------
@router.post("", response_model=SurveyWithQuestions, status_code=201)
def create_survey(
    payload: SurveyCreate,
    ctx: RequestContext = Depends(require_user),
    db: Session = Depends(get_db),
):
    survey, questions = storage.create_survey_with_questions(db, ctx.user_id, payload)
    return _with_questions(survey, questions)

@router.get("/my", response_model=List[SurveyOut], summary="Caller's active surveys (newest first)")
def my_surveys(ctx: RequestContext = Depends(require_user), db: Session = Depends(get_db)):
    return storage.get_user_surveys(db, ctx.user_id)

@router.get("/public", response_model=List[SurveyOut])
def public_surveys(db: Session = Depends(get_db)):
    return storage.get_public_surveys(db)

@router.get("/answerable", response_model=List[SurveyOut])
def answerable_surveys(ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    return storage.get_answerable_surveys(db, ctx.user_id)

@router.get("/answered", response_model=List[SurveyOut])
def answered_surveys(ctx: RequestContext = Depends(require_user), db: Session = Depends(get_db)):
    return storage.get_answered_surveys(db, ctx.user_id)

@router.get("/inactive", response_model=List[SurveyOut])
def inactive_surveys(ctx: RequestContext = Depends(require_user), db: Session = Depends(get_db)):
    return storage.get_inactive_surveys(db, ctx.user_id)


# ---------- Single survey ----------
@router.get("/{survey_id}", response_model=SurveyWithQuestions)
def get_survey(survey_id: int, db: Session = Depends(get_db)):
    found = storage.get_survey_with_questions(db, survey_id)
    if found is None:
        raise HTTPException(status_code=404, detail="Survey not found")
    return _with_questions(*found)

@router.patch("/{survey_id}/status", response_model=SurveyOut)
def update_status(
    survey_id: int,
    payload: SurveyStatusUpdate,
    ctx: RequestContext = Depends(require_user),
    db: Session = Depends(get_db),
):
    survey = get_owned_survey(db, ctx, survey_id, "update")
    return storage.update_survey_status(db, survey, is_active=payload.is_active, is_public=payload.is_public)

@router.delete("/{survey_id}", status_code=204)
def delete_survey(survey_id: int, ctx: RequestContext = Depends(require_user), db: Session = Depends(get_db)):
    get_owned_survey(db, ctx, survey_id, "delete")
    storage.delete_survey(db, survey_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/{survey_id}/responses", response_model=ResponseWithAnswers, status_code=201)
def submit_response(
    survey_id: int,
    payload: ResponseCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    survey = get_survey_or_404(db, survey_id)
    if payload.survey_id is not None and payload.survey_id != survey_id:
        raise HTTPException(status_code=400, detail="surveyId does not match the survey in the URL")
    try:
        response, answers = storage.create_response_with_answers(db, survey, ctx.user_id, payload.answers)
    except AnswerValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("response %s recorded for survey %s", response.id, survey_id)
    return ResponseWithAnswers.model_validate(response).model_copy(
        update={"answers": [AnswerOut.model_validate(a) for a in answers]}
    )

@router.get("/{survey_id}/results", response_model=SurveyResults)
def survey_results(survey_id: int, ctx: RequestContext = Depends(require_user), db: Session = Depends(get_db)):
    get_owned_survey(db, ctx, survey_id, "view results of")
    results = aggregation.get_survey_results(db, survey_id)
    if results is None:
        raise HTTPException(status_code=404, detail="Survey not found")
    return results

@router.get("/{survey_id}/statistics")
def survey_statistics(survey_id: int, ctx: RequestContext = Depends(require_user), db: Session = Depends(get_db)):
    """Per-question statistics in display order"""
    get_owned_survey(db, ctx, survey_id, "view results of")
    results = aggregation.get_survey_results(db, survey_id)
    if results is None:
        raise HTTPException(status_code=404, detail="Survey not found")
    return {
        "surveyId": survey_id,
        "totalResponses": len(results.responses),
        "questions": aggregation.compute_survey_statistics(results),
    }

@router.get("/{survey_id}/export", response_class=Response)
def export_results(survey_id: int, ctx: RequestContext = Depends(require_user), db: Session = Depends(get_db)):
    """Responses as CSV, one row per response"""
    get_owned_survey(db, ctx, survey_id, "export")
    results = aggregation.get_survey_results(db, survey_id)
    if results is None:
        raise HTTPException(status_code=404, detail="Survey not found")
    return Response(
        content=export.results_to_csv(results),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="survey-{survey_id}-responses.csv"'},
    )
