# survey_intel/schemas/ai.py
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from survey_intel.models.survey import QuestionType
from survey_intel.schemas.base import CamelModel

InsightType = Literal["general", "improvement", "segment", "trend"]


class SuggestedQuestion(BaseModel):
    text: str
    type: QuestionType
    options: Optional[List[str]] = None
    required: bool = False


class SurveyPrediction(BaseModel):
    expectedCompletionRate: Union[int, float] = 0
    expectedResponseCount: Union[int, float] = 0
    targetDemographic: str = "Unknown"
    recommendations: List[str] = []


class PreviousStats(CamelModel):
    avg_completion_rate: Optional[float] = None
    avg_response_count: Optional[float] = None


class GenerateQuestionsIn(CamelModel):
    topic: str = Field(min_length=1)
    description: str = ""
    num_questions: int = Field(default=5, ge=1, le=20)


class PredictQuestionIn(CamelModel):
    text: str = ""
    type: Optional[str] = None
    required: bool = False


class PredictSurveyIn(CamelModel):
    title: str = Field(min_length=1)
    description: str = ""
    questions: List[PredictQuestionIn]
    previous_stats: Optional[PreviousStats] = None


class SurveyInsight(BaseModel):
    type: InsightType = "general"
    title: str = ""
    description: str = ""
    confidence: float = 0
    relevance: float = 0


class QuestionAnalysis(BaseModel):
    questionId: int
    questionText: str
    analysis: str
    stats: Dict[str, Any] = {}


class SurveyAnalysisResult(BaseModel):
    summaryStats: Dict[str, Any]
    keyInsights: List[SurveyInsight]
    questionAnalysis: List[QuestionAnalysis]


class NarrativeOut(BaseModel):
    surveyId: int
    summary: str
