# survey_intel/ai/prompts.py
"""Prompt templates. Pure string building, no I/O."""
import json
from typing import Any, Iterable, Optional

from survey_intel.schemas.ai import PreviousStats
from survey_intel.schemas.survey import SurveyResults


def question_generation_prompt(topic: str, description: str, num_questions: int) -> str:
    return f"""
You are an expert survey designer. Please create {num_questions} well-crafted survey questions about the topic: "{topic}".
Additional context: "{description}"

Return a JSON array with each object having:
- text (string)
- type (multiple_choice | checkbox | text | rating)
- options (array<string>, for multiple_choice and checkbox only)
- required (boolean)

Format:
[
  {{
    "text": "...",
    "type": "multiple_choice",
    "options": ["A", "B", "C"],
    "required": true
  }}
]
"""


def _fmt_stat(value: Optional[float]) -> str:
    return "Unknown" if not value else f"{value:g}"


def prediction_prompt(
    title: str,
    description: str,
    question_count: int,
    required_question_count: int,
    previous_stats: Optional[PreviousStats] = None,
) -> str:
    previous = ""
    if previous_stats is not None:
        previous = f"""
Previous survey data:
- Avg Completion Rate: {_fmt_stat(previous_stats.avg_completion_rate)}%
- Avg Response Count: {_fmt_stat(previous_stats.avg_response_count)}
"""
    return f"""
You are a survey analytics expert. Based on the details below, predict key metrics and give recommendations.

Survey Title: "{title}"
Description: "{description}"
Total Questions: {question_count}
Required Questions: {required_question_count}
{previous}
Return JSON like:
{{
  "expectedCompletionRate": 85,
  "expectedResponseCount": 40,
  "targetDemographic": "Young professionals aged 25-35",
  "recommendations": [
    "Keep the survey concise",
    "Use incentives"
  ]
}}
"""


def _question_block(question, answer_values: Iterable[Any]) -> str:
    options = f"\nOptions: {', '.join(question.options)}" if question.options else ""
    collected = ", ".join(json.dumps(v) for v in answer_values)
    return f'Question {question.id}: "{question.text}" (Type: {question.type}){options}\nResponses: {collected}'


def insight_prompt(results: SurveyResults) -> str:
    blocks = []
    for q in results.questions:
        values = [a.value for r in results.responses for a in r.answers if a.question_id == q.id]
        blocks.append(_question_block(q, values))
    questions = "\n\n".join(blocks)
    return f"""
You are a survey analysis expert. Analyze the following survey results and provide insights.

Survey: "{results.title}"
Description: "{results.description or 'No description provided'}"
Number of responses: {len(results.responses)}

The survey has {len(results.questions)} questions:

{questions}

Based on this data, please provide:
1. A summary of response statistics
2. 3-5 key insights from the data
3. An analysis for each question

Return your analysis as a JSON object with these properties:
{{
  "summaryStats": {{
    "totalResponses": number,
    "averageSatisfaction": number (if applicable),
    "completionRate": number
  }},
  "keyInsights": [
    {{
      "type": string (one of: "general", "improvement", "segment", "trend"),
      "title": string,
      "description": string,
      "confidence": number (between 0-1),
      "relevance": number (between 1-10)
    }}
  ],
  "questionAnalysis": [
    {{
      "questionId": number,
      "analysis": string
    }}
  ]
}}
"""


def narrative_prompt(title: str, description: str, responses: Any) -> str:
    return f"""
You are an expert data analyst. Given the following responses to the survey titled "{title}" with the description "{description}", analyze the responses.

Provide a detailed summary with key insights, trends, and any notable patterns.

Survey Responses:
{json.dumps(responses, indent=2, default=str)}

Return only the analysis as plain text.
"""
