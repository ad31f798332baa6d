# survey_intel/services/export.py
import pandas as pd

from survey_intel.schemas.survey import SurveyResults

BASE_COLUMNS = ["responseId", "submittedAt", "userId"]


def _cell(value):
    if isinstance(value, list):
        return "; ".join(str(v) for v in value)
    return value


def build_results_frame(results: SurveyResults) -> pd.DataFrame:
    """One row per response (newest first), one column per question in display order.

    Question columns are labelled "<order+1>. <text>" so repeated question
    texts stay distinct.
    """
    columns = {q.id: f"{q.order + 1}. {q.text}" for q in results.questions}
    rows = []
    for r in results.responses:
        row = {
            "responseId": r.id,
            "submittedAt": r.submitted_at.isoformat(),
            "userId": r.user_id,
        }
        for a in r.answers:
            if a.question_id in columns:
                row[columns[a.question_id]] = _cell(a.value)
        rows.append(row)
    frame = pd.DataFrame(rows, columns=BASE_COLUMNS + list(columns.values()))
    # nullable ints: anonymous rows must not turn the column into floats
    frame["userId"] = frame["userId"].astype("Int64")
    return frame


def results_to_csv(results: SurveyResults) -> str:
    return build_results_frame(results).to_csv(index=False)
