import pytest
from sqlalchemy import func, select, text
from sqlalchemy.exc import OperationalError

from survey_intel.models.analysis import Analysis
from survey_intel.models.response import Answer, Response
from survey_intel.models.survey import Question, Survey
from survey_intel.schemas.survey import AnswerIn, QuestionCreate, SurveyCreate
from survey_intel.services import aggregation, storage
from survey_intel.services.answers import AnswerValueError


def _payload(title, **kw):
    return SurveyCreate(
        title=title,
        questions=[
            QuestionCreate(text="Pick", type="multiple_choice", options=["A", "B"], order=1),
            QuestionCreate(text="Rate", type="rating", order=0),
        ],
        **kw,
    )


def _survey(db, owner, title="S", **kw):
    survey, _ = storage.create_survey_with_questions(db, owner.id, _payload(title, **kw))
    return survey


def _count(db, model, *where):
    return db.scalar(select(func.count()).select_from(model).where(*where))


@pytest.fixture
def alice(db):
    return storage.create_user(db, "alice", "hash")


@pytest.fixture
def bob(db):
    return storage.create_user(db, "bob", "hash")


def test_questions_stored_in_display_order(db, alice):
    survey, questions = storage.create_survey_with_questions(db, alice.id, _payload("Ordered"))
    assert [q.order for q in questions] == [0, 1]
    assert [q.text for q in storage.get_questions_by_survey_id(db, survey.id)] == ["Rate", "Pick"]
    assert survey.description == ""


def test_survey_lists_are_newest_first(db, alice):
    first = _survey(db, alice, "first")
    second = _survey(db, alice, "second")
    closed = _survey(db, alice, "closed", is_active=False)
    assert [s.id for s in storage.get_user_surveys(db, alice.id)] == [second.id, first.id]
    assert [s.id for s in storage.get_inactive_surveys(db, alice.id)] == [closed.id]


def test_public_surveys_exclude_private_and_inactive(db, alice):
    shown = _survey(db, alice, "shown")
    _survey(db, alice, "private", is_public=False)
    _survey(db, alice, "closed", is_active=False)
    assert [s.id for s in storage.get_public_surveys(db)] == [shown.id]


def test_answerable_excludes_owned_and_answered(db, alice, bob):
    own = _survey(db, alice, "own")
    open_ = _survey(db, bob, "open")
    _survey(db, bob, "private", is_public=False)
    _survey(db, bob, "closed", is_active=False)
    answered = _survey(db, bob, "answered")
    storage.create_response_with_answers(db, answered, alice.id, [])

    assert [s.id for s in storage.get_answerable_surveys(db, alice.id)] == [open_.id]
    assert [s.id for s in storage.get_answered_surveys(db, alice.id)] == [answered.id]
    # anonymous callers see every public, active survey
    assert [s.id for s in storage.get_answerable_surveys(db)] == [answered.id, open_.id, own.id]


def test_update_status(db, alice):
    survey = _survey(db, alice)
    storage.update_survey_status(db, survey, is_active=False)
    assert survey.is_active is False
    assert survey.is_public is True


def test_response_answers_are_normalized(db, alice):
    survey = _survey(db, alice)
    rate, pick = storage.get_questions_by_survey_id(db, survey.id)
    response, answers = storage.create_response_with_answers(
        db, survey, None, [AnswerIn(question_id=rate.id, value="4"), AnswerIn(question_id=pick.id, value="A")]
    )
    assert response.user_id is None
    assert [a.value for a in answers] == [4, "A"]
    _, stored = storage.get_response_with_answers(db, response.id)
    assert {a.question_id: a.value for a in stored} == {rate.id: 4, pick.id: "A"}


def test_invalid_answers_write_nothing(db, alice):
    survey = _survey(db, alice)
    other = _survey(db, alice, "other")
    rate, _ = storage.get_questions_by_survey_id(db, survey.id)
    foreign = storage.get_questions_by_survey_id(db, other.id)[0]

    cases = [
        [AnswerIn(question_id=rate.id, value=9)],
        [AnswerIn(question_id=foreign.id, value=3)],
        [AnswerIn(question_id=rate.id, value=3), AnswerIn(question_id=rate.id, value=4)],
    ]
    for answers in cases:
        with pytest.raises(AnswerValueError):
            storage.create_response_with_answers(db, survey, alice.id, answers)
    assert _count(db, Response) == 0
    assert _count(db, Answer) == 0


def test_responses_newest_first(db, alice):
    survey = _survey(db, alice)
    first, _ = storage.create_response_with_answers(db, survey, None, [])
    second, _ = storage.create_response_with_answers(db, survey, None, [])
    assert [r.id for r in storage.get_survey_responses(db, survey.id)] == [second.id, first.id]


def test_latest_analysis_and_user_stats(db, alice, bob):
    survey = _survey(db, alice)
    storage.create_response_with_answers(db, survey, bob.id, [])
    storage.create_response_with_answers(db, survey, None, [])
    storage.create_analysis(db, survey.id, {"n": 1})
    latest = storage.create_analysis(db, survey.id, {"n": 2})
    assert storage.get_latest_analysis(db, survey.id).id == latest.id
    assert storage.get_user_stats(db, alice.id) == {"totalResponses": 2, "aiInsightsGenerated": 2}
    assert storage.get_user_stats(db, bob.id) == {"totalResponses": 0, "aiInsightsGenerated": 0}


def _populated(db, owner):
    survey = _survey(db, owner)
    rate, pick = storage.get_questions_by_survey_id(db, survey.id)
    storage.create_response_with_answers(
        db, survey, None, [AnswerIn(question_id=rate.id, value=5), AnswerIn(question_id=pick.id, value="B")]
    )
    storage.create_analysis(db, survey.id, {"summaryStats": {}})
    return survey.id


def test_delete_removes_everything_for_the_survey(db, alice):
    doomed = _populated(db, alice)
    kept = _populated(db, alice)

    storage.delete_survey(db, doomed)

    assert storage.get_survey(db, doomed) is None
    assert _count(db, Question, Question.survey_id == doomed) == 0
    assert _count(db, Response, Response.survey_id == doomed) == 0
    assert _count(db, Analysis, Analysis.survey_id == doomed) == 0
    assert _count(db, Answer) == 2  # only the kept survey's answers
    assert storage.get_survey(db, kept) is not None


def test_failed_delete_rolls_back_every_step(db, alice):
    survey_id = _populated(db, alice)
    steps = storage.SURVEY_DELETE_STEPS[:2] + (
        storage.CleanupStep("broken", lambda sid: text("DELETE FROM no_such_table")),
    )

    with pytest.raises(OperationalError):
        storage.delete_survey(db, survey_id, steps=steps)

    assert _count(db, Answer) == 2
    assert _count(db, Response, Response.survey_id == survey_id) == 1
    assert storage.get_survey(db, survey_id) is not None


def test_user_lookup(db, alice):
    assert storage.get_user(db, alice.id).username == "alice"
    assert storage.get_user_by_username(db, "alice").id == alice.id
    assert storage.get_user_by_username(db, "nobody") is None


def test_results_hold_ordered_questions_and_own_answers(db, alice):
    survey = _survey(db, alice)
    rate, pick = storage.get_questions_by_survey_id(db, survey.id)
    for rating, brew in ((5, "A"), (3, "B"), (4, "A")):
        storage.create_response_with_answers(
            db, survey, None, [AnswerIn(question_id=pick.id, value=brew), AnswerIn(question_id=rate.id, value=rating)]
        )

    results = aggregation.get_survey_results(db, survey.id)

    assert [q.order for q in results.questions] == [0, 1]
    assert [q.text for q in results.questions] == ["Rate", "Pick"]
    assert len(results.responses) == 3
    for response in results.responses:
        assert len(response.answers) == len(results.questions)
        assert {a.response_id for a in response.answers} == {response.id}
    assert [r.answers[1].value for r in results.responses] == [4, 3, 5]  # newest first
    assert aggregation.get_survey_results(db, 999) is None
