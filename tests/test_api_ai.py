from survey_intel.ai.client import AIBackendError


def _respond(client, survey, brew):
    q = {x["text"]: x["id"] for x in survey["questions"]}
    body = {"answers": [{"questionId": q["Favourite brew"], "value": brew}, {"questionId": q["Rate our coffee"], "value": 4}]}
    assert client.post(f"/api/surveys/{survey['id']}/responses", json=body).status_code == 201


def test_analyze_without_responses_is_400(client, login, make_survey):
    alice = login()
    survey = make_survey(alice)
    r = client.post(f"/api/surveys/{survey['id']}/analyze", headers=alice)
    assert r.status_code == 400
    assert r.json()["detail"] == "No responses to analyze"


def test_analyze_permissions(client, login, make_survey):
    survey = make_survey(login("alice"))
    url = f"/api/surveys/{survey['id']}/analyze"
    assert client.post(url).status_code == 401
    assert client.post(url, headers=login("bob")).status_code == 403
    assert client.post("/api/surveys/999/analyze", headers=login("bob")).status_code == 404


def test_analyze_without_backend_stores_basic_analysis(client, login, make_survey):
    alice = login()
    survey = make_survey(alice)
    _respond(client, survey, "A")

    r = client.post(f"/api/surveys/{survey['id']}/analyze", headers=alice)
    assert r.status_code == 200
    insights = r.json()["insights"]
    assert insights["summaryStats"] == {"totalResponses": 1, "completionRate": 1}
    assert insights["keyInsights"][0]["title"] == "Response Summary"
    assert insights["questionAnalysis"][0]["questionText"] == "Favourite brew"

    results = client.get(f"/api/surveys/{survey['id']}/results", headers=alice).json()
    assert results["analysis"]["id"] == r.json()["id"]
    stats = client.get("/api/user/stats", headers=alice).json()
    assert stats == {"totalResponses": 1, "aiInsightsGenerated": 1}


def test_analyze_backend_failure_falls_back(client, login, make_survey, use_ai, fake_ai):
    fake = use_ai(fake_ai(error=AIBackendError("down")))
    alice = login()
    survey = make_survey(alice)
    for brew in ("A", "B", "A"):
        _respond(client, survey, brew)

    r = client.post(f"/api/surveys/{survey['id']}/analyze", headers=alice)
    assert r.status_code == 200
    assert len(fake.prompts) == 1
    assert r.json()["insights"]["keyInsights"][0]["title"] == "Response Summary"


def test_analyze_uses_backend_reply(client, login, make_survey, use_ai, fake_ai):
    use_ai(fake_ai(reply='```json\n{"keyInsights": [{"type": "improvement", "title": "Offer C", "description": "Nobody picks C"}]}\n```'))
    alice = login()
    survey = make_survey(alice)
    for brew in ("A", "B", "A"):
        _respond(client, survey, brew)

    insights = client.post(f"/api/surveys/{survey['id']}/analyze", headers=alice).json()["insights"]
    assert insights["keyInsights"][0]["title"] == "Offer C"
    assert insights["summaryStats"]["totalResponses"] == 3


def test_summary(client, login, make_survey, use_ai, fake_ai):
    fake = use_ai(fake_ai(reply="People like A.\n"))
    alice = login()
    survey = make_survey(alice)
    _respond(client, survey, "A")

    r = client.post(f"/api/surveys/{survey['id']}/summary", headers=alice)
    assert r.status_code == 200
    assert r.json() == {"surveyId": survey["id"], "summary": "People like A."}
    assert "Coffee habits" in fake.prompts[0]
    # nothing is stored
    assert client.get("/api/user/stats", headers=alice).json()["aiInsightsGenerated"] == 0


def test_generate_questions(client, login):
    body = {"topic": "Remote work", "numQuestions": 3}
    assert client.post("/api/ai/generate-questions", json=body).status_code == 401
    r = client.post("/api/ai/generate-questions", json=body, headers=login())
    assert r.status_code == 200
    questions = r.json()
    assert len(questions) == 3
    assert all("Remote work" in q["text"] for q in questions)
    assert questions[0]["type"] == "rating"


def test_generate_questions_validation(client, login):
    r = client.post("/api/ai/generate-questions", json={"topic": ""}, headers=login())
    assert r.status_code == 400


def test_predict_survey(client, login):
    body = {
        "title": "Coffee",
        "questions": [{"text": f"q{i}", "required": i < 5} for i in range(10)],
    }
    r = client.post("/api/ai/predict-survey", json=body, headers=login())
    assert r.status_code == 200
    prediction = r.json()
    assert prediction["expectedCompletionRate"] == 93
    assert prediction["expectedResponseCount"] == 30
    assert len(prediction["recommendations"]) == 5
