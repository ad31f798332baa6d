from survey_intel.ai.extraction import extract_json, strip_code_fences


def test_fenced_object():
    result = extract_json('Sure!\n```json\n{"a": 1, "b": [1, 2]}\n```\nHope it helps.')
    assert result.ok
    assert result.value == {"a": 1, "b": [1, 2]}


def test_array_inside_prose():
    result = extract_json('Here are the questions: [{"text": "Q"}] thanks', "array")
    assert result.ok
    assert result.value == [{"text": "Q"}]


def test_nested_braces_use_last_closing_bracket():
    result = extract_json('{"outer": {"inner": 1}}')
    assert result.value == {"outer": {"inner": 1}}


def test_empty_reply():
    result = extract_json("")
    assert not result.ok
    assert result.error == "empty response"


def test_no_json_found():
    result = extract_json("I cannot help with that", "object")
    assert not result.ok
    assert "no JSON object" in result.error


def test_invalid_json():
    result = extract_json("{not: valid}")
    assert not result.ok
    assert result.error.startswith("invalid JSON object")


def test_strip_code_fences():
    assert strip_code_fences("```JSON\n[1]\n```") == "[1]"
