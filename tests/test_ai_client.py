import json

import httpx
import pytest

from survey_intel.ai.client import AIBackendError, OllamaClient


def _client(handler):
    return OllamaClient("http://ollama.test/", "llama3", timeout=5, transport=httpx.MockTransport(handler))


def test_generate_posts_prompt_and_returns_text():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": "hello", "done": True})

    assert _client(handler).generate("Say hi") == "hello"
    assert seen["url"] == "http://ollama.test/api/generate"
    assert seen["body"] == {"model": "llama3", "prompt": "Say hi", "stream": False}


def test_http_error_becomes_backend_error():
    client = _client(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(AIBackendError):
        client.generate("x")


def test_missing_response_text_is_backend_error():
    client = _client(lambda request: httpx.Response(200, json={"error": "model not found"}))
    with pytest.raises(AIBackendError):
        client.generate("x")


def test_non_json_body_is_backend_error():
    client = _client(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(AIBackendError):
        client.generate("x")


def test_connection_failure_is_backend_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(AIBackendError):
        _client(handler).generate("x")
