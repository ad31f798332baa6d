# survey_intel/ai/client.py
import logging
from typing import Optional, Protocol

import httpx

from survey_intel.core.config import settings

logger = logging.getLogger(__name__)


class AIBackendError(RuntimeError):
    """The generative backend could not produce text."""


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str: ...


class OllamaClient:
    """Blocking client for an Ollama-compatible /api/generate endpoint."""

    def __init__(self, base_url: str, model: str, timeout: float = 60.0, transport: httpx.BaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport

    def generate(self, prompt: str) -> str:
        payload = {"model": self.model, "prompt": prompt, "stream": False}
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as http:
                resp = http.post(f"{self.base_url}/api/generate", json=payload)
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPError as e:
            raise AIBackendError(f"generate request failed: {e}") from e
        except ValueError as e:
            raise AIBackendError("generate returned a non-JSON body") from e

        text = body.get("response") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise AIBackendError("generate body has no 'response' text")
        return text


_client: Optional[OllamaClient] = None

def get_ai_client() -> Optional[TextGenerator]:
    """FastAPI dependency; None when the backend is switched off."""
    global _client
    if not settings.AI_ENABLED:
        return None
    if _client is None:
        _client = OllamaClient(
            settings.OLLAMA_BASE_URL,
            settings.OLLAMA_MODEL,
            timeout=settings.AI_TIMEOUT_SECONDS,
        )
        logger.info("AI backend %s (model %s)", _client.base_url, _client.model)
    return _client
