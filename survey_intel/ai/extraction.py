# survey_intel/ai/extraction.py
"""Pull one JSON value out of free model text.

The model is asked for JSON but usually wraps it in prose or code fences.
`extract_json` strips fences, slices from the first opening bracket to the
last closing bracket of the expected kind and parses that slice.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Literal, Optional

Expected = Literal["object", "array"]

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_BRACKETS = {"object": ("{", "}", dict), "array": ("[", "]", list)}


@dataclass(frozen=True)
class Extraction:
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).replace("```", "").strip()


def extract_json(text: Optional[str], expect: Expected = "object") -> Extraction:
    if not text:
        return Extraction(error="empty response")
    opening, closing, kind = _BRACKETS[expect]
    clean = strip_code_fences(text)
    start = clean.find(opening)
    end = clean.rfind(closing)
    if start == -1 or end == -1 or end < start:
        return Extraction(error=f"no JSON {expect} found")
    try:
        value = json.loads(clean[start:end + 1])
    except json.JSONDecodeError as e:
        return Extraction(error=f"invalid JSON {expect}: {e.msg}")
    if not isinstance(value, kind):
        return Extraction(error=f"expected JSON {expect}, got {type(value).__name__}")
    return Extraction(value=value)
