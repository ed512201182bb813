from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any, Protocol

from examprep.core.errors import GenerationError
from examprep.services.content_extraction import Part

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


class GenerativeClient(Protocol):
    def generate_json(self, parts: Sequence[Part]) -> Any: ...

    def generate_text(self, parts: Sequence[Part]) -> str: ...


def extract_json(text: str) -> Any:
    """
    Best-effort JSON extraction if the model wraps its answer in fences or prose.
    """
    text = _FENCE_RE.sub("", text or "").strip()
    if not text:
        raise GenerationError("Empty response from generative API")

    # Fast path
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Outermost JSON object
    start = text.find("{")
    end = text.rfind("}")
    if start >= 0 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass

    raise GenerationError(f"Generative API returned non-JSON. First 200 chars: {text[:200]!r}")


def find_retry_delay(details: Any) -> int | None:
    """Walk a google.rpc error payload looking for RetryInfo.retryDelay ("30s")."""
    if isinstance(details, dict):
        delay = details.get("retryDelay") or details.get("retry_delay")
        if isinstance(delay, str):
            m = re.match(r"^\s*(\d+(?:\.\d+)?)s?\s*$", delay)
            if m:
                return max(1, round(float(m.group(1))))
        for v in details.values():
            found = find_retry_delay(v)
            if found is not None:
                return found
    elif isinstance(details, list):
        for v in details:
            found = find_retry_delay(v)
            if found is not None:
                return found
    return None
