from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from examprep.core.config import settings
from examprep.core.errors import GenerationError, RateLimitError
from examprep.core.logger import get_logger
from examprep.services.content_extraction import BlobPart, Part
from examprep.services.llm.base import extract_json, find_retry_delay

logger = get_logger(__name__)


def _to_contents(parts: Sequence[Part]) -> list[Any]:
    contents: list[Any] = []
    for p in parts:
        if isinstance(p, BlobPart):
            contents.append(types.Part.from_bytes(data=p.data, mime_type=p.mime_type))
        else:
            contents.append(p.text)
    return contents


class GeminiClient:
    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        api_key = api_key or settings.gemini_api_key
        if not api_key:
            raise ValueError("GEMINI_API_KEY is missing")
        self.model = model or settings.gemini_model
        self.client = genai.Client(api_key=api_key)

    def _generate(self, parts: Sequence[Part], config: types.GenerateContentConfig | None = None) -> str:
        try:
            resp = self.client.models.generate_content(
                model=self.model,
                contents=_to_contents(parts),
                config=config,
            )
        except genai_errors.APIError as e:
            if e.code == 429 or (e.status or "").upper() == "RESOURCE_EXHAUSTED":
                retry_after = find_retry_delay(e.details) or settings.default_retry_after_sec
                logger.warning(f"Gemini rate limited; retry after {retry_after}s")
                raise RateLimitError(retry_after, message=e.message or str(e)) from e
            logger.exception(f"Gemini API error: {e}")
            raise GenerationError(f"Gemini API error: {e}") from e
        return resp.text or ""

    def generate_json(self, parts: Sequence[Part]) -> Any:
        text = self._generate(parts, types.GenerateContentConfig(response_mime_type="application/json"))
        return extract_json(text)

    def generate_text(self, parts: Sequence[Part]) -> str:
        return self._generate(parts).strip()
