from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import openai
from openai import OpenAI

from examprep.core.config import settings
from examprep.core.errors import GenerationError, RateLimitError
from examprep.core.logger import get_logger
from examprep.services.content_extraction import BlobPart, Part
from examprep.services.llm.base import extract_json

logger = get_logger(__name__)


def _build_openai_client() -> OpenAI:
    api_key = settings.openai_api_key
    if not api_key:
        raise ValueError("OPENAI_API_KEY is missing")

    # no SDK retries: a 429 must reach the caller
    return OpenAI(api_key=api_key, timeout=settings.openai_timeout_sec, max_retries=0)


def _to_content(parts: Sequence[Part]) -> list[dict[str, Any]]:
    content: list[dict[str, Any]] = []
    for i, p in enumerate(parts):
        if isinstance(p, BlobPart):
            data_url = f"data:{p.mime_type};base64,{p.b64}"
            if p.mime_type.startswith("image/"):
                content.append({"type": "image_url", "image_url": {"url": data_url}})
            else:
                content.append({"type": "file", "file": {"filename": f"document-{i}.pdf", "file_data": data_url}})
        else:
            content.append({"type": "text", "text": p.text})
    return content


def _retry_after(e: openai.RateLimitError) -> int:
    headers = getattr(getattr(e, "response", None), "headers", None) or {}
    raw = headers.get("retry-after")
    try:
        return max(1, round(float(raw)))
    except (TypeError, ValueError):
        return settings.default_retry_after_sec


class OpenAIClient:
    def __init__(self, client: OpenAI | None = None, model: str | None = None) -> None:
        self.client = client or _build_openai_client()
        self.model = model or settings.openai_model

    def _chat(self, parts: Sequence[Part], json_mode: bool) -> str:
        messages = [{"role": "user", "content": _to_content(parts)}]
        try:
            if json_mode:
                chat = self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    response_format={"type": "json_object"},
                )
            else:
                chat = self.client.chat.completions.create(model=self.model, messages=messages)
        except openai.RateLimitError as e:
            retry_after = _retry_after(e)
            logger.warning(f"OpenAI rate limited; retry after {retry_after}s")
            raise RateLimitError(retry_after, message=str(e)) from e
        except openai.OpenAIError as e:
            logger.exception(f"OpenAI API error: {e}")
            raise GenerationError(f"OpenAI API error: {e}") from e
        return (chat.choices[0].message.content or "").strip()

    def generate_json(self, parts: Sequence[Part]) -> Any:
        return extract_json(self._chat(parts, json_mode=True))

    def generate_text(self, parts: Sequence[Part]) -> str:
        return self._chat(parts, json_mode=False)
