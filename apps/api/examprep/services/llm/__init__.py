from __future__ import annotations

from examprep.core.config import settings
from examprep.services.llm.base import GenerativeClient


def build_generative_client(provider: str | None = None) -> GenerativeClient:
    provider = (provider or settings.provider).lower()
    if provider == "openai":
        from examprep.services.llm.openai_client import OpenAIClient

        return OpenAIClient()
    if provider == "gemini":
        from examprep.services.llm.gemini_client import GeminiClient

        return GeminiClient()
    raise ValueError(f"Unknown EXAM_PREP_PROVIDER: {provider}")
