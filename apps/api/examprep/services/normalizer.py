from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any

SUMMARY_MAX_SENTENCES = 12
FALLBACK_MAX_FLASHCARDS = 10
FALLBACK_MIN_LINES = 5
FALLBACK_MAX_QUESTIONS = 8
FALLBACK_ANSWER_CHARS = 140

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+|\n+")
_BULLETS = ("- ", "• ")


@dataclass
class GeneratedQuestion:
    question: str
    answer: str
    is_most_likely: bool = False
    visual_search_query: str | None = None


@dataclass
class GeneratedFlashcard:
    front: str
    back: str


@dataclass
class GeneratedContent:
    questions: list[GeneratedQuestion] = field(default_factory=list)
    flashcards: list[GeneratedFlashcard] = field(default_factory=list)
    summary: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NormalizeOptions:
    min_questions: int
    max_questions: int
    expected_most_likely: int
    expected_flashcards: int


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def _one_line(s: str) -> str:
    return " ".join(s.split())


def _clean_questions(raw: Any, max_questions: int) -> list[GeneratedQuestion]:
    items = raw if isinstance(raw, list) else []
    out: list[GeneratedQuestion] = []
    for it in items:
        if not isinstance(it, dict):
            continue
        q = _text(it.get("question"))
        a = _text(it.get("answer"))
        if not q or not a:
            continue
        visual = _text(it.get("visual_search_query")) or None
        out.append(GeneratedQuestion(q, a, _as_bool(it.get("is_most_likely")), visual))
    return out[: max(0, max_questions)]


def _enforce_most_likely(questions: list[GeneratedQuestion], expected: int) -> None:
    """Force exactly min(expected, len(questions)) flags, keeping list order stable."""
    desired = min(max(0, expected), len(questions))
    if desired == 0:
        for q in questions:
            q.is_most_likely = False
        return

    flagged = [i for i, q in enumerate(questions) if q.is_most_likely]
    if len(flagged) > desired:
        for i in flagged[desired:]:
            questions[i].is_most_likely = False
    elif len(flagged) < desired:
        missing = desired - len(flagged)
        for q in questions:
            if missing == 0:
                break
            if not q.is_most_likely:
                q.is_most_likely = True
                missing -= 1


def _clean_flashcards(raw: Any, expected: int) -> list[GeneratedFlashcard]:
    items = raw if isinstance(raw, list) else []
    out: list[GeneratedFlashcard] = []
    for it in items:
        if not isinstance(it, dict):
            continue
        front = _text(it.get("front"))
        back = _text(it.get("back"))
        if front and back:
            out.append(GeneratedFlashcard(front, back))
    # no padding: a short list stays short so the caller can retry
    return out[: max(0, expected)]


def ensure_point_wise_summary(summary: Any) -> str:
    """
    Return the summary as "- " bullet lines.

    Already-bulleted text only gets its markers unified; prose is split into
    sentences (at most 12). Empty input gives "".
    """
    trimmed = _text(summary)
    if not trimmed:
        return ""

    lines = trimmed.splitlines()
    if any(line.strip().startswith(_BULLETS) for line in lines):
        unified = []
        for line in lines:
            stripped = line.lstrip()
            if stripped.startswith("• "):
                indent = line[: len(line) - len(stripped)]
                line = indent + "- " + stripped[2:]
            unified.append(line.rstrip())
        return "\n".join(unified).strip()

    sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(trimmed) if s and s.strip()]
    return "\n".join(f"- {_one_line(s)}" for s in sentences[:SUMMARY_MAX_SENTENCES])


def _truncate(s: str, limit: int) -> str:
    if len(s) <= limit:
        return s
    return s[:limit].rstrip() + "…"


def build_fallback_summary(
    questions: list[GeneratedQuestion],
    flashcards: list[GeneratedFlashcard],
) -> str:
    lines = [f"- {_one_line(f.front)}: {_one_line(f.back)}" for f in flashcards[:FALLBACK_MAX_FLASHCARDS]]
    if len(lines) < FALLBACK_MIN_LINES:
        for q in questions[:FALLBACK_MAX_QUESTIONS]:
            lines.append(f"- {_one_line(q.question)}: {_truncate(_one_line(q.answer), FALLBACK_ANSWER_CHARS)}")
    return "\n".join(lines)


def normalize_generated_content(raw: Any, opts: NormalizeOptions) -> GeneratedContent:
    """Coerce whatever the model returned into the canonical question/flashcard/summary shape."""
    payload = raw if isinstance(raw, dict) else {}

    questions = _clean_questions(payload.get("questions"), opts.max_questions)
    _enforce_most_likely(questions, opts.expected_most_likely)

    flashcards = _clean_flashcards(payload.get("flashcards"), opts.expected_flashcards)

    summary = ensure_point_wise_summary(payload.get("summary"))
    if not summary:
        summary = build_fallback_summary(questions, flashcards)

    return GeneratedContent(questions=questions, flashcards=flashcards, summary=summary)
