from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from examprep.core.errors import GenerationError, ValidationError
from examprep.models.flashcard import ExamFlashcard
from examprep.models.question import ExamQuestion
from examprep.services.content_extraction import TextPart
from examprep.services.llm.base import GenerativeClient
from examprep.services.llm.prompts import SHRINK_SUMMARY_TEMPLATE
from examprep.services.normalizer import ensure_point_wise_summary
from examprep.services.pipeline import get_module_for_user


def get_module_content(db: Session, module_id: Any, user_id: str) -> dict[str, Any]:
    module = get_module_for_user(db, module_id, user_id)

    questions = (
        db.query(ExamQuestion)
        .filter(ExamQuestion.module_id == module.id, ExamQuestion.user_id == user_id)
        .order_by(ExamQuestion.id.asc())
        .all()
    )
    flashcards = (
        db.query(ExamFlashcard)
        .filter(ExamFlashcard.module_id == module.id, ExamFlashcard.user_id == user_id)
        .order_by(ExamFlashcard.id.asc())
        .all()
    )

    # most-likely first, otherwise keep generation order
    questions.sort(key=lambda q: not q.is_most_likely)

    return {
        "module_id": module.id,
        "name": module.name,
        "module_number": module.module_number,
        "status": module.status,
        "summary": module.summary,
        "error": module.error,
        "questions": [
            {
                "id": q.id,
                "question": q.question,
                "answer": q.answer,
                "is_most_likely": bool(q.is_most_likely),
                "visual_search_query": q.visual_search_query,
            }
            for q in questions
        ],
        "flashcards": [{"id": f.id, "front": f.front, "back": f.back} for f in flashcards],
    }


def shrink_summary(
    db: Session,
    generator: GenerativeClient,
    module_id: Any,
    user_id: str,
    current_summary: str | None = None,
) -> str:
    """Condense a module's notes into a micro-summary and store it on the module."""
    module = get_module_for_user(db, module_id, user_id)
    source = (current_summary or module.summary or "").strip()
    if not source:
        raise ValidationError("Nothing to shrink: module has no summary")

    condensed = ensure_point_wise_summary(generator.generate_text([TextPart(SHRINK_SUMMARY_TEMPLATE.format(summary=source))]))
    if not condensed:
        raise GenerationError("Generative API returned an empty summary")

    module.summary = condensed
    db.commit()
    return condensed
