from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from examprep.core.errors import BlobDownloadError, GenerationError, NotFoundError, PipelineError
from examprep.core.logger import get_logger
from examprep.models.subject import ExamSubject
from examprep.services.blob_store import BlobStore
from examprep.services.content_extraction import BlobPart, TextPart, file_extension
from examprep.services.llm.base import GenerativeClient
from examprep.services.llm.prompts import SYLLABUS_ANALYSIS_PROMPT
from examprep.services.storage_paths import normalize_storage_path

logger = get_logger(__name__)

_MIME_TYPES = {"pdf": "application/pdf", "png": "image/png", "jpg": "image/jpeg", "jpeg": "image/jpeg"}


def get_subject_for_user(db: Session, subject_id: Any, user_id: str) -> ExamSubject:
    try:
        subject_pk = int(subject_id)
    except (TypeError, ValueError):
        raise NotFoundError("Subject not found") from None

    subject = (
        db.query(ExamSubject)
        .filter(ExamSubject.id == subject_pk, ExamSubject.user_id == user_id)
        .first()
    )
    if not subject:
        raise NotFoundError("Subject not found")
    return subject


def analyze_syllabus(
    db: Session,
    blob_store: BlobStore,
    generator: GenerativeClient,
    subject_id: Any,
    user_id: str,
    syllabus_path: str,
) -> str:
    """
    Pull highlighted / important topics out of a syllabus file and store them as
    the subject's important_questions, which later feed every module prompt.
    """
    subject = get_subject_for_user(db, subject_id, user_id)
    key = normalize_storage_path(syllabus_path)

    try:
        data = blob_store.download(key)
    except BlobDownloadError as e:
        logger.error(f"Syllabus download error for {key}: {e}")
        raise PipelineError(f"storage.download.syllabus:{key}", e, error="Failed to download syllabus") from e

    mime_type = _MIME_TYPES.get(file_extension(key), "application/pdf")
    topics = generator.generate_text([TextPart(SYLLABUS_ANALYSIS_PROMPT), BlobPart(data=data, mime_type=mime_type)])
    topics = (topics or "").strip()
    if not topics:
        raise GenerationError("Generative API returned no syllabus topics")

    subject.important_questions = topics
    subject.syllabus_path = key
    db.commit()
    return topics
