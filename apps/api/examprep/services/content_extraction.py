from __future__ import annotations

import base64
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from examprep.core.errors import BlobDownloadError
from examprep.core.logger import get_logger
from examprep.models.module import ExamModule
from examprep.models.module_file import ExamModuleFile
from examprep.services.blob_store import BlobStore
from examprep.services.office_text import extract_office_text
from examprep.services.storage_paths import normalize_storage_path

logger = get_logger(__name__)

NO_TEXT_REASON = "Unsupported file type or no text extracted"

_IMAGE_MIME_TYPES = {"png": "image/png", "jpg": "image/jpeg", "jpeg": "image/jpeg"}


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class BlobPart:
    data: bytes
    mime_type: str

    @property
    def b64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


Part = TextPart | BlobPart


@dataclass
class ExtractionResult:
    parts: list[Part] = field(default_factory=list)
    skipped: list[dict[str, str]] = field(default_factory=list)

    @property
    def has_content(self) -> bool:
        return bool(self.parts)


class StageTracker:
    """Coarse breadcrumb of where a request currently is; reported on errors."""

    def __init__(self, stage: str = "init") -> None:
        self.stage = stage

    def __call__(self, stage: str) -> None:
        logger.debug(f"stage -> {stage}")
        self.stage = stage


def file_extension(key: str) -> str:
    name = key.rsplit("/", 1)[-1]
    return name.rsplit(".", 1)[-1].lower() if "." in name else ""


def resolve_file_paths(db: Session, module: ExamModule, user_id: str, requested: Any = None) -> list[str]:
    """
    Client-supplied paths win. Otherwise use every file recorded for the module,
    oldest first, so generation sees all of the material.
    """
    if isinstance(requested, list):
        paths = [p for p in requested if isinstance(p, str) and p]
        if paths:
            return paths

    rows = (
        db.query(ExamModuleFile.file_path)
        .filter(ExamModuleFile.module_id == module.id, ExamModuleFile.user_id == user_id)
        .order_by(ExamModuleFile.created_at.asc(), ExamModuleFile.id.asc())
        .all()
    )
    return [r.file_path for r in rows if r.file_path]


def extract_content(
    file_paths: Sequence[str],
    blob_store: BlobStore,
    extractor: Callable[[bytes, str], str] = extract_office_text,
    on_stage: Callable[[str], None] | None = None,
) -> ExtractionResult:
    """
    Download each file in order and turn it into a model-consumable part.

    PDFs go through as inline binary; office documents become "[File: key]" text.
    One bad file never aborts the batch: it becomes a {filePath, reason} record.
    """
    mark = on_stage or (lambda _s: None)
    result = ExtractionResult()

    for raw_path in file_paths:
        key = normalize_storage_path(raw_path)
        try:
            mark(f"storage.download:{key}")
            try:
                data = blob_store.download(key)
            except BlobDownloadError as e:
                logger.warning(f"Download failed for {key}: {e}")
                result.skipped.append({"filePath": key, "reason": f"Download failed: {e}"})
                continue

            ext = file_extension(key)
            if ext == "pdf":
                mark(f"file.pdf.base64:{key}")
                result.parts.append(BlobPart(data=data, mime_type="application/pdf"))
                continue

            mark(f"file.office.extractText:{key}")
            text = (extractor(data, ext) or "").strip()
            if not text:
                result.skipped.append({"filePath": key, "reason": NO_TEXT_REASON})
                continue

            result.parts.append(TextPart(f"\n\n[File: {key}]\n{text}"))
        except Exception as e:
            logger.exception(f"Error processing file {key}: {e}")
            result.skipped.append({"filePath": key, "reason": f"Processing failed: {e}"})

    logger.info(f"Extracted {len(result.parts)} part(s) from {len(file_paths)} file(s); skipped {len(result.skipped)}")
    return result


def syllabus_parts(syllabus_path: str | None, blob_store: BlobStore) -> list[Part]:
    """Labeled syllabus attachment. Best effort: any failure just means no syllabus."""
    key = normalize_storage_path(syllabus_path)
    if not key:
        return []
    try:
        data = blob_store.download(key)
    except BlobDownloadError as e:
        logger.warning(f"Syllabus download failed for {key}: {e}")
        return []

    mime_type = _IMAGE_MIME_TYPES.get(file_extension(key), "application/pdf")
    logger.info(f"Attached syllabus: {key} ({mime_type})")
    return [
        TextPart("SYLLABUS DOCUMENT (Use this to prioritize questions and scope):"),
        BlobPart(data=data, mime_type=mime_type),
    ]
