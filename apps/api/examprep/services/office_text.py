from __future__ import annotations

from io import BytesIO

from docx import Document
from pptx import Presentation

from examprep.core.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_OFFICE_EXTENSIONS = ("docx", "pptx")


def _clean(text: str) -> str:
    text = "".join(ch if ch.isprintable() else " " for ch in text)
    return " ".join(text.split())


def extract_docx_text(data: bytes) -> str:
    doc = Document(BytesIO(data))
    lines: list[str] = []
    for paragraph in doc.paragraphs:
        text = _clean(paragraph.text or "")
        if text:
            lines.append(text)

    # tables carry a lot of lecture content (definitions, comparisons)
    for table in doc.tables:
        for row in table.rows:
            cells = [_clean(cell.text or "") for cell in row.cells]
            cells = [c for c in cells if c]
            if cells:
                lines.append(" | ".join(cells))
    return "\n".join(lines)


def extract_pptx_text(data: bytes) -> str:
    prs = Presentation(BytesIO(data))
    slides: list[str] = []
    for slide in prs.slides:
        parts: list[str] = []
        for shape in slide.shapes:
            if not getattr(shape, "has_text_frame", False):
                continue
            text = _clean(shape.text_frame.text or "")
            if text:
                parts.append(text)
        if parts:
            slides.append(" ".join(parts))
    return "\n".join(slides)


def extract_office_text(data: bytes, ext: str) -> str:
    """
    Best-effort plain text for slide decks and word documents.

    Returns "" for unsupported extensions and for files that fail to parse.
    """
    lower = (ext or "").lower().lstrip(".")
    if lower not in SUPPORTED_OFFICE_EXTENSIONS:
        return ""
    try:
        if lower == "docx":
            return extract_docx_text(data)
        return extract_pptx_text(data)
    except Exception as e:
        logger.warning(f"Office text extraction failed for .{lower}: {e}")
        return ""
