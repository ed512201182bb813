"""
Exception hierarchy for the exam-prep service.

Every domain error carries:
- message: human-readable description
- status_code: HTTP status the API layer renders
- context: optional structured metadata merged into the response body
"""

from __future__ import annotations

from typing import Any


class ExamPrepError(Exception):
    """Base exception for all exam-prep domain errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}
        super().__init__(message)


class ValidationError(ExamPrepError):
    status_code = 400


class UnauthorizedError(ExamPrepError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized", context: dict[str, Any] | None = None):
        super().__init__(message, context=context)


class NotFoundError(ExamPrepError):
    status_code = 404


class StaleGenerationError(ExamPrepError):
    """A newer generation run claimed the module before this one could write."""

    status_code = 409

    def __init__(self, module_id: int, token: int):
        self.module_id = module_id
        self.token = token
        super().__init__(
            "Module was regenerated by a newer request; this result was discarded",
            context={"moduleId": module_id},
        )


class NoUsableContentError(ExamPrepError):
    """No file of the batch produced content the generative API can consume."""

    status_code = 415

    def __init__(self, skipped: list[dict[str, str]]):
        self.skipped = skipped
        super().__init__(
            "No supported content could be extracted from the uploaded files. "
            "Please upload a PDF, or a PPTX/DOCX with selectable text."
        )


class RateLimitError(ExamPrepError):
    """The generative API asked us to back off. Never retried internally."""

    status_code = 429

    def __init__(self, retry_after_seconds: int, message: str = "Rate limited by generative API"):
        self.retry_after_seconds = int(retry_after_seconds)
        self.stage: str | None = None
        super().__init__(message)


class GenerationError(ExamPrepError):
    """The generative API failed or returned something that is not JSON."""


class PersistenceError(ExamPrepError):
    """Writing the generated content failed."""


class PipelineError(ExamPrepError):
    """Wraps an unexpected failure with the stage it happened in."""

    def __init__(self, stage: str, cause: BaseException, error: str = "Failed to process module"):
        self.stage = stage
        self.cause = cause
        self.error = error
        super().__init__(str(cause) or cause.__class__.__name__)


class BlobDownloadError(Exception):
    """Raised by blob stores when an object cannot be fetched."""
