from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from examprep.core.config import settings
from examprep.core.errors import (
    ExamPrepError,
    NoUsableContentError,
    NotFoundError,
    PipelineError,
    RateLimitError,
)
from examprep.core.logger import get_logger
from examprep.models.module import ExamModule
from examprep.models.subject import ExamSubject
from examprep.services.blob_store import BlobStore
from examprep.services.content_extraction import (
    Part,
    StageTracker,
    TextPart,
    extract_content,
    resolve_file_paths,
    syllabus_parts,
)
from examprep.services.generation import GenerationOutcome, GenerationPolicy, generate_with_count_enforcement
from examprep.services.llm.base import GenerativeClient
from examprep.services.llm.prompts import (
    TOPIC_ONLY_TEMPLATE,
    build_generation_prompt,
    expected_flashcard_count,
)
from examprep.services.normalizer import NormalizeOptions
from examprep.services.persistence import claim_generation, mark_module_error, save_generated_content

logger = get_logger(__name__)


@dataclass
class ProcessResult:
    module_id: int
    outcome: GenerationOutcome
    skipped: list[dict[str, str]]


def get_module_for_user(db: Session, module_id: Any, user_id: str) -> ExamModule:
    try:
        module_pk = int(module_id)
    except (TypeError, ValueError):
        raise NotFoundError("Module not found") from None

    module = (
        db.query(ExamModule)
        .filter(ExamModule.id == module_pk, ExamModule.user_id == user_id)
        .first()
    )
    if not module:
        raise NotFoundError("Module not found")
    return module


def generation_options(subject: ExamSubject | None, max_questions: int) -> NormalizeOptions:
    most_likely = max(1, int(subject.questions_per_module)) if subject and subject.questions_per_module else 1
    return NormalizeOptions(
        min_questions=most_likely,
        max_questions=max_questions,
        expected_most_likely=most_likely,
        expected_flashcards=expected_flashcard_count(max_questions),
    )


class ExamPrepPipeline:
    """
    One processing request for one module:
    resolve files -> extract content -> generate with retries -> replace stored content.
    """

    def __init__(
        self,
        db: Session,
        blob_store: BlobStore,
        generator: GenerativeClient,
        policy: GenerationPolicy | None = None,
        max_questions: int | None = None,
        allow_topic_only: bool | None = None,
        provider: str | None = None,
    ) -> None:
        self.db = db
        self.blob_store = blob_store
        self.generator = generator
        self.policy = policy or GenerationPolicy(max_attempts=settings.max_attempts)
        self.max_questions = max_questions or settings.max_questions
        self.allow_topic_only = settings.allow_topic_only if allow_topic_only is None else allow_topic_only
        self.provider = (provider or settings.provider).lower()
        self.stage = StageTracker()

    def _base_parts(self, module: ExamModule, subject: ExamSubject | None, opts: NormalizeOptions) -> list[Part]:
        prompt = build_generation_prompt(
            subject_name=(subject.name if subject else None) or "this subject",
            module_name=module.name,
            module_number=module.module_number,
            exam_type=subject.exam_type if subject else None,
            max_questions=opts.max_questions,
            most_likely=opts.expected_most_likely,
            marks_per_question=(subject.marks_per_question if subject else None) or 10,
            flashcards=opts.expected_flashcards,
            important_questions=subject.important_questions if subject else None,
        )
        parts: list[Part] = [TextPart(prompt)]
        if subject and subject.syllabus_path:
            self.stage("storage.download.syllabus")
            parts.extend(syllabus_parts(subject.syllabus_path, self.blob_store))
        return parts

    def _content_parts(
        self, module: ExamModule, subject: ExamSubject | None, file_paths: list[str]
    ) -> tuple[list[Part], list[dict[str, str]]]:
        if not file_paths and self.allow_topic_only:
            logger.info(f"Module {module.id}: no files, generating from topic only")
            topic = TOPIC_ONLY_TEMPLATE.format(
                subject_name=(subject.name if subject else None) or "this subject",
                module_name=module.name,
                exam_type=(subject.exam_type if subject else None) or "endterm",
            )
            return [TextPart(topic)], []

        extraction = extract_content(file_paths, self.blob_store, on_stage=self.stage)
        if not extraction.has_content:
            # hard stop: the generative API never sees an empty request
            raise NoUsableContentError(extraction.skipped)
        return extraction.parts, extraction.skipped

    def process(self, module_id: Any, user_id: str, file_paths: Any = None) -> ProcessResult:
        db = self.db
        token: int | None = None
        module_pk: int | None = None

        try:
            self.stage("db.exam_modules")
            module = get_module_for_user(db, module_id, user_id)
            module_pk = module.id
            subject = module.subject

            self.stage("db.exam_module_files")
            paths = resolve_file_paths(db, module, user_id, file_paths)

            opts = generation_options(subject, self.max_questions)
            base_parts = self._base_parts(module, subject, opts)
            content_parts, skipped = self._content_parts(module, subject, paths)

            self.stage("db.claim_generation")
            token = claim_generation(db, module_pk, user_id)

            self.stage(f"{self.provider}.generateJSON")
            outcome = generate_with_count_enforcement(self.generator, [*base_parts, *content_parts], opts, self.policy)

            self.stage("db.save_generated_content")
            save_generated_content(db, module_pk, user_id, outcome.content, token)

            self.stage("done")
            return ProcessResult(module_id=module_pk, outcome=outcome, skipped=skipped)

        except RateLimitError as e:
            e.stage = self.stage.stage
            self._mark_failed(module_pk, user_id, f"Rate limited (retry after {e.retry_after_seconds}s)", token)
            raise
        except ExamPrepError as e:
            self._mark_failed(module_pk, user_id, e.message, token)
            if e.status_code >= 500 and not isinstance(e, PipelineError):
                raise PipelineError(self.stage.stage, e) from e
            raise
        except Exception as e:
            logger.exception(f"Processing failed at stage={self.stage.stage}: {e}")
            self._mark_failed(module_pk, user_id, f"{self.stage.stage}: {e}", token)
            raise PipelineError(self.stage.stage, e) from e

    def _mark_failed(self, module_id: int | None, user_id: str, message: str, token: int | None) -> None:
        if module_id is None or token is None:
            return
        mark_module_error(self.db, module_id, user_id, message, token)
