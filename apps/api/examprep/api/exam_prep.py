from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from examprep.api.deps import get_blob_store, get_current_user_id, get_generative_client
from examprep.core.errors import ValidationError
from examprep.db.session import get_db
from examprep.services.blob_store import BlobStore
from examprep.services.llm.base import GenerativeClient
from examprep.services.module_content import get_module_content, shrink_summary
from examprep.services.pipeline import ExamPrepPipeline
from examprep.services.syllabus import analyze_syllabus

router = APIRouter(prefix="/exam-prep", tags=["exam_prep"])


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ProcessModuleRequest(_CamelModel):
    module_id: int | str | None = Field(default=None, alias="moduleId")
    file_paths: Any = Field(default=None, alias="filePaths")


class ProcessModuleResponse(BaseModel):
    success: bool
    compliant: bool
    attempts: int
    skipped: list[dict[str, str]]


class ShrinkSummaryRequest(_CamelModel):
    module_id: int | str | None = Field(default=None, alias="moduleId")
    current_summary: str | None = Field(default=None, alias="currentSummary")


class ShrinkSummaryResponse(BaseModel):
    summary: str


class AnalyzeSyllabusRequest(_CamelModel):
    subject_id: int | str | None = Field(default=None, alias="subjectId")
    syllabus_path: str | None = Field(default=None, alias="syllabusPath")


class AnalyzeSyllabusResponse(BaseModel):
    success: bool
    important_topics: str


@router.post("/process", response_model=ProcessModuleResponse)
def process_module(
    req: ProcessModuleRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    blob_store: BlobStore = Depends(get_blob_store),
    generator: GenerativeClient = Depends(get_generative_client),
) -> ProcessModuleResponse:
    if req.module_id is None or req.module_id == "":
        raise ValidationError("Missing moduleId")

    pipeline = ExamPrepPipeline(db, blob_store, generator)
    result = pipeline.process(req.module_id, user_id, req.file_paths)

    return ProcessModuleResponse(
        success=True,
        compliant=result.outcome.compliant,
        attempts=result.outcome.attempts,
        skipped=result.skipped,
    )


@router.get("/modules/{module_id}/content")
def module_content(
    module_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return {"ok": True, **get_module_content(db, module_id, user_id)}


@router.post("/shrink-summary", response_model=ShrinkSummaryResponse)
def shrink_module_summary(
    req: ShrinkSummaryRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    generator: GenerativeClient = Depends(get_generative_client),
) -> ShrinkSummaryResponse:
    if req.module_id is None or req.module_id == "":
        raise ValidationError("Missing moduleId")
    summary = shrink_summary(db, generator, req.module_id, user_id, req.current_summary)
    return ShrinkSummaryResponse(summary=summary)


@router.post("/analyze-syllabus", response_model=AnalyzeSyllabusResponse)
def analyze_subject_syllabus(
    req: AnalyzeSyllabusRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    blob_store: BlobStore = Depends(get_blob_store),
    generator: GenerativeClient = Depends(get_generative_client),
) -> AnalyzeSyllabusResponse:
    if not req.subject_id or not req.syllabus_path:
        raise ValidationError("Missing required fields")
    topics = analyze_syllabus(db, blob_store, generator, req.subject_id, user_id, req.syllabus_path)
    return AnalyzeSyllabusResponse(success=True, important_topics=topics)
