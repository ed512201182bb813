import traceback

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from examprep import __version__
from examprep.api.exam_prep import router as exam_prep_router
from examprep.core.config import settings
from examprep.core.errors import ExamPrepError, NoUsableContentError, PipelineError, RateLimitError
from examprep.core.logger import get_logger
from examprep.db.session import get_db

logger = get_logger(__name__)

app = FastAPI(title="Exam Prep API", version=__version__)
app.include_router(exam_prep_router)


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str
    db_ok: bool


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())})


@app.exception_handler(NoUsableContentError)
async def no_content_handler(request: Request, exc: NoUsableContentError) -> JSONResponse:
    body = {"error": exc.message}
    if exc.skipped:
        body["details"] = exc.skipped
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RateLimitError)
async def rate_limit_handler(request: Request, exc: RateLimitError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        headers={"Retry-After": str(exc.retry_after_seconds)},
        content={
            "error": "Rate limited by generative API",
            "stage": exc.stage,
            "retryAfterSeconds": exc.retry_after_seconds,
            "message": exc.message,
        },
    )


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    logger.error(f"Pipeline error at stage={exc.stage}: {exc.message}")
    body = {"error": exc.error, "stage": exc.stage}
    if not settings.is_production():
        body["message"] = exc.message
        body["stack"] = "".join(traceback.format_exception(exc.cause))
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(ExamPrepError)
async def exam_prep_error_handler(request: Request, exc: ExamPrepError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc.message}")
    message = exc.message
    if exc.status_code >= 500 and settings.is_production():
        message = "Internal Server Error"
    return JSONResponse(status_code=exc.status_code, content={"error": message, **exc.context})


@app.get("/health", response_model=HealthResponse)
def health(db: Session = Depends(get_db)) -> HealthResponse:
    db_ok = False
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.warning(f"Health check DB probe failed: {e}")
    return HealthResponse(ok=True, service="api", version=app.version, db_ok=db_ok)
