from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from examprep.core.errors import PersistenceError, StaleGenerationError
from examprep.core.logger import get_logger
from examprep.models.flashcard import ExamFlashcard
from examprep.models.module import ExamModule
from examprep.models.question import ExamQuestion
from examprep.services.normalizer import GeneratedContent

logger = get_logger(__name__)

ERROR_MESSAGE_MAX_CHARS = 1000


def claim_generation(db: Session, module_id: int, user_id: str) -> int:
    """
    Start a run: bump the module's generation_version and mark it processing.
    The returned token must still match at save time or the run is stale.
    """
    token = db.execute(
        update(ExamModule)
        .where(ExamModule.id == module_id, ExamModule.user_id == user_id)
        .values(
            generation_version=ExamModule.generation_version + 1,
            status="processing",
            error=None,
        )
        .returning(ExamModule.generation_version)
        .execution_options(synchronize_session=False)
    ).scalar_one()
    db.commit()
    return int(token)


def save_generated_content(
    db: Session,
    module_id: int,
    user_id: str,
    content: GeneratedContent,
    token: int,
) -> None:
    """
    Replace the module's questions and flashcards and publish the summary.

    Runs as one transaction guarded by the version token: a writer whose token
    was superseded by a newer run writes nothing.
    """
    try:
        res = db.execute(
            update(ExamModule)
            .where(
                ExamModule.id == module_id,
                ExamModule.user_id == user_id,
                ExamModule.generation_version == token,
            )
            .values(status="ready", summary=content.summary, error=None)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount == 0:
            db.rollback()
            raise StaleGenerationError(module_id, token)

        db.query(ExamQuestion).filter(ExamQuestion.module_id == module_id).delete(synchronize_session=False)
        db.query(ExamFlashcard).filter(ExamFlashcard.module_id == module_id).delete(synchronize_session=False)

        db.add_all(
            ExamQuestion(
                module_id=module_id,
                user_id=user_id,
                question=q.question,
                answer=q.answer,
                is_most_likely=bool(q.is_most_likely),
                visual_search_query=q.visual_search_query,
            )
            for q in content.questions
        )
        db.add_all(
            ExamFlashcard(module_id=module_id, user_id=user_id, front=f.front, back=f.back)
            for f in content.flashcards
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to save generated content: {e}") from e

    logger.info(
        f"Module {module_id}: saved {len(content.questions)} question(s), "
        f"{len(content.flashcards)} flashcard(s) (version {token})"
    )


def mark_module_error(db: Session, module_id: int, user_id: str, message: str, token: int | None = None) -> None:
    """
    Best-effort status write after a failed run. Never raises: a failure here
    must not replace the error the caller is already handling.
    """
    try:
        db.rollback()
        stmt = update(ExamModule).where(ExamModule.id == module_id, ExamModule.user_id == user_id)
        if token is not None:
            # a newer run owns the module now; leave its status alone
            stmt = stmt.where(ExamModule.generation_version == token)
        stmt = stmt.values(status="error", error=(message or "")[:ERROR_MESSAGE_MAX_CHARS])
        db.execute(stmt.execution_options(synchronize_session=False))
        db.commit()
    except Exception as e:
        logger.error(f"Could not mark module {module_id} as errored: {e}")
