from __future__ import annotations

from fastapi import Header

from examprep.core.errors import UnauthorizedError
from examprep.core.logger import get_logger
from examprep.services.blob_store import BlobStore, SupabaseBlobStore, get_supabase_client
from examprep.services.llm import build_generative_client
from examprep.services.llm.base import GenerativeClient

logger = get_logger(__name__)


def get_current_user_id(authorization: str | None = Header(default=None)) -> str:
    """Resolve the caller from a Supabase access token (Authorization: Bearer <jwt>)."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise UnauthorizedError()
    token = authorization[7:].strip()
    if not token:
        raise UnauthorizedError()

    try:
        resp = get_supabase_client().auth.get_user(token)
    except Exception as e:
        logger.info(f"Token rejected: {e}")
        raise UnauthorizedError() from e

    user = getattr(resp, "user", None)
    if not user or not getattr(user, "id", None):
        raise UnauthorizedError()
    return str(user.id)


def get_blob_store() -> BlobStore:
    return SupabaseBlobStore(get_supabase_client())


def get_generative_client() -> GenerativeClient:
    return build_generative_client()
