from __future__ import annotations

from functools import lru_cache
from typing import Protocol

from supabase import Client, create_client

from examprep.core.config import settings
from examprep.core.errors import BlobDownloadError


class BlobStore(Protocol):
    def download(self, key: str) -> bytes: ...


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError("SUPABASE_URL / SUPABASE_KEY are missing")
    return create_client(settings.supabase_url, settings.supabase_key)


class SupabaseBlobStore:
    """Downloads objects from one Supabase Storage bucket."""

    def __init__(self, client: Client, bucket: str | None = None) -> None:
        self.client = client
        self.bucket = bucket or settings.storage_bucket

    def download(self, key: str) -> bytes:
        try:
            data = self.client.storage.from_(self.bucket).download(key)
        except Exception as e:
            # storage3 raises its own error types; callers only need the message
            message = getattr(e, "message", None) or str(e) or e.__class__.__name__
            raise BlobDownloadError(message) from e
        if not data:
            raise BlobDownloadError("Object not found or empty")
        return data
