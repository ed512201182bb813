from __future__ import annotations

import re
from urllib.parse import unquote, urlparse

from examprep.core.config import settings

_OBJECT_MARKER = "/storage/v1/object/"
_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_PERCENT_RE = re.compile(r"%[0-9A-Fa-f]{2}")


def _decode(value: str) -> str:
    try:
        return unquote(value, encoding="utf-8", errors="strict")
    except UnicodeDecodeError:
        return value


def normalize_storage_path(path: str | None, bucket: str | None = None) -> str:
    """
    Map whatever got persisted for a file (bare key, %-encoded key, signed/public
    URL, key with the bucket name in front) to the raw object key.

    Never raises. Canonical keys come back unchanged.
    """
    bucket = bucket or settings.storage_bucket
    trimmed = (path or "").strip()
    if not trimmed:
        return trimmed

    # Full URL: keep what follows <marker>/<sign|public|authenticated>/<bucket>/
    if _URL_RE.match(trimmed):
        try:
            pathname = urlparse(trimmed).path or ""
        except ValueError:
            pathname = ""
        idx = pathname.find(_OBJECT_MARKER)
        after = pathname[idx + len(_OBJECT_MARKER):] if idx >= 0 else pathname
        parts = [p for p in after.split("/") if p]
        if bucket in parts:
            bucket_index = parts.index(bucket)
            if bucket_index + 1 < len(parts):
                return normalize_storage_path("/".join(parts[bucket_index + 1:]), bucket)

    prefix = f"{bucket}/"
    if trimmed.startswith(prefix):
        return normalize_storage_path(trimmed[len(prefix):], bucket)

    # Decode only when it looks encoded; keep going until nothing decodes further
    if _PERCENT_RE.search(trimmed):
        decoded = _decode(trimmed)
        if decoded != trimmed:
            return normalize_storage_path(decoded, bucket)

    return trimmed
