"""Supabase client utilities.

Provides a lazily created, module-level cached **async** Supabase client via
`get_supabase()`. Repositories never hold on to the client; they ask for it
per call so tests can swap the cached instance.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from supabase import AsyncClient, create_async_client

from mentor.core.config import get_settings

_settings = get_settings()

_client_async: Optional[AsyncClient] = None
_client_lock = asyncio.Lock()


async def get_supabase() -> AsyncClient:
    """Return a cached `AsyncClient` instance (lazy-created, task-safe)."""
    global _client_async
    if _client_async is not None:
        return _client_async

    async with _client_lock:
        if _client_async is None:
            if not _settings.supabase_url or not _settings.supabase_key:
                raise RuntimeError("SUPABASE_URL / SUPABASE_KEY not configured")
            try:
                _client_async = await create_async_client(
                    _settings.supabase_url, _settings.supabase_key
                )
            except Exception as exc:  # pragma: no cover (network/init failure)
                raise RuntimeError("Could not create Supabase async client") from exc
    return _client_async


def is_unique_violation(exc: BaseException) -> bool:
    """True when a PostgREST error reports a unique constraint violation (23505)."""
    code = getattr(exc, "code", None)
    if code == "23505":
        return True
    details = getattr(exc, "message", None) or str(exc)
    return "23505" in str(details) or "duplicate key" in str(details).lower()


def is_invalid_text_representation(exc: BaseException) -> bool:
    """True for 22P02, e.g. a non-UUID string compared against a uuid column."""
    return getattr(exc, "code", None) == "22P02"


def first_row(resp: Any) -> Optional[dict]:
    data = getattr(resp, "data", None)
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict):
        return data
    return None


def all_rows(resp: Any) -> list[dict]:
    data = getattr(resp, "data", None)
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [data]
    return []
