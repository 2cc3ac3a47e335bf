from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from postgrest.exceptions import APIError

from mentor.common.utils import utcnow_iso
from mentor.db.supabase import all_rows, first_row, get_supabase, is_unique_violation

logger = logging.getLogger("reviews.repository")


class ReviewsRepository:
    _TABLE = "code_reviews"

    async def create(self, data: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
        """Insert a review; returns ``(row, created)``.

        A unique violation on ``submission_id`` yields the already stored row.
        """
        client = await get_supabase()
        row = dict(data)
        row.setdefault("id", str(uuid4()))
        row.setdefault("reviewed_at", utcnow_iso())
        try:
            resp = await client.table(self._TABLE).insert(row).execute()
        except APIError as exc:
            if not is_unique_violation(exc):
                raise
            existing = await self.get_by_submission(row["submission_id"])
            if existing is None:
                raise
            logger.info("review_insert_conflict submission_id=%s existing_id=%s", row["submission_id"], existing.get("id"))
            return existing, False
        return first_row(resp) or row, True

    async def get_by_submission(self, submission_id: str) -> Optional[Dict[str, Any]]:
        client = await get_supabase()
        resp = await client.table(self._TABLE).select("*").eq("submission_id", submission_id).limit(1).execute()
        return first_row(resp)

    async def list_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        client = await get_supabase()
        resp = await (
            client.table(self._TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("reviewed_at", desc=True)
            .execute()
        )
        return all_rows(resp)

    async def page_by_user(self, user_id: str, limit: int, offset: int) -> Tuple[List[Dict[str, Any]], int]:
        client = await get_supabase()
        resp = await (
            client.table(self._TABLE)
            .select("*", count="exact")
            .eq("user_id", user_id)
            .order("reviewed_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        rows = all_rows(resp)
        total = getattr(resp, "count", None)
        return rows, int(total if total is not None else len(rows))


reviews_repository = ReviewsRepository()

__all__ = ["ReviewsRepository", "reviews_repository"]
