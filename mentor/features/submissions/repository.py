from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

from postgrest.exceptions import APIError

from mentor.common.utils import utcnow_iso
from mentor.db.supabase import all_rows, first_row, get_supabase, is_invalid_text_representation

logger = logging.getLogger("submissions.repository")

REVIEW_PENDING = "pending"
REVIEW_PROCESSING = "processing"
REVIEW_COMPLETED = "completed"
REVIEW_FAILED = "failed"

CLAIMABLE_STATUSES = [REVIEW_PENDING, REVIEW_FAILED]


class SubmissionsRepository:
    """Data access for ``code_submissions`` rows."""

    _TABLE = "code_submissions"

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        client = await get_supabase()
        row = dict(data)
        row.setdefault("id", str(uuid4()))
        row.setdefault("submitted_at", utcnow_iso())
        row.setdefault("is_reviewed", False)
        row.setdefault("review_id", None)
        row.setdefault("review_status", REVIEW_PENDING)
        row.setdefault("review_attempts", 0)
        row.setdefault("last_error", None)
        resp = await client.table(self._TABLE).insert(row).execute()
        return first_row(resp) or row

    async def get(self, submission_id: str) -> Optional[Dict[str, Any]]:
        client = await get_supabase()
        try:
            resp = await client.table(self._TABLE).select("*").eq("id", submission_id).limit(1).execute()
        except APIError as exc:
            if not is_invalid_text_representation(exc):
                raise
            logger.info("submission_lookup_malformed_id id=%s", submission_id)
            return None
        return first_row(resp)

    async def find_by_user_challenge(self, user_id: str, challenge_id: str) -> Optional[Dict[str, Any]]:
        client = await get_supabase()
        resp = await (
            client.table(self._TABLE)
            .select("*")
            .eq("user_id", user_id)
            .eq("challenge_id", challenge_id)
            .limit(1)
            .execute()
        )
        return first_row(resp)

    async def list_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        client = await get_supabase()
        resp = await (
            client.table(self._TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("submitted_at", desc=True)
            .execute()
        )
        return all_rows(resp)

    async def list_by_ids(self, submission_ids: List[str]) -> List[Dict[str, Any]]:
        ids = sorted({str(sid) for sid in submission_ids if sid})
        if not ids:
            return []
        client = await get_supabase()
        resp = await client.table(self._TABLE).select("*").in_("id", ids).execute()
        return all_rows(resp)

    async def claim_for_review(
        self, submission_id: str, statuses: Optional[List[str]] = None
    ) -> Optional[Dict[str, Any]]:
        """Move the row to ``processing`` only if its status is one of ``statuses``.

        Returns the updated row, or None when another worker holds it or it is done.
        """
        client = await get_supabase()
        resp = await (
            client.table(self._TABLE)
            .update({"review_status": REVIEW_PROCESSING})
            .eq("id", submission_id)
            .in_("review_status", statuses or CLAIMABLE_STATUSES)
            .execute()
        )
        return first_row(resp)

    async def mark_reviewed(self, submission_id: str, review_id: str) -> None:
        client = await get_supabase()
        await (
            client.table(self._TABLE)
            .update({
                "is_reviewed": True,
                "review_id": review_id,
                "review_status": REVIEW_COMPLETED,
                "last_error": None,
            })
            .eq("id", submission_id)
            .execute()
        )

    async def mark_failed(self, submission_id: str, error: str, attempts: int) -> None:
        client = await get_supabase()
        await (
            client.table(self._TABLE)
            .update({
                "review_status": REVIEW_FAILED,
                "review_attempts": attempts,
                "last_error": error[:500],
            })
            .eq("id", submission_id)
            .neq("review_status", REVIEW_COMPLETED)
            .execute()
        )
        logger.info("submission_review_failed id=%s attempts=%s", submission_id, attempts)


submissions_repository = SubmissionsRepository()

__all__ = [
    "CLAIMABLE_STATUSES",
    "REVIEW_COMPLETED",
    "REVIEW_FAILED",
    "REVIEW_PENDING",
    "REVIEW_PROCESSING",
    "SubmissionsRepository",
    "submissions_repository",
]
