from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from postgrest.exceptions import APIError

from mentor.common.utils import utcnow_iso
from mentor.db.supabase import all_rows, first_row, get_supabase, is_invalid_text_representation

logger = logging.getLogger("challenges.repository")


class ChallengeRepository:
    _TABLE = "challenges"

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        client = await get_supabase()
        row = dict(data)
        row.setdefault("id", str(uuid4()))
        row.setdefault("created_at", utcnow_iso())
        row.setdefault("is_active", True)
        resp = await client.table(self._TABLE).insert(row).execute()
        stored = first_row(resp) or row
        logger.info("challenge_saved id=%s difficulty=%s category=%s", stored.get("id"), stored.get("difficulty"), stored.get("category"))
        return stored

    async def get(self, challenge_id: str) -> Optional[Dict[str, Any]]:
        client = await get_supabase()
        try:
            resp = await client.table(self._TABLE).select("*").eq("id", challenge_id).limit(1).execute()
        except APIError as exc:
            if not is_invalid_text_representation(exc):
                raise
            logger.info("challenge_lookup_malformed_id id=%s", challenge_id)
            return None
        return first_row(resp)

    async def list_by_ids(self, challenge_ids: Iterable[str]) -> List[Dict[str, Any]]:
        ids = sorted({str(cid) for cid in challenge_ids if cid})
        if not ids:
            return []
        client = await get_supabase()
        resp = await client.table(self._TABLE).select("*").in_("id", ids).execute()
        return all_rows(resp)


challenge_repository = ChallengeRepository()

__all__ = ["challenge_repository", "ChallengeRepository"]
