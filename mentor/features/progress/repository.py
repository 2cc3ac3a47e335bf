from __future__ import annotations

from typing import Any, Dict, Optional

from mentor.db.supabase import first_row, get_supabase


class ProgressRepository:
    _TABLE = "mentor_progress"

    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        client = await get_supabase()
        resp = await client.table(self._TABLE).select("*").eq("user_id", user_id).limit(1).execute()
        return first_row(resp)

    async def upsert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        client = await get_supabase()
        resp = await client.table(self._TABLE).upsert(record, on_conflict="user_id").execute()
        return first_row(resp) or record

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        client = await get_supabase()
        resp = await client.table(self._TABLE).update(changes).eq("user_id", user_id).execute()
        return first_row(resp)


progress_repository = ProgressRepository()

__all__ = ["ProgressRepository", "progress_repository"]
