from typing import Any, Dict, List
import logging
import roomezes.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

ROOMMATES_TABLE = "roommates_admin"

# module roomezes.roommates.repository
def insert_roommate(data: Dict[str, Any]) -> Dict[str, Any]:
    res = (
        supabase_client.get_service_supabase()
        .table(ROOMMATES_TABLE)
        .insert(data)
        .execute()
    )
    return res.data[0] if res.data else {}

def list_roommates() -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_supabase()
            .table(ROOMMATES_TABLE)
            .select("*")
            .eq("available", True)
            .order("created_at", desc=True)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("roommates.repository.list_roommates failed")
        return []
