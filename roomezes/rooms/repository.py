"""
Accès aux données 'rooms' (annonces de chambres autour du campus).
"""
from typing import Any, Dict, List
import logging
import roomezes.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

ROOMS_TABLE = "rooms"

# module roomezes.rooms.repository
def insert_room(data: Dict[str, Any]) -> Dict[str, Any]:
    """Insère via service-role; les erreurs Supabase remontent à la vue (message renvoyé au client)."""
    res = (
        supabase_client.get_service_supabase()
        .table(ROOMS_TABLE)
        .insert(data)
        .execute()
    )
    return res.data[0] if res.data else {}

def list_rooms(available_only: bool = True) -> List[Dict[str, Any]]:
    try:
        query = supabase_client.get_supabase().table(ROOMS_TABLE).select("*")
        if available_only:
            query = query.eq("available", True)
        res = query.order("created_at", desc=True).execute()
        return res.data or []
    except Exception:
        logger.exception("rooms.repository.list_rooms failed")
        return []
