"""
Tableau communautaire: likes (post_likes) et commentaires (post_comments).
"""
from typing import Any, Dict, List, Optional
import logging
import roomezes.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

# module roomezes.community.repository
def toggle_like(post_id: str, user_id: str) -> bool:
    """Ajoute le like de l'utilisateur, ou le retire s'il existe déjà. Retourne l'état final (liké ou non)."""
    client = supabase_client.get_service_supabase()
    existing = (
        client.table("post_likes")
        .select("id")
        .eq("post_id", post_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    if existing.data:
        (
            client.table("post_likes")
            .delete()
            .eq("post_id", post_id)
            .eq("user_id", user_id)
            .execute()
        )
        return False
    client.table("post_likes").insert({"post_id": post_id, "user_id": user_id}).execute()
    return True

def add_comment(post_id: str, user_id: str, user_name: str, comment: str) -> Optional[Dict[str, Any]]:
    res = (
        supabase_client.get_service_supabase()
        .table("post_comments")
        .insert({
            "post_id": post_id,
            "user_id": user_id,
            "comment": comment,
            "user_name": user_name,
        })
        .execute()
    )
    return res.data[0] if res.data else None

def count_likes(post_id: str) -> int:
    res = (
        supabase_client.get_service_supabase()
        .table("post_likes")
        .select("*", count="exact")
        .eq("post_id", post_id)
        .execute()
    )
    return int(res.count or 0)

def list_comments(post_id: str) -> List[Dict[str, Any]]:
    res = (
        supabase_client.get_service_supabase()
        .table("post_comments")
        .select("*")
        .eq("post_id", post_id)
        .order("created_at")
        .execute()
    )
    return res.data or []
