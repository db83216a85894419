from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from roomezes.utils.security import require_user
from roomezes.utils.rate_limit import optional_rate_limit
from roomezes.community import repository as community_repository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/community", tags=["Community API"])

ANONYMOUS_NAME = "Anonymous User"


class CommunityActionIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: str
    post_id: str = Field(alias="postId", min_length=1)
    comment: Optional[str] = None


# module roomezes.community.views
@router.post("", dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
def community_action(payload: CommunityActionIn, user: Dict[str, Any] = Depends(require_user)):
    """
    Actions sur un post.
    - like: bascule le like de l'utilisateur -> {success, liked}
    - comment: ajoute un commentaire -> {success, data}
    - autre: 400 Invalid action
    """
    user_id = str(user.get("id") or "")
    try:
        if payload.action == "like":
            liked = community_repository.toggle_like(payload.post_id, user_id)
            return {"success": True, "liked": liked}
        if payload.action == "comment":
            if not (payload.comment or "").strip():
                raise HTTPException(status_code=400, detail="Comment required")
            metadata = user.get("metadata") or {}
            user_name = metadata.get("full_name") or metadata.get("name") or user.get("email") or ANONYMOUS_NAME
            data = community_repository.add_comment(payload.post_id, user_id, user_name, payload.comment.strip())
            return {"success": True, "data": data}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("community.action failed action=%s post_id=%s", payload.action, payload.post_id)
        raise HTTPException(status_code=500, detail=str(e))
    raise HTTPException(status_code=400, detail="Invalid action")

@router.get("")
def community_stats(post_id: Optional[str] = Query(default=None, alias="postId")):
    if not post_id:
        raise HTTPException(status_code=400, detail="Post ID required")
    try:
        likes = community_repository.count_likes(post_id)
        comments = community_repository.list_comments(post_id)
    except Exception as e:
        logger.exception("community.stats failed post_id=%s", post_id)
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "likes": likes, "comments": comments}
