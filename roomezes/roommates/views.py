from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from roomezes.utils.security import require_vendor
from roomezes.utils.rate_limit import optional_rate_limit
from roomezes.roommates import repository as roommates_repository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/roommates", tags=["Roommates API"])


class RoommateIn(BaseModel):
    name: Optional[str] = None
    gender: Optional[str] = None
    budget: Optional[float] = None
    location: Optional[str] = None
    preferences: Optional[str] = None
    contact: Optional[str] = None
    image_url: Optional[str] = None
    available: Optional[bool] = None
    owner_id: Optional[str] = None


# module roomezes.roommates.views
@router.get("")
def list_roommates():
    return {"success": True, "data": roommates_repository.list_roommates()}

@router.post("", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def add_roommate(payload: RoommateIn, user: Dict[str, Any] = Depends(require_vendor)):
    """Publie un profil de colocataire. Requis: name, contact."""
    owner_id = payload.owner_id or str(user.get("id") or "")
    if not payload.name or not payload.contact or not owner_id:
        return JSONResponse(status_code=400, content={"error": "Missing required fields: name, contact, owner_id"})
    row = {
        "name": payload.name,
        "gender": payload.gender or None,
        "budget": payload.budget or None,
        "location": payload.location or None,
        "preferences": payload.preferences or None,
        "contact": payload.contact,
        "image_url": payload.image_url,
        "available": payload.available is not False,
        "owner_id": owner_id,
    }
    try:
        data = roommates_repository.insert_roommate(row)
    except Exception as e:
        logger.exception("roommates.add_roommate failed owner_id=%s", owner_id)
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"success": True, "data": data}
