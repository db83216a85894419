"""Annonces de chambres.
- Lecture publique des chambres disponibles.
- Publication réservée aux propriétaires (require_vendor: vendor/admin).
"""
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from roomezes.utils.security import require_vendor
from roomezes.utils.rate_limit import optional_rate_limit
from roomezes.rooms import repository as rooms_repository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rooms", tags=["Rooms API"])


class RoomIn(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    rent: Optional[float] = None
    distance_km: Optional[float] = None
    amenities: List[str] = Field(default_factory=list)
    contact: Optional[str] = None
    image_url: Optional[str] = None
    map_link: Optional[str] = None
    room_type: Optional[str] = None
    furnishing: Optional[str] = None
    available: Optional[bool] = None
    owner_id: Optional[str] = None


def room_row(payload: RoomIn, owner_id: str) -> Dict[str, Any]:
    return {
        "title": payload.title,
        "description": payload.description or None,
        "rent": payload.rent,
        "distance_km": payload.distance_km or None,
        "amenities": payload.amenities or [],
        "contact": payload.contact,
        "image_url": payload.image_url,
        "map_link": payload.map_link,
        "room_type": payload.room_type or None,
        "furnishing": payload.furnishing or None,
        "available": payload.available is not False,
        "owner_id": owner_id,
    }

# module roomezes.rooms.views
@router.get("")
def list_rooms():
    return {"success": True, "data": rooms_repository.list_rooms()}

@router.post("", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def add_room(payload: RoomIn, user: Dict[str, Any] = Depends(require_vendor)):
    """
    Publie une chambre.
    - Requis: title, rent, contact (owner_id = appelant par défaut)
    - 400 {"error"} si champ manquant ou écriture refusée
    """
    owner_id = payload.owner_id or str(user.get("id") or "")
    if not payload.title or not payload.rent or not payload.contact or not owner_id:
        return JSONResponse(status_code=400, content={"error": "Missing required fields: title, rent, contact, owner_id"})
    try:
        data = rooms_repository.insert_room(room_row(payload, owner_id))
    except Exception as e:
        logger.exception("rooms.add_room failed owner_id=%s", owner_id)
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"success": True, "data": data}
