"""Prestataires de services et laveries.
- GET publics; publication réservée aux prestataires (require_vendor).
- Réponses d'erreur {"error": message} comme les autres routes de publication.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
import logging
import math

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from roomezes.utils.security import require_vendor
from roomezes.utils.rate_limit import optional_rate_limit
from roomezes.services import repository as services_repository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/services", tags=["Services API"])


class ServiceIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    # Nombre strict: "120" en chaîne est refusé
    price: Any = None
    category: Optional[str] = None
    service_type: Optional[str] = None
    available: Optional[bool] = None
    owner_id: Optional[str] = None


class LaundryShopIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Any = None
    image_url: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    pricing_details: Optional[Dict[str, Any]] = None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))

# module roomezes.services.views
@router.get("")
def list_services(service_type: Optional[str] = Query(default=None, alias="type")):
    return {"success": True, "data": services_repository.list_services(service_type)}

@router.post("", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def add_service(payload: ServiceIn, user: Dict[str, Any] = Depends(require_vendor)):
    owner_id = payload.owner_id or str(user.get("id") or "")
    if not payload.name or not payload.service_type or not owner_id or not _is_number(payload.price):
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})
    row = {
        "name": payload.name,
        "description": payload.description or "",
        "price": payload.price,
        "category": payload.category,
        "service_type": payload.service_type,
        "available": True if payload.available is None else payload.available,
        "owner_id": owner_id,
    }
    try:
        data = services_repository.insert_service(row)
    except Exception as e:
        # Refus RLS côté Supabase
        logger.exception("services.add_service failed owner_id=%s", owner_id)
        return JSONResponse(status_code=403, content={"error": str(e)})
    return {"data": data}

@router.get("/laundry")
def list_laundry_shops():
    try:
        return {"success": True, "data": services_repository.list_laundry_shops()}
    except Exception as e:
        logger.exception("services.list_laundry_shops failed")
        return JSONResponse(status_code=500, content={"error": str(e)})

@router.post("/laundry", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def add_laundry_shop(payload: LaundryShopIn, user: Dict[str, Any] = Depends(require_vendor)):
    """Requis: name et price (nombre ou chaîne numérique)."""
    try:
        price = Decimal(str(payload.price)) if payload.price not in (None, "") else None
    except InvalidOperation:
        price = None
    if not payload.name or price is None or not price.is_finite() or price <= 0:
        return JSONResponse(status_code=400, content={"error": "Name and price are required"})
    row = {
        "name": payload.name,
        "description": payload.description,
        "price": float(price),
        "image_url": payload.image_url,
        "phone": payload.phone,
        "address": payload.address,
        "pricing_details": payload.pricing_details,
        "available": True,
        "owner_id": str(user.get("id") or "") or None,
    }
    try:
        data = services_repository.insert_laundry_shop(row)
    except Exception as e:
        logger.exception("services.add_laundry_shop failed name=%s", payload.name)
        return JSONResponse(status_code=500, content={"error": str(e)})
    return {"success": True, "data": data}
