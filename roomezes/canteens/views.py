"""Endpoints cantines.
- Lecture publique: liste des cantines, menu disponible.
- Étudiant connecté: historique de ses commandes.
- Vendeur/admin (require_vendor): commandes reçues, statuts, stock, articles.
"""
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from roomezes.utils.security import require_user, require_vendor
from roomezes.checkout.models import OrderStatus
from roomezes.canteens import repository as canteens_repository
from roomezes.canteens import service as canteens_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/canteens", tags=["Canteens API"])


class OrderStatusIn(BaseModel):
    status: OrderStatus


class InventoryIn(BaseModel):
    stock_quantity: int = Field(ge=0)


class MenuItemIn(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    price: float = Field(ge=0)
    category: str = "Lunch"
    meal_type: Optional[str] = None
    is_veg: bool = True
    available: bool = True
    image_url: Optional[str] = None


# module roomezes.canteens.views
@router.get("")
def list_canteens():
    return {"items": canteens_repository.list_canteens()}

@router.get("/orders/mine")
def my_orders(user: Dict[str, Any] = Depends(require_user)):
    return {"items": canteens_service.get_my_orders(str(user.get("id") or ""))}

@router.get("/{canteen_id}/menu")
def canteen_menu(canteen_id: str, category: Optional[str] = Query(default=None)):
    return {"items": canteens_service.get_menu(canteen_id, category)}

@router.get("/{canteen_id}/orders")
def canteen_orders(canteen_id: str, user: Dict[str, Any] = Depends(require_vendor)):
    return {"items": canteens_service.get_canteen_orders(canteen_id)}

@router.patch("/orders/{order_id}/status")
def update_order_status(order_id: str, payload: OrderStatusIn, user: Dict[str, Any] = Depends(require_vendor)):
    """Statuts admis: pending, preparing, ready, completed, cancelled (422 sinon)."""
    order = canteens_service.change_order_status(order_id, payload.status)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"success": True, "order": order}

@router.get("/{canteen_id}/inventory")
def canteen_inventory(canteen_id: str, user: Dict[str, Any] = Depends(require_vendor)):
    return {"items": canteens_repository.list_inventory(canteen_id)}

@router.patch("/inventory/{inventory_id}")
def update_inventory(inventory_id: str, payload: InventoryIn, user: Dict[str, Any] = Depends(require_vendor)):
    row = canteens_repository.update_inventory(inventory_id, payload.stock_quantity)
    if row is None:
        raise HTTPException(status_code=404, detail="Inventory row not found")
    return {"success": True, "inventory": row}

@router.post("/{canteen_id}/items", status_code=201)
def add_menu_item(canteen_id: str, payload: MenuItemIn, user: Dict[str, Any] = Depends(require_vendor)):
    created = canteens_service.add_menu_item(canteen_id, payload.model_dump(exclude_none=True))
    if created is None:
        raise HTTPException(status_code=500, detail="Could not create menu item")
    logger.info("canteens.add_menu_item canteen_id=%s by=%s", canteen_id, user.get("id"))
    return {"success": True, **created}

@router.patch("/items/{item_id}/availability")
def toggle_item_availability(item_id: str, user: Dict[str, Any] = Depends(require_vendor)):
    item = canteens_service.toggle_availability(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return {"success": True, "item": item}
