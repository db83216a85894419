"""
Cas d'usage 'canteens': menu normalisé, gestion vendeur (statuts, stock, articles).
"""
from typing import Any, Dict, List, Optional
import logging

from roomezes.checkout.models import OrderStatus, PersistedOrder
from . import repository

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Lunch"

def normalize_menu_item(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deux schémas coexistent côté tables cantine (name/item_name).
    - category par défaut: Lunch
    """
    return {
        "id": row.get("id"),
        "name": row.get("name") or row.get("item_name") or "",
        "description": row.get("description") or "",
        "price": float(row.get("price") or 0),
        "category": row.get("category") or DEFAULT_CATEGORY,
        "is_veg": bool(row.get("is_veg", True)),
        "available": bool(row.get("available", True)),
        "image_url": row.get("image_url"),
    }

# module roomezes.canteens.service
def get_menu(canteen_id: str, category: Optional[str] = None) -> List[Dict[str, Any]]:
    return [normalize_menu_item(r) for r in repository.list_menu_items(canteen_id, category)]

def get_my_orders(user_id: str) -> List[Dict[str, Any]]:
    return [PersistedOrder.from_row(r).to_public() for r in repository.list_orders_for_user(user_id)]

def get_canteen_orders(canteen_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    return [PersistedOrder.from_row(r).to_public() for r in repository.list_orders_for_canteen(canteen_id, limit)]

def change_order_status(order_id: str, status: OrderStatus) -> Optional[Dict[str, Any]]:
    row = repository.update_order_status(order_id, status.value)
    if row is None:
        return None
    logger.info("canteens.order_status order_id=%s status=%s", order_id, status.value)
    return PersistedOrder.from_row(row).to_public()

def add_menu_item(canteen_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Ajoute un article puis sa ligne de stock (50 unités, seuil bas 10).
    - Retourne None si l'article n'a pas pu être créé
    - Un échec de la ligne de stock est journalisé, l'article reste créé
    """
    row = repository.insert_menu_item({**data, "canteen_id": canteen_id})
    if not row:
        return None
    inventory = repository.insert_inventory_row(canteen_id, row.get("id"))
    if inventory is None:
        logger.warning("canteens.add_menu_item inventory row missing item_id=%s", row.get("id"))
    return {"item": normalize_menu_item(row), "inventory": inventory}

def toggle_availability(item_id: str) -> Optional[Dict[str, Any]]:
    item = repository.get_menu_item(item_id)
    if not item:
        return None
    row = repository.set_item_availability(item_id, not bool(item.get("available", True)))
    return normalize_menu_item(row) if row else None
