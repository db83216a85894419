"""
Accès aux données cantines: canteens, canteen_items, canteen_inventory, canteen_orders.

Lectures publiques via le client anon; écritures vendeur via service-role.
Les erreurs Supabase sont journalisées et converties en liste vide / None.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging
import roomezes.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

ORDERS_TABLE = "canteen_orders"
DEFAULT_STOCK_QUANTITY = 50
DEFAULT_LOW_STOCK_THRESHOLD = 10

# module roomezes.canteens.repository
def list_canteens() -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_supabase()
            .table("canteens")
            .select("*")
            .order("name")
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("canteens.repository.list_canteens failed")
        return []

def list_menu_items(canteen_id: str, category: Optional[str] = None) -> List[Dict[str, Any]]:
    """Articles disponibles d'une cantine, éventuellement filtrés par catégorie."""
    try:
        query = (
            supabase_client.get_supabase()
            .table("canteen_items")
            .select("*")
            .eq("canteen_id", canteen_id)
            .eq("available", True)
        )
        if category:
            query = query.eq("category", category)
        res = query.order("name").execute()
        return res.data or []
    except Exception:
        logger.exception("canteens.repository.list_menu_items failed canteen_id=%s", canteen_id)
        return []

def get_menu_item(item_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("canteen_items")
            .select("*")
            .eq("id", item_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("canteens.repository.get_menu_item failed item_id=%s", item_id)
        return None

def insert_menu_item(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("canteen_items")
            .insert(data)
            .execute()
        )
        return res.data[0] if res.data else None
    except Exception:
        logger.exception("canteens.repository.insert_menu_item failed canteen_id=%s", data.get("canteen_id"))
        return None

def insert_inventory_row(canteen_id: str, item_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("canteen_inventory")
            .insert({
                "canteen_id": canteen_id,
                "item_id": item_id,
                "stock_quantity": DEFAULT_STOCK_QUANTITY,
                "low_stock_threshold": DEFAULT_LOW_STOCK_THRESHOLD,
            })
            .execute()
        )
        return res.data[0] if res.data else None
    except Exception:
        logger.exception("canteens.repository.insert_inventory_row failed item_id=%s", item_id)
        return None

def set_item_availability(item_id: str, available: bool) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("canteen_items")
            .update({"available": available})
            .eq("id", item_id)
            .execute()
        )
        return res.data[0] if res.data else None
    except Exception:
        logger.exception("canteens.repository.set_item_availability failed item_id=%s", item_id)
        return None

def list_inventory(canteen_id: str) -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("canteen_inventory")
            .select("*, canteen_items!inner(name, price)")
            .eq("canteen_id", canteen_id)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("canteens.repository.list_inventory failed canteen_id=%s", canteen_id)
        return []

def update_inventory(inventory_id: str, stock_quantity: int) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("canteen_inventory")
            .update({
                "stock_quantity": stock_quantity,
                "last_updated": datetime.now(timezone.utc).isoformat(),
            })
            .eq("id", inventory_id)
            .execute()
        )
        return res.data[0] if res.data else None
    except Exception:
        logger.exception("canteens.repository.update_inventory failed inventory_id=%s", inventory_id)
        return None

def list_orders_for_user(user_id: str) -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("canteens.repository.list_orders_for_user failed user_id=%s", user_id)
        return []

def list_orders_for_canteen(canteen_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .select("*")
            .eq("canteen_id", canteen_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("canteens.repository.list_orders_for_canteen failed canteen_id=%s", canteen_id)
        return []

def update_order_status(order_id: str, status: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .update({"status": status})
            .eq("id", order_id)
            .execute()
        )
        return res.data[0] if res.data else None
    except Exception:
        logger.exception("canteens.repository.update_order_status failed order_id=%s", order_id)
        return None
