from typing import Any, Dict, List, Optional
import logging
import roomezes.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

PRINT_ORDERS_TABLE = "orders"

# module roomezes.printing.repository
def insert_print_order(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Insère une commande d'impression (service-role); None si l'écriture échoue."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(PRINT_ORDERS_TABLE)
            .insert(data)
            .execute()
        )
        return res.data[0] if res.data else None
    except Exception:
        logger.exception("printing.repository.insert_print_order failed user_id=%s", data.get("user_id"))
        return None

def list_print_orders(limit: int = 100) -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(PRINT_ORDERS_TABLE)
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("printing.repository.list_print_orders failed")
        return []

def update_print_order_status(order_id: str, status: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(PRINT_ORDERS_TABLE)
            .update({"status": status})
            .eq("id", order_id)
            .execute()
        )
        return res.data[0] if res.data else None
    except Exception:
        logger.exception("printing.repository.update_print_order_status failed order_id=%s", order_id)
        return None
