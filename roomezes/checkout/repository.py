"""
Accès aux données pour la feature 'checkout' (table canteen_orders).
"""
from decimal import Decimal
from typing import Iterable, Optional
import logging
import roomezes.infra.supabase_client as supabase_client
from roomezes.cart import CartLine
from .errors import OrderPersistFailed
from .models import OrderStatus, PersistedOrder

logger = logging.getLogger(__name__)

ORDERS_TABLE = "canteen_orders"

def _first_row(res) -> Optional[dict]:
    rows = res.data or []
    return rows[0] if isinstance(rows, list) and rows else None

def _to_order(row: dict, payment_ref: str) -> PersistedOrder:
    # La ligne existe en base: une forme inattendue reste un échec de persistance
    try:
        return PersistedOrder.from_row(row)
    except (ValueError, TypeError, AttributeError, ArithmeticError) as e:
        logger.exception("checkout.repository unreadable order row payment_id=%s", payment_ref)
        raise OrderPersistFailed(str(e), payment_id=payment_ref)

# module roomezes.checkout.repository
def create_order(
    *,
    purchaser_id: str,
    vendor_id: str,
    lines: Iterable[CartLine],
    total_price: Decimal,
    payment_ref: str,
    status: OrderStatus = OrderStatus.PENDING,
) -> PersistedOrder:
    """
    Insère la commande via service-role (paiement déjà vérifié côté serveur).
    - Payload: {user_id, canteen_id, items: [{item, name, quantity, price}], total_price, payment_id, status}
    - Soulève OrderPersistFailed si l'écriture est rejetée ou ne renvoie aucune ligne.
    """
    payload = {
        "user_id": purchaser_id,
        "canteen_id": vendor_id,
        "items": [line.to_order_item() for line in lines],
        "total_price": float(total_price),
        "payment_id": payment_ref,
        "status": status.value,
    }
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .insert(payload)
            .execute()
        )
    except Exception as e:
        logger.exception(
            "checkout.repository.create_order failed user_id=%s canteen_id=%s payment_id=%s",
            purchaser_id, vendor_id, payment_ref,
        )
        raise OrderPersistFailed(str(e), payment_id=payment_ref)
    row = _first_row(res)
    if not row:
        logger.error("checkout.repository.create_order returned no row payment_id=%s", payment_ref)
        raise OrderPersistFailed("empty insert response", payment_id=payment_ref)
    return _to_order(row, payment_ref)

def find_order_by_payment_ref(payment_ref: str) -> Optional[PersistedOrder]:
    """
    Commande déjà enregistrée pour ce paiement, ou None.
    Une lecture en échec soulève OrderPersistFailed (jamais de doublon par défaut).
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ORDERS_TABLE)
            .select("*")
            .eq("payment_id", payment_ref)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("checkout.repository.find_order_by_payment_ref failed payment_id=%s", payment_ref)
        raise OrderPersistFailed(str(e), payment_id=payment_ref)
    row = _first_row(res)
    return _to_order(row, payment_ref) if row else None

def get_vendor_name(vendor_id: str) -> Optional[str]:
    """Nom de la cantine (best-effort, None si introuvable)."""
    if not vendor_id:
        return None
    try:
        res = (
            supabase_client.get_supabase()
            .table("canteens")
            .select("name")
            .eq("id", vendor_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0].get("name") if rows else None
    except Exception:
        logger.exception("checkout.repository.get_vendor_name failed canteen_id=%s", vendor_id)
        return None


class SupabaseOrderStore:
    """Magasin de commandes utilisé par l'orchestrateur (substituable en tests)."""

    def create_order(self, **kwargs) -> PersistedOrder:
        return create_order(**kwargs)

    def find_by_payment_ref(self, payment_ref: str) -> Optional[PersistedOrder]:
        return find_order_by_payment_ref(payment_ref)

    def get_vendor_name(self, vendor_id: str) -> Optional[str]:
        return get_vendor_name(vendor_id)
