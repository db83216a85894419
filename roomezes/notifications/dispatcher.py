"""
Dispatcher post-commit: prévient le vendeur après qu'une commande a été persistée.

Les hooks s'exécutent après la persistance, chacun isolé: une erreur est
journalisée et n'affecte ni les hooks suivants ni le résultat du checkout.
Aucun hook n'est rejoué (pas d'outbox).
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from roomezes.checkout.errors import NotificationFailed
from roomezes.checkout.models import PersistedOrder

logger = logging.getLogger(__name__)

PostCommitHook = Callable[[Any], Any]

UNKNOWN_VENDOR = "Unknown"

def _order_ref(order: Any) -> Optional[str]:
    if isinstance(order, dict):
        return order.get("id")
    return getattr(order, "order_id", None)

def _money(value: Decimal) -> str:
    value = Decimal(value)
    # 145.00 -> "145", 12.50 -> "12.50"
    if value == value.to_integral_value():
        return str(int(value))
    return f"{value.quantize(Decimal('0.01'))}"

# module roomezes.notifications.dispatcher
def format_order_summary(order: PersistedOrder, vendor_name: Optional[str], now: Optional[datetime] = None) -> str:
    """
    Message texte destiné au vendeur.
    - Identifiant court: 8 premiers caractères de l'order_id
    - Une ligne par article: "- nom xQ = ₹total_ligne"
    """
    when = (now or datetime.now()).strftime("%d/%m/%Y, %H:%M:%S")
    items_list = "\n".join(
        f"- {line.name} x{line.quantity} = ₹{_money(line.line_total)}" for line in order.line_items
    )
    return (
        "🍽️ NEW ORDER RECEIVED!\n"
        "\n"
        f"Canteen: {vendor_name or UNKNOWN_VENDOR}\n"
        f"Order ID: #{order.order_id[:8]}\n"
        f"Time: {when}\n"
        "\n"
        "Items:\n"
        f"{items_list}\n"
        "\n"
        f"Total Amount: ₹{_money(order.total_price)}\n"
        "Payment: PAID ✅\n"
        "Pickup: Immediate\n"
        "\n"
        "Please prepare the order!"
    )


class PostCommitHooks:
    """Liste ordonnée de hooks exécutés une fois, indépendamment, après commit."""

    def __init__(self, hooks: Optional[List[PostCommitHook]] = None):
        self._hooks: List[PostCommitHook] = list(hooks or [])

    def register(self, hook: PostCommitHook) -> None:
        self._hooks.append(hook)

    def __len__(self) -> int:
        return len(self._hooks)

    def run(self, order: Any) -> int:
        """Exécute chaque hook; retourne le nombre de hooks en échec."""
        failures = 0
        for hook in list(self._hooks):
            try:
                hook(order)
            except Exception:
                failures += 1
                logger.exception(
                    "notifications.dispatcher hook failed hook=%s order_id=%s",
                    getattr(hook, "__name__", type(hook).__name__), _order_ref(order),
                )
        return failures


class VendorNotifier:
    """
    Hook qui formate le récapitulatif et l'envoie au vendeur.
    - send(phone, message, order_id=..., vendor=...) -> {"success": bool, ...}
    - vendor_name_lookup(vendor_id) -> nom ou None
    """

    def __init__(
        self,
        send: Optional[Callable[..., Dict[str, Any]]] = None,
        vendor_name_lookup: Optional[Callable[[str], Optional[str]]] = None,
        phone: Optional[str] = None,
    ):
        if send is None:
            from roomezes.notifications.whatsapp import send_message
            send = send_message
        if phone is None:
            from roomezes.config import VENDOR_NOTIFY_PHONE
            phone = VENDOR_NOTIFY_PHONE
        self._send = send
        self._lookup = vendor_name_lookup
        self.phone = phone

    def _vendor_name(self, vendor_id: str) -> Optional[str]:
        if self._lookup is None:
            return None
        try:
            return self._lookup(vendor_id)
        except Exception:
            logger.exception("notifications.dispatcher vendor name lookup failed vendor_id=%s", vendor_id)
            return None

    def __call__(self, order: PersistedOrder) -> Dict[str, Any]:
        vendor_name = self._vendor_name(order.vendor_id) or UNKNOWN_VENDOR
        message = format_order_summary(order, vendor_name)
        try:
            result = self._send(self.phone, message, order_id=order.order_id, vendor=vendor_name)
        except NotificationFailed:
            raise
        except Exception as e:
            raise NotificationFailed(str(e), order_id=order.order_id)
        if isinstance(result, dict) and result.get("success") is False:
            raise NotificationFailed(str(result.get("error") or "send rejected"), order_id=order.order_id)
        logger.info("notifications.dispatcher vendor notified order_id=%s vendor=%s", order.order_id, vendor_name)
        return result
