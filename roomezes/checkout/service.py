"""
Cas d'usage 'checkout' côté HTTP: assemble orchestrateur, passerelle, magasin de commandes et hooks.

Le serveur est sans état entre /intent et /confirm: la tentative est
réhydratée à la confirmation et l'intention est relue auprès de la
passerelle (montant réellement autorisé), jamais prise du client.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from roomezes.cart import CartManager
from roomezes.payments.razorpay_client import RazorpayGateway, from_minor_units
from roomezes.payments.signature import require_valid_signature
from roomezes.notifications.dispatcher import PostCommitHooks, VendorNotifier
from .attempt import CheckoutAttempt, CheckoutState
from .errors import GatewayUnavailable, OrderPersistFailed, PaymentVerificationFailed
from .models import CheckoutIntent, CheckoutResult, PaymentConfirmation
from .orchestrator import CheckoutOrchestrator
from .repository import SupabaseOrderStore

logger = logging.getLogger(__name__)

def build_orchestrator(schedule: Optional[Callable[..., Any]] = None) -> CheckoutOrchestrator:
    """Orchestrateur par défaut: Razorpay + Supabase + notification WhatsApp du vendeur."""
    from roomezes.config import RAZORPAY_KEY_SECRET
    store = SupabaseOrderStore()
    hooks = PostCommitHooks([VendorNotifier(vendor_name_lookup=store.get_vendor_name)])
    return CheckoutOrchestrator(
        gateway=RazorpayGateway(),
        orders=store,
        secret_key=RAZORPAY_KEY_SECRET,
        hooks=hooks,
        schedule=schedule,
    )

def create_intent(
    *,
    items: List[Dict[str, Any]],
    description: str = "",
    orchestrator: Optional[CheckoutOrchestrator] = None,
) -> Tuple[CheckoutAttempt, CheckoutIntent]:
    cart = CartManager.from_lines(items)
    orchestrator = orchestrator or build_orchestrator()
    return orchestrator.begin(cart, description)

def _rehydrate_intent(orchestrator: CheckoutOrchestrator, order_ref: str) -> CheckoutIntent:
    order = orchestrator.gateway.fetch_order(order_ref)
    amount = from_minor_units(int(order.get("amount") or 0))
    if amount <= 0 or not order.get("id"):
        raise PaymentVerificationFailed("unknown gateway order", order_ref=order_ref)
    return CheckoutIntent(
        amount=amount,
        currency=order.get("currency") or "INR",
        description=order.get("description") or "",
        external_order_ref=str(order["id"]),
    )

# module roomezes.checkout.service
def confirm_and_place_order(
    *,
    purchaser_id: str,
    vendor_id: str,
    items: List[Dict[str, Any]],
    confirmation: PaymentConfirmation,
    orchestrator: Optional[CheckoutOrchestrator] = None,
) -> CheckoutResult:
    """
    Confirmation HTTP d'un paiement.
    - Reconstruit le panier depuis le payload
    - Relit l'ordre auprès de la passerelle (montant autorisé)
    - Délègue à CheckoutOrchestrator.complete (signature, montant, persistance, hooks)
    """
    orchestrator = orchestrator or build_orchestrator()
    # Une confirmation forgée ne déclenche aucun appel passerelle
    require_valid_signature(confirmation, orchestrator.secret_key)
    cart = CartManager.from_lines(items)
    # Paiement capturé à partir d'ici: seules des erreurs post-capture sortent
    try:
        intent = _rehydrate_intent(orchestrator, confirmation.external_order_ref)
    except GatewayUnavailable as e:
        logger.error(
            "checkout.confirm gateway lookup failed order_ref=%s payment_ref=%s reason=%s",
            confirmation.external_order_ref, confirmation.external_payment_ref, e.reason,
        )
        raise OrderPersistFailed(e.reason, payment_id=confirmation.external_payment_ref) from e

    attempt = CheckoutAttempt()
    attempt.advance(CheckoutState.INTENT_REQUESTED)
    attempt.advance(CheckoutState.AWAITING_PAYMENT)
    orchestrator.current_attempt = attempt
    logger.info("checkout.confirm attempt=%s order_ref=%s user_id=%s", attempt.attempt_id, intent.external_order_ref, purchaser_id)
    return orchestrator.complete(attempt, intent, cart, confirmation, purchaser_id, vendor_id)
