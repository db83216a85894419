"""
Orchestrateur du checkout: panier -> intention de paiement -> paiement -> vérification -> commande -> notification.

Étapes strictement séquentielles pour une tentative:
1. begin: montant validé localement puis ordre créé auprès de la passerelle
2. collect_payment: frontière asynchrone (widget de paiement côté client)
3. complete: vérification de la signature AVANT toute écriture, puis persistance
4. hooks post-commit: après la persistance, jamais avant, jamais bloquants

Les étapes 1-2 laissent le panier intact en cas d'échec. Le panier n'est vidé
qu'après une persistance réussie.
"""
import logging
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Tuple

from roomezes.cart import CartManager
from roomezes.payments.razorpay_client import to_minor_units
from roomezes.payments.signature import require_valid_signature
from roomezes.session.context import SessionContext
from .attempt import CheckoutAttempt, CheckoutState
from .errors import (
    CheckoutError,
    GatewayUnavailable,
    InvalidAmount,
    OrderPersistFailed,
    PaymentFailed,
    PaymentVerificationFailed,
)
from .models import (
    Cancelled,
    CheckoutIntent,
    CheckoutResult,
    Confirmed,
    Failed,
    OrderStatus,
    PaymentConfirmation,
    PaymentOutcome,
    PersistedOrder,
)

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Roomezes Order"


class PaymentGateway(Protocol):
    def create_order(self, amount_minor_units: int, description: str) -> Dict[str, Any]: ...

    def fetch_order(self, order_ref: str) -> Dict[str, Any]: ...


class OrderStore(Protocol):
    def create_order(self, **kwargs: Any) -> PersistedOrder: ...

    def find_by_payment_ref(self, payment_ref: str) -> Optional[PersistedOrder]: ...


class Hooks(Protocol):
    def run(self, order: PersistedOrder) -> int: ...


# Planificateur détaché, compatible BackgroundTasks.add_task(func, *args)
Scheduler = Callable[..., Any]
CollectPayment = Callable[[CheckoutIntent], Awaitable[PaymentOutcome]]


# module roomezes.checkout.orchestrator
class CheckoutOrchestrator:
    """
    Pilote une tentative de checkout de bout en bout.
    - gateway: create_order(amount_minor_units, description) -> {id, amount, currency}
    - orders: create_order(purchaser_id=, vendor_id=, lines=, total_price=, payment_ref=, status=)
    - hooks: run(order) (PostCommitHooks)
    - schedule: si fourni, les hooks sont planifiés (tâche détachée) au lieu d'être exécutés en ligne
    """

    def __init__(
        self,
        gateway: PaymentGateway,
        orders: OrderStore,
        secret_key: str,
        hooks: Optional[Hooks] = None,
        schedule: Optional[Scheduler] = None,
    ):
        self.gateway = gateway
        self.orders = orders
        self.secret_key = secret_key
        self.hooks = hooks
        self.schedule = schedule
        self.current_attempt: Optional[CheckoutAttempt] = None

    def begin(self, cart: CartManager, description: str = "") -> Tuple[CheckoutAttempt, CheckoutIntent]:
        """
        Ouvre une nouvelle tentative (la précédente, s'il y en a une, est abandonnée).
        - InvalidAmount avant tout appel réseau si le panier est vide ou le total < 1 paisa
        - GatewayUnavailable si la passerelle refuse ou ne répond pas
        """
        attempt = CheckoutAttempt()
        self.current_attempt = attempt
        total = cart.total()
        # Un total inférieur au paisa partirait à 0 vers la passerelle
        if cart.is_empty or to_minor_units(total) <= 0:
            attempt.fail("invalid amount")
            raise InvalidAmount(total=str(total))

        attempt.advance(CheckoutState.INTENT_REQUESTED)
        description = description or DEFAULT_DESCRIPTION
        try:
            order = self.gateway.create_order(to_minor_units(total), description)
        except GatewayUnavailable as e:
            attempt.fail(e.reason)
            raise
        external_ref = (order or {}).get("id")
        if not external_ref:
            attempt.fail("gateway returned no order id")
            raise GatewayUnavailable("gateway returned no order id")

        intent = CheckoutIntent(
            amount=total,
            currency=(order or {}).get("currency") or "INR",
            description=description,
            external_order_ref=str(external_ref),
        )
        attempt.advance(CheckoutState.AWAITING_PAYMENT)
        logger.info("checkout.begin attempt=%s order_ref=%s amount=%s", attempt.attempt_id, intent.external_order_ref, intent.amount)
        return attempt, intent

    async def checkout(
        self,
        cart: CartManager,
        session: SessionContext,
        vendor_id: str,
        collect_payment: CollectPayment,
        description: str = "",
    ) -> CheckoutResult:
        identity = session.require_identity()
        attempt, intent = self.begin(cart, description)
        outcome = await collect_payment(intent)

        if isinstance(outcome, Cancelled):
            attempt.advance(CheckoutState.IDLE)
            logger.info("checkout.cancelled attempt=%s order_ref=%s", attempt.attempt_id, intent.external_order_ref)
            return CheckoutResult(status="cancelled")
        if isinstance(outcome, Failed):
            attempt.fail(outcome.reason)
            logger.warning("checkout.payment_failed attempt=%s reason=%s", attempt.attempt_id, outcome.reason)
            raise PaymentFailed(outcome.reason)
        if not isinstance(outcome, Confirmed):
            attempt.fail("unexpected payment outcome")
            raise PaymentFailed("unexpected payment outcome")

        return self.complete(attempt, intent, cart, outcome.confirmation, identity.user_id, vendor_id)

    def complete(
        self,
        attempt: CheckoutAttempt,
        intent: CheckoutIntent,
        cart: CartManager,
        confirmation: PaymentConfirmation,
        purchaser_id: str,
        vendor_id: str,
    ) -> CheckoutResult:
        """
        Vérifie puis persiste.
        - La confirmation doit référencer l'ordre de l'intention
        - Signature vérifiée avant toute écriture
        - Le montant autorisé doit correspondre au total du panier
        - Paiement déjà enregistré: aucune seconde ligne, la commande existante est renvoyée
        - Échec de persistance: OrderPersistFailed, le panier est conservé
        """
        attempt.advance(CheckoutState.VERIFYING)
        try:
            if confirmation.external_order_ref != intent.external_order_ref:
                raise PaymentVerificationFailed(
                    "order reference mismatch",
                    order_ref=confirmation.external_order_ref,
                )
            require_valid_signature(confirmation, self.secret_key)
            total = cart.total()
            if cart.is_empty or to_minor_units(intent.amount) != to_minor_units(total):
                logger.warning(
                    "checkout.amount_mismatch attempt=%s intent=%s cart=%s",
                    attempt.attempt_id, intent.amount, total,
                )
                raise PaymentVerificationFailed("amount mismatch", order_ref=intent.external_order_ref)
        except CheckoutError as e:
            attempt.fail(e.reason)
            raise

        attempt.advance(CheckoutState.PERSISTING)
        payment_ref = confirmation.external_payment_ref
        try:
            existing = self.orders.find_by_payment_ref(payment_ref)
        except OrderPersistFailed as e:
            attempt.fail(e.reason)
            raise
        if existing is not None:
            return self._replayed(attempt, cart, existing, purchaser_id)

        try:
            order = self.orders.create_order(
                purchaser_id=purchaser_id,
                vendor_id=vendor_id,
                lines=cart.snapshot(),
                total_price=Decimal(total),
                payment_ref=payment_ref,
                status=OrderStatus.PENDING,
            )
        except OrderPersistFailed as e:
            attempt.fail(e.reason)
            logger.error(
                "checkout.persist_failed attempt=%s payment_ref=%s (payment captured, no order)",
                attempt.attempt_id, payment_ref,
            )
            raise

        attempt.advance(CheckoutState.COMPLETED)
        cart.clear()
        logger.info("checkout.completed attempt=%s order_id=%s", attempt.attempt_id, order.order_id)
        self._dispatch(order)
        return CheckoutResult(status="completed", order=order)

    def _replayed(
        self,
        attempt: CheckoutAttempt,
        cart: CartManager,
        existing: PersistedOrder,
        purchaser_id: str,
    ) -> CheckoutResult:
        """
        Confirmation déjà consommée: un paiement ne crée qu'une commande.
        - Même acheteur: la commande existante est renvoyée, sans nouvelle notification
        - Autre acheteur: PaymentVerificationFailed
        """
        payment_ref = existing.external_payment_ref
        if existing.purchaser_id != purchaser_id:
            attempt.fail("payment already used")
            logger.warning(
                "checkout.payment_reused attempt=%s payment_ref=%s order_id=%s",
                attempt.attempt_id, payment_ref, existing.order_id,
            )
            raise PaymentVerificationFailed("payment already used", payment_id=payment_ref)
        attempt.advance(CheckoutState.COMPLETED)
        cart.clear()
        logger.warning(
            "checkout.duplicate_confirmation attempt=%s payment_ref=%s order_id=%s",
            attempt.attempt_id, payment_ref, existing.order_id,
        )
        return CheckoutResult(status="completed", order=existing)

    def _dispatch(self, order: PersistedOrder) -> None:
        if self.hooks is None:
            return
        if self.schedule is not None:
            self.schedule(self.hooks.run, order)
            return
        # Exécution en ligne: PostCommitHooks isole déjà chaque hook
        try:
            self.hooks.run(order)
        except Exception:
            logger.exception("checkout.post_commit failed order_id=%s", order.order_id)
