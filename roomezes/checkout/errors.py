"""
Taxonomie d'erreurs du checkout.

Chaque erreur porte un code stable (réponse API), un statut HTTP et un
message destiné à l'utilisateur. Les étapes 1-2 (intention, paiement) sont
récupérables: le panier est conservé et l'utilisateur relance. Les étapes 3-4
(vérification, persistance) sont terminales et se distinguent dans le message,
car la remédiation diffère: rien n'a été débité pour une commande d'un côté,
un paiement capturé sans commande de l'autre.
"""
from typing import Any, Dict, Optional


class CheckoutError(Exception):
    code = "checkout_error"
    status_code = 400
    user_message = "Checkout failed, please try again."

    def __init__(self, reason: Optional[str] = None, **context: Any):
        self.reason = reason or self.user_message
        self.context = context
        super().__init__(self.reason)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.code, "detail": self.user_message}
        if self.reason and self.reason != self.user_message:
            body["reason"] = self.reason
        body.update({k: v for k, v in self.context.items() if v is not None})
        return body


class InvalidAmount(CheckoutError):
    code = "invalid_amount"
    status_code = 400
    user_message = "Invalid amount"


class GatewayUnavailable(CheckoutError):
    code = "gateway_unavailable"
    status_code = 502
    user_message = "Could not start the payment, please try again."

    def __init__(self, reason: Optional[str] = None, status: Optional[int] = None, **context: Any):
        self.status = status
        super().__init__(reason, **context)


class UserCancelledPayment(CheckoutError):
    """Pas une panne: l'utilisateur a fermé la fenêtre de paiement."""
    code = "payment_cancelled"
    status_code = 409
    user_message = "Payment cancelled."


class PaymentFailed(CheckoutError):
    code = "payment_failed"
    status_code = 402
    user_message = "Payment failed, your cart is unchanged."


class PaymentVerificationFailed(CheckoutError):
    code = "payment_verification_failed"
    status_code = 400
    user_message = "Payment verification failed"


class OrderPersistFailed(CheckoutError):
    code = "order_persist_failed"
    status_code = 500
    user_message = "Payment succeeded but the order could not be recorded. Please contact support with your payment reference."


class NotificationFailed(CheckoutError):
    """Toujours non fatale: journalisée par le dispatcher, jamais propagée."""
    code = "notification_failed"
    status_code = 502
    user_message = "Vendor notification failed."


class InvalidTransition(CheckoutError):
    code = "invalid_transition"
    status_code = 409
    user_message = "This checkout attempt can no longer continue, please start again."
