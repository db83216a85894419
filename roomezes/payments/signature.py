"""
Vérification de signature Razorpay (côté serveur uniquement: le secret ne quitte jamais le backend).

signature attendue = hex(HMAC-SHA256(secret, order_id + "|" + payment_id))
"""
import hashlib
import hmac
import logging

from roomezes.checkout.errors import PaymentVerificationFailed
from roomezes.checkout.models import PaymentConfirmation

logger = logging.getLogger(__name__)

# module roomezes.payments.signature
def compute_signature(secret: str, order_ref: str, payment_ref: str) -> str:
    body = f"{order_ref}|{payment_ref}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()

def verify_signature(secret: str, order_ref: str, payment_ref: str, signature: str) -> bool:
    """
    Compare la signature reçue à la signature recalculée (comparaison à temps constant).
    - Sans secret configuré, rien n'est jamais vérifié.
    """
    if not secret or not signature:
        return False
    expected = compute_signature(secret, order_ref or "", payment_ref or "")
    return hmac.compare_digest(expected.encode("utf-8"), str(signature).encode("utf-8"))

def require_valid_signature(confirmation: PaymentConfirmation, secret: str) -> None:
    if not verify_signature(secret, confirmation.external_order_ref, confirmation.external_payment_ref, confirmation.signature):
        logger.warning(
            "payments.signature mismatch order_ref=%s payment_ref=%s (possible tampering)",
            confirmation.external_order_ref,
            confirmation.external_payment_ref,
        )
        raise PaymentVerificationFailed(
            "signature mismatch",
            order_ref=confirmation.external_order_ref,
        )
