import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from roomezes.utils.security import require_user
from roomezes.utils.rate_limit import optional_rate_limit
from roomezes.checkout.errors import GatewayUnavailable
from roomezes.payments import razorpay_client
from roomezes.payments import signature as payments_signature

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}

# module roomezes.payments.views
@router.post("/create-order", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_order(request: Request, user: dict = Depends(require_user)):
    """
    Crée un ordre Razorpay pour un montant en roupies.
    - Entrée JSON: {"amount": 145, "description": "..."}
    - Sortie: {id, amount (paise), currency}
    - Erreurs: 400 {"error": "Invalid amount"}; erreur passerelle -> son statut + {"error": message}
    """
    body = await _json_body(request)
    try:
        amount = Decimal(str(body.get("amount")))
    except (InvalidOperation, ValueError):
        amount = Decimal("0")
    if not amount.is_finite() or amount <= 0:
        return JSONResponse(status_code=400, content={"error": "Invalid amount"})

    try:
        order = razorpay_client.create_order(razorpay_client.to_minor_units(amount), body.get("description") or "")
    except GatewayUnavailable as e:
        return JSONResponse(status_code=e.status or 502, content={"error": e.reason or "Failed to create Razorpay order"})
    logger.info("payments.create_order user_id=%s order_id=%s amount=%s", user.get("id"), order.get("id"), order.get("amount"))
    return order

@router.post("/verify-payment", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
async def verify_payment(request: Request, user: dict = Depends(require_user)):
    """
    Vérifie la signature d'un paiement (HMAC-SHA256 côté serveur).
    - Entrée JSON: {razorpayOrderId, razorpayPaymentId, razorpaySignature}
    - Sortie: {success, message, orderId, paymentId} ou 400 {"error": "Payment verification failed"}
    """
    from roomezes.config import RAZORPAY_KEY_SECRET
    body = await _json_body(request)
    order_id = str(body.get("razorpayOrderId") or "")
    payment_id = str(body.get("razorpayPaymentId") or "")
    signature = str(body.get("razorpaySignature") or "")

    if not payments_signature.verify_signature(RAZORPAY_KEY_SECRET, order_id, payment_id, signature):
        logger.warning("payments.verify_payment rejected user_id=%s order_id=%s", user.get("id"), order_id)
        return JSONResponse(status_code=400, content={"error": "Payment verification failed"})

    return {
        "success": True,
        "message": "Payment verified successfully",
        "orderId": order_id,
        "paymentId": payment_id,
    }
