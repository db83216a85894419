import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, ConfigDict, Field

from roomezes.utils.security import require_user
from roomezes.utils.rate_limit import optional_rate_limit
from roomezes.payments.razorpay_client import to_minor_units
from roomezes.checkout import service as checkout_service
from .models import PaymentConfirmation

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])


class CartItemIn(BaseModel):
    item_id: str = Field(min_length=1)
    name: str = ""
    unit_price: float = Field(ge=0)
    quantity: int = 1


class IntentIn(BaseModel):
    vendor_id: str = Field(min_length=1)
    items: List[CartItemIn]
    description: Optional[str] = None


class ConfirmIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vendor_id: str = Field(min_length=1)
    items: List[CartItemIn]
    razorpay_order_id: str = Field(alias="razorpayOrderId", min_length=1)
    razorpay_payment_id: str = Field(alias="razorpayPaymentId", min_length=1)
    razorpay_signature: str = Field(alias="razorpaySignature", min_length=1)


# module roomezes.checkout.views
@router.post("/intent", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_intent(payload: IntentIn, user: Dict[str, Any] = Depends(require_user)):
    """
    Ouvre une tentative de checkout pour le panier de l'utilisateur.
    - Sortie: {id, amount (paise), currency, key} pour le widget Razorpay
    - Erreurs: 400 invalid_amount (panier vide/total nul), 502 gateway_unavailable
    """
    from roomezes.config import RAZORPAY_KEY_ID
    items = [it.model_dump() for it in payload.items]
    attempt, intent = checkout_service.create_intent(items=items, description=payload.description or "")
    logger.info("checkout.intent user_id=%s vendor_id=%s attempt=%s", user.get("id"), payload.vendor_id, attempt.attempt_id)
    return {
        "id": intent.external_order_ref,
        "amount": to_minor_units(intent.amount),
        "currency": intent.currency,
        "key": RAZORPAY_KEY_ID,
    }

@router.post("/confirm", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def confirm_payment(payload: ConfirmIn, background_tasks: BackgroundTasks, user: Dict[str, Any] = Depends(require_user)):
    """
    Vérifie le paiement et enregistre la commande.
    - La notification vendeur part en tâche de fond, après la réponse
    - Erreurs: 400 payment_verification_failed, 500 order_persist_failed (porte payment_id)
    """
    confirmation = PaymentConfirmation(
        external_order_ref=payload.razorpay_order_id,
        external_payment_ref=payload.razorpay_payment_id,
        signature=payload.razorpay_signature,
    )
    orchestrator = checkout_service.build_orchestrator(schedule=background_tasks.add_task)
    result = checkout_service.confirm_and_place_order(
        purchaser_id=str(user.get("id") or ""),
        vendor_id=payload.vendor_id,
        items=[it.model_dump() for it in payload.items],
        confirmation=confirmation,
        orchestrator=orchestrator,
    )
    return {"success": True, "order": result.order.to_public() if result.order else None}
