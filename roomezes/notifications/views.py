import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from roomezes.checkout.errors import NotificationFailed
from roomezes.utils.rate_limit import optional_rate_limit
from roomezes.notifications import whatsapp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/whatsapp", tags=["Notifications API"])


class WhatsAppIn(BaseModel):
    phone: str
    message: str
    order_id: Optional[str] = None
    vendor: Optional[str] = None
    # Ancien nom du champ côté front
    canteen: Optional[str] = None


# module roomezes.notifications.views
@router.post("/send", dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
def send_whatsapp(payload: WhatsAppIn):
    """
    Envoie un message WhatsApp (appel serveur à serveur, exempté de CSRF).
    - Sortie: {success, messageId} ou {success, method: "logged"}
    - Erreur: 400 {success: false, error}
    """
    try:
        return whatsapp.send_message(
            payload.phone,
            payload.message,
            order_id=payload.order_id,
            vendor=payload.vendor or payload.canteen,
        )
    except NotificationFailed as e:
        logger.warning("notifications.views send failed order_id=%s reason=%s", payload.order_id, e.reason)
        return JSONResponse(status_code=400, content={"success": False, "error": e.reason})
