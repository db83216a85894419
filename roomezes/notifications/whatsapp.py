"""
Envoi WhatsApp (Cloud API Graph) pour prévenir un vendeur.

L'absence de WHATSAPP_ACCESS_TOKEN / WHATSAPP_PHONE_NUMBER_ID est une
configuration valide: le message est alors seulement journalisé.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from roomezes.checkout.errors import NotificationFailed

logger = logging.getLogger(__name__)

GRAPH_API_URL = "https://graph.facebook.com"

def send_message(phone: str, message: str, order_id: Optional[str] = None, vendor: Optional[str] = None) -> Dict[str, Any]:
    """
    Envoie un message texte.
    - Sans identifiants: log + {"success": True, "method": "logged"}
    - Succès: {"success": True, "messageId": "..."}
    - Statut non 2xx ou erreur réseau: NotificationFailed
    """
    from roomezes.config import WHATSAPP_ACCESS_TOKEN, WHATSAPP_PHONE_NUMBER_ID, WHATSAPP_API_VERSION, GATEWAY_TIMEOUT_SECONDS

    if not WHATSAPP_ACCESS_TOKEN or not WHATSAPP_PHONE_NUMBER_ID:
        logger.info("notifications.whatsapp credentials not configured, logging message order_id=%s vendor=%s:\n%s", order_id, vendor, message)
        return {"success": True, "method": "logged"}

    url = f"{GRAPH_API_URL}/{WHATSAPP_API_VERSION}/{WHATSAPP_PHONE_NUMBER_ID}/messages"
    payload = {
        "messaging_product": "whatsapp",
        "to": (phone or "").replace("+", ""),
        "type": "text",
        "text": {"body": message},
    }
    headers = {"Authorization": f"Bearer {WHATSAPP_ACCESS_TOKEN}", "Content-Type": "application/json"}
    try:
        resp = httpx.post(url, json=payload, headers=headers, timeout=GATEWAY_TIMEOUT_SECONDS)
    except httpx.HTTPError as e:
        raise NotificationFailed(f"whatsapp transport error: {e}", order_id=order_id)

    try:
        result = resp.json()
    except ValueError:
        result = {}
    if not (200 <= resp.status_code < 300):
        logger.error("notifications.whatsapp API error status=%s body=%s", resp.status_code, result)
        raise NotificationFailed(str(result.get("error") or f"status {resp.status_code}"), order_id=order_id)

    messages = result.get("messages") or [{}]
    message_id = messages[0].get("id")
    logger.info("notifications.whatsapp sent order_id=%s message_id=%s", order_id, message_id)
    return {"success": True, "messageId": message_id}
