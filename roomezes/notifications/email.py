"""Email transactionnel via Resend (best-effort, journalisé sans clé)."""
import logging
from typing import Any, Dict, List, Union

import resend

from roomezes.checkout.errors import NotificationFailed

logger = logging.getLogger(__name__)

def send_email(to: Union[str, List[str]], subject: str, text: str) -> Dict[str, Any]:
    from roomezes.config import RESEND_API_KEY, EMAIL_FROM

    recipients = [to] if isinstance(to, str) else list(to)
    if not RESEND_API_KEY:
        logger.info("notifications.email RESEND_API_KEY not configured, logging email to=%s subject=%s:\n%s", recipients, subject, text)
        return {"success": True, "method": "logged"}

    resend.api_key = RESEND_API_KEY
    params: resend.Emails.SendParams = {
        "from": EMAIL_FROM,
        "to": recipients,
        "subject": subject,
        "text": text,
    }
    try:
        response = resend.Emails.send(params)
    except Exception as e:
        raise NotificationFailed(f"email send failed: {e}")
    message_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
    logger.info("notifications.email sent to=%s id=%s", recipients, message_id)
    return {"success": True, "messageId": message_id}
