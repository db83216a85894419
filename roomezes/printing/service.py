"""
Cas d'usage 'printing': enregistre un travail d'impression puis prévient l'imprimerie par email.

L'email est un hook post-commit: il part après l'écriture, et son échec
n'annule jamais la commande.
"""
from typing import Any, Callable, Dict, Optional
import logging

from roomezes.notifications.dispatcher import PostCommitHooks
from . import repository

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "New Print Job Request"

def format_print_job_email(order: Dict[str, Any], job: Dict[str, Any]) -> str:
    return (
        "Hello,\n"
        "\n"
        "A new print job has been placed.\n"
        "\n"
        f"Order ID: {order.get('id')}\n"
        "\n"
        "Details:\n"
        f"- Page Size: {job.get('page_size')}\n"
        f"- Color: {job.get('color_mode')}\n"
        f"- Sides: {job.get('sides')}\n"
        f"- Pages: {job.get('pages')}\n"
        f"- Copies: {job.get('copies')}\n"
        f"- Total Price: ₹{job.get('total_price')}\n"
        "\n"
        "Document URL:\n"
        f"{job.get('file_url') or ''}\n"
        "\n"
        f"Notes: {job.get('notes') or ''}\n"
        "\n"
        "Please process this order.\n"
        "\n"
        "Roomezes"
    )

def _email_hook(job: Dict[str, Any]) -> Callable[[Dict[str, Any]], Any]:
    def notify_printing_shop(order: Dict[str, Any]) -> Any:
        from roomezes.config import PRINTING_NOTIFY_EMAIL
        from roomezes.notifications import email
        return email.send_email(PRINTING_NOTIFY_EMAIL, EMAIL_SUBJECT, format_print_job_email(order, job))
    return notify_printing_shop

# module roomezes.printing.service
def place_print_order(
    *,
    user_id: str,
    job: Dict[str, Any],
    schedule: Optional[Callable[..., Any]] = None,
) -> Optional[Dict[str, Any]]:
    """
    Insère {user_id, items, total_price, notes, status: pending} dans 'orders'.
    - Retourne la ligne créée, ou None si l'écriture a échoué (aucun email)
    - schedule: planificateur détaché (BackgroundTasks.add_task); sinon exécution en ligne
    """
    row = repository.insert_print_order({
        "user_id": user_id,
        "items": job.get("items") or [],
        "total_price": job.get("total_price"),
        "notes": job.get("notes") or "",
        "status": "pending",
    })
    if row is None:
        return None
    hooks = PostCommitHooks([_email_hook(job)])
    if schedule is not None:
        schedule(hooks.run, row)
    else:
        hooks.run(row)
    logger.info("printing.place_print_order order_id=%s user_id=%s", row.get("id"), user_id)
    return row
