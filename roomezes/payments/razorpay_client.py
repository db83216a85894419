"""
Adaptateur Razorpay: centralise les appels HTTP et la configuration de la passerelle.

Les montants partent en unité mineure (paise): montant en roupies x 100.
"""
import logging
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import httpx

from roomezes.checkout.errors import GatewayUnavailable

logger = logging.getLogger(__name__)

# module roomezes.payments.razorpay_client
def to_minor_units(amount: Decimal) -> int:
    """Convertit un montant en roupies en paise (arrondi au plus proche, .5 vers le haut)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def from_minor_units(amount_minor: int) -> Decimal:
    return (Decimal(int(amount_minor)) / 100).quantize(Decimal("0.01"))

def _auth() -> httpx.BasicAuth:
    from roomezes.config import RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET
    if not RAZORPAY_KEY_ID or not RAZORPAY_KEY_SECRET:
        raise GatewayUnavailable("RAZORPAY_KEY_ID/RAZORPAY_KEY_SECRET manquants")
    return httpx.BasicAuth(RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET)

def _error_message(resp: httpx.Response) -> str:
    # Razorpay renvoie {"error": {"code", "description"}}; certains proxys renvoient {"message"}
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"status {resp.status_code}"
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict):
        return err.get("description") or err.get("code") or f"status {resp.status_code}"
    return (body or {}).get("message") or str(err or f"status {resp.status_code}")

def _request(method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    from roomezes.config import RAZORPAY_API_URL, GATEWAY_TIMEOUT_SECONDS
    url = f"{RAZORPAY_API_URL}{path}"
    try:
        resp = httpx.request(method, url, json=json, auth=_auth(), timeout=GATEWAY_TIMEOUT_SECONDS)
    except httpx.HTTPError as e:
        logger.exception("payments.razorpay %s %s transport error", method, path)
        raise GatewayUnavailable(str(e))
    if not (200 <= resp.status_code < 300):
        message = _error_message(resp)
        logger.error("payments.razorpay %s %s failed status=%s message=%s", method, path, resp.status_code, message)
        raise GatewayUnavailable(message, status=resp.status_code)
    return resp.json()

def create_order(amount_minor_units: int, description: str, receipt: Optional[str] = None) -> Dict[str, Any]:
    """
    Crée un ordre Razorpay.
    - Requête: {amount, currency: "INR", receipt, description}
    - Retour: {id, amount, currency} (réponse passerelle réduite)
    - Erreurs: GatewayUnavailable (statut non 2xx, transport, clés absentes)
    """
    from roomezes.config import CHECKOUT_CURRENCY
    payload = {
        "amount": int(amount_minor_units),
        "currency": CHECKOUT_CURRENCY,
        "receipt": receipt or f"receipt_{int(time.time() * 1000)}",
        "description": description or "Roomezes Order",
    }
    order = _request("POST", "/orders", json=payload)
    return {"id": order.get("id"), "amount": order.get("amount"), "currency": order.get("currency")}

def fetch_order(order_ref: str) -> Dict[str, Any]:
    """Relit un ordre Razorpay (montant réellement autorisé) par son identifiant."""
    if not order_ref:
        raise GatewayUnavailable("order id manquant")
    order = _request("GET", f"/orders/{order_ref}")
    return {
        "id": order.get("id"),
        "amount": order.get("amount"),
        "currency": order.get("currency"),
        "description": order.get("description") or (order.get("notes") or {}).get("description") or "",
        "status": order.get("status"),
    }


class RazorpayGateway:
    """Passerelle utilisée par l'orchestrateur (substituable en tests)."""

    def create_order(self, amount_minor_units: int, description: str) -> Dict[str, Any]:
        return create_order(amount_minor_units, description)

    def fetch_order(self, order_ref: str) -> Dict[str, Any]:
        return fetch_order(order_ref)
