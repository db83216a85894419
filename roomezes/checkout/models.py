"""
Types du checkout: intention, confirmation, issue du paiement, commande persistée.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from roomezes.cart import CartLine


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CheckoutIntent(BaseModel):
    """Projection transitoire du panier envoyée à la passerelle; jamais persistée."""
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(gt=0)
    currency: str = "INR"
    description: str = ""
    external_order_ref: str = Field(min_length=1)


class PaymentConfirmation(BaseModel):
    """Message du callback de la passerelle: non fiable tant que la signature n'est pas vérifiée."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    external_order_ref: str = Field(alias="razorpayOrderId")
    external_payment_ref: str = Field(alias="razorpayPaymentId")
    signature: str = Field(alias="razorpaySignature")


class Confirmed(BaseModel):
    kind: Literal["confirmed"] = "confirmed"
    confirmation: PaymentConfirmation


class Cancelled(BaseModel):
    kind: Literal["cancelled"] = "cancelled"


class Failed(BaseModel):
    kind: Literal["failed"] = "failed"
    reason: str = "Payment failed"


PaymentOutcome = Union[Confirmed, Cancelled, Failed]


class PersistedOrder(BaseModel):
    """Copie locale d'une ligne canteen_orders (la source de vérité reste Supabase)."""
    model_config = ConfigDict(frozen=True)

    order_id: str
    purchaser_id: str
    vendor_id: str
    line_items: Tuple[CartLine, ...]
    total_price: Decimal
    status: OrderStatus = OrderStatus.PENDING
    external_payment_ref: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PersistedOrder":
        """Construit une commande depuis la ligne renvoyée par Supabase."""
        items = tuple(
            CartLine(
                item_id=str(it.get("item") or it.get("item_id") or ""),
                name=it.get("name") or "",
                unit_price=Decimal(str(it.get("price") or 0)),
                quantity=int(it.get("quantity") or 1),
            )
            for it in (row.get("items") or [])
        )
        try:
            status = OrderStatus(row.get("status") or OrderStatus.PENDING.value)
        except ValueError:
            status = OrderStatus.PENDING
        return cls(
            order_id=str(row.get("id") or ""),
            purchaser_id=str(row.get("user_id") or ""),
            vendor_id=str(row.get("canteen_id") or row.get("vendor_id") or ""),
            line_items=items,
            total_price=Decimal(str(row.get("total_price") or 0)),
            status=status,
            external_payment_ref=row.get("payment_id"),
            created_at=row.get("created_at"),
        )

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.order_id,
            "user_id": self.purchaser_id,
            "vendor_id": self.vendor_id,
            "items": [line.to_order_item() for line in self.line_items],
            "total_price": float(self.total_price),
            "status": self.status.value,
            "payment_id": self.external_payment_ref,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class CheckoutResult(BaseModel):
    status: Literal["completed", "cancelled"]
    order: Optional[PersistedOrder] = None
