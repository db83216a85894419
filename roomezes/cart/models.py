"""
Types du panier.
"""
from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

# module roomezes.cart.models
class CartLine(BaseModel):
    """
    Ligne de panier: un article de menu et sa quantité.
    - unit_price >= 0, quantity >= 1 (une ligne à 0 est retirée, jamais conservée)
    """
    model_config = ConfigDict(validate_assignment=True)

    item_id: str = Field(min_length=1)
    name: str = ""
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)

    @field_validator("item_id", mode="before")
    @classmethod
    def _item_id_as_str(cls, v: Any) -> str:
        return str(v or "").strip()

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_order_item(self) -> Dict[str, Any]:
        """Format attendu par la table canteen_orders: {item, name, quantity, price}."""
        return {
            "item": self.item_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": float(self.unit_price),
        }


def item_fields(item: Any) -> Dict[str, Any]:
    """
    Extrait (id, name, price) d'un article de menu (dict Supabase ou objet).
    - name retombe sur item_name (deux schémas coexistent côté tables cantine)
    """
    get = item.get if isinstance(item, dict) else (lambda k, d=None: getattr(item, k, d))
    item_id = get("id") or get("item_id")
    name = get("name") or get("item_name") or ""
    price = get("price")
    if price is None:
        price = get("unit_price")
    return {"item_id": item_id, "name": name, "unit_price": Decimal(str(price if price is not None else 0))}
