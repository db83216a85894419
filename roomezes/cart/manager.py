"""
Logique panier pure (pas de passerelle, pas de DB).

Le panier appartient à une seule session utilisateur: aucun verrou.
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .models import CartLine, item_fields

# module roomezes.cart.manager
class CartManager:
    """
    Collection ordonnée de CartLine, au plus une ligne par item_id.
    """

    def __init__(self) -> None:
        self._lines: List[CartLine] = []

    @classmethod
    def from_lines(cls, lines: Iterable[Dict[str, Any]]) -> "CartManager":
        """
        Reconstruit un panier depuis un payload client [{item_id, name, unit_price, quantity}].
        - Les doublons d'item_id sont fusionnés (quantités additionnées).
        - Les lignes à quantité <= 0 sont ignorées.
        """
        cart = cls()
        for raw in lines or []:
            qty = int(raw.get("quantity") or 0)
            if qty <= 0:
                continue
            fields = item_fields(raw)
            existing = cart._find(str(fields["item_id"] or "").strip())
            if existing is not None:
                existing.quantity += qty
            else:
                cart._lines.append(CartLine(quantity=qty, **fields))
        return cart

    def _find(self, item_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.item_id == item_id:
                return line
        return None

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def add(self, item: Any) -> CartLine:
        fields = item_fields(item)
        existing = self._find(str(fields["item_id"] or "").strip())
        if existing is not None:
            existing.quantity += 1
            return existing
        line = CartLine(quantity=1, **fields)
        self._lines.append(line)
        return line

    def set_quantity(self, item_id: str, quantity: int) -> None:
        line = self._find(str(item_id))
        if line is None:
            return
        if quantity <= 0:
            self._lines.remove(line)
            return
        line.quantity = quantity

    def remove(self, item_id: str) -> None:
        line = self._find(str(item_id))
        if line is not None:
            self._lines.remove(line)

    def total(self) -> Decimal:
        return sum((line.line_total for line in self._lines), Decimal("0"))

    def clear(self) -> None:
        self._lines.clear()

    def snapshot(self) -> Tuple[CartLine, ...]:
        """Copie figée des lignes: une commande passée ne suit plus le panier."""
        return tuple(line.model_copy(deep=True) for line in self._lines)
