"""
Module 'cart': panier côté session (lignes, totaux, snapshot pour la commande).
"""

from .models import CartLine, item_fields
from .manager import CartManager

__all__ = [
    "CartLine",
    "CartManager",
    "item_fields",
]
