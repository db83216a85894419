from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from roomezes.utils.security import require_user, require_vendor
from roomezes.utils.rate_limit import optional_rate_limit
from roomezes.checkout.models import OrderStatus
from roomezes.printing import repository as printing_repository
from roomezes.printing import service as printing_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/printing", tags=["Printing API"])


class PrintJobIn(BaseModel):
    # Le front historique envoie du camelCase
    model_config = ConfigDict(populate_by_name=True)

    items: List[Dict[str, Any]] = Field(default_factory=list)
    total_price: float = Field(alias="totalPrice", ge=0)
    notes: str = ""
    file_url: Optional[str] = Field(default=None, alias="fileUrl")
    page_size: Optional[str] = Field(default=None, alias="pageSize")
    color_mode: Optional[str] = Field(default=None, alias="colorMode")
    sides: Optional[str] = None
    pages: Optional[int] = Field(default=None, ge=1)
    copies: Optional[int] = Field(default=None, ge=1)


class PrintStatusIn(BaseModel):
    status: OrderStatus


# module roomezes.printing.views
@router.post("/orders", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_print_order(payload: PrintJobIn, background_tasks: BackgroundTasks, user: Dict[str, Any] = Depends(require_user)):
    """
    Enregistre un travail d'impression; l'imprimerie est prévenue par email en tâche de fond.
    - Sortie: {success, data, message}
    - Erreur: 500 si la commande n'a pas pu être enregistrée
    """
    row = printing_service.place_print_order(
        user_id=str(user.get("id") or ""),
        job=payload.model_dump(),
        schedule=background_tasks.add_task,
    )
    if row is None:
        raise HTTPException(status_code=500, detail="Could not place print order")
    return {"success": True, "data": row, "message": "Order placed successfully!"}

@router.get("/orders")
def list_print_orders(user: Dict[str, Any] = Depends(require_vendor)):
    return {"items": printing_repository.list_print_orders()}

@router.patch("/orders/{order_id}/status")
def update_print_order_status(order_id: str, payload: PrintStatusIn, user: Dict[str, Any] = Depends(require_vendor)):
    row = printing_repository.update_print_order_status(order_id, payload.status.value)
    if row is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"success": True, "data": row}
