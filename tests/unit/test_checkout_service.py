from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from roomezes.checkout import service as checkout_service
from roomezes.checkout.errors import GatewayUnavailable, OrderPersistFailed, PaymentVerificationFailed
from roomezes.checkout.models import PaymentConfirmation, PersistedOrder
from roomezes.checkout.orchestrator import CheckoutOrchestrator
from roomezes.payments.signature import compute_signature

SECRET = "test_key_secret"
ITEMS = [
    {"item_id": "i1", "name": "Masala Dosa", "unit_price": 45, "quantity": 1},
    {"item_id": "i2", "name": "Paneer Roll", "unit_price": 50, "quantity": 2},
]

class InMemoryOrderStore:
    def __init__(self):
        self.rows = []

    def find_by_payment_ref(self, payment_ref):
        return next((o for o in self.rows if o.external_payment_ref == payment_ref), None)

    def create_order(self, **kw):
        order = PersistedOrder(
            order_id=f"ord-{len(self.rows) + 1}",
            purchaser_id=kw["purchaser_id"],
            vendor_id=kw["vendor_id"],
            line_items=tuple(kw["lines"]),
            total_price=kw["total_price"],
            status=kw["status"],
            external_payment_ref=kw["payment_ref"],
        )
        self.rows.append(order)
        return order

def _orchestrator(gateway_amount=14500):
    gateway = MagicMock()
    gateway.fetch_order.return_value = {"id": "order_1", "amount": gateway_amount, "currency": "INR", "description": "", "status": "paid"}
    store = MagicMock(wraps=InMemoryOrderStore())
    return CheckoutOrchestrator(gateway=gateway, orders=store, secret_key=SECRET, hooks=None)

def _confirmation(signature=None):
    return PaymentConfirmation(
        external_order_ref="order_1",
        external_payment_ref="pay_1",
        signature=signature or compute_signature(SECRET, "order_1", "pay_1"),
    )

def test_confirm_and_place_order_uses_gateway_amount():
    orch = _orchestrator()
    result = checkout_service.confirm_and_place_order(
        purchaser_id="u1", vendor_id="c1", items=ITEMS, confirmation=_confirmation(), orchestrator=orch,
    )
    assert result.status == "completed"
    assert result.order.total_price == Decimal("145")
    orch.gateway.fetch_order.assert_called_once_with("order_1")

def test_confirm_rejects_cart_larger_than_authorised_amount():
    orch = _orchestrator(gateway_amount=1000)
    with pytest.raises(PaymentVerificationFailed):
        checkout_service.confirm_and_place_order(
            purchaser_id="u1", vendor_id="c1", items=ITEMS, confirmation=_confirmation(), orchestrator=orch,
        )
    orch.orders.create_order.assert_not_called()

def test_forged_confirmation_never_reaches_gateway():
    orch = _orchestrator()
    with pytest.raises(PaymentVerificationFailed):
        checkout_service.confirm_and_place_order(
            purchaser_id="u1", vendor_id="c1", items=ITEMS, confirmation=_confirmation("f" * 64), orchestrator=orch,
        )
    orch.gateway.fetch_order.assert_not_called()
    orch.orders.create_order.assert_not_called()

def test_create_intent_begins_attempt():
    gateway = MagicMock()
    gateway.create_order.return_value = {"id": "order_9", "amount": 14500, "currency": "INR"}
    orch = CheckoutOrchestrator(gateway=gateway, orders=MagicMock(), secret_key=SECRET)

    attempt, intent = checkout_service.create_intent(items=ITEMS, description="Lunch", orchestrator=orch)

    gateway.create_order.assert_called_once_with(14500, "Lunch")
    assert intent.external_order_ref == "order_9"
    assert attempt.state.value == "AwaitingPayment"

def test_build_orchestrator_wires_secret_and_scheduler():
    scheduled = []
    orch = checkout_service.build_orchestrator(schedule=scheduled.append)
    assert orch.secret_key == SECRET
    assert orch.schedule == scheduled.append
    assert len(orch.hooks) == 1

def test_same_confirmation_posted_three_times_creates_one_order():
    orch = _orchestrator()
    results = [
        checkout_service.confirm_and_place_order(
            purchaser_id="u1", vendor_id="c1", items=ITEMS, confirmation=_confirmation(), orchestrator=orch,
        )
        for _ in range(3)
    ]

    assert orch.orders.create_order.call_count == 1
    assert {r.order.order_id for r in results} == {"ord-1"}
    assert all(r.status == "completed" for r in results)

def test_gateway_lookup_failure_after_capture_asks_to_contact_support():
    orch = _orchestrator()
    orch.gateway.fetch_order.side_effect = GatewayUnavailable("timeout")

    with pytest.raises(OrderPersistFailed) as exc:
        checkout_service.confirm_and_place_order(
            purchaser_id="u1", vendor_id="c1", items=ITEMS, confirmation=_confirmation(), orchestrator=orch,
        )

    body = exc.value.to_dict()
    assert body["error"] == "order_persist_failed"
    assert body["payment_id"] == "pay_1"
    assert "contact support" in body["detail"]
    assert "try again" not in body["detail"]
    orch.orders.create_order.assert_not_called()
