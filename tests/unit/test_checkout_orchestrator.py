import asyncio
from decimal import Decimal

import pytest

from roomezes.cart import CartManager
from roomezes.checkout.attempt import CheckoutState
from roomezes.checkout.errors import (
    GatewayUnavailable,
    InvalidAmount,
    OrderPersistFailed,
    PaymentFailed,
    PaymentVerificationFailed,
)
from roomezes.checkout.models import (
    Cancelled,
    Confirmed,
    Failed,
    OrderStatus,
    PaymentConfirmation,
    PersistedOrder,
)
from roomezes.checkout.orchestrator import CheckoutOrchestrator
from roomezes.notifications.dispatcher import PostCommitHooks
from roomezes.payments.signature import compute_signature
from roomezes.session.context import Identity, SessionContext

SECRET = "test_key_secret"


class FakeGateway:
    def __init__(self, order_id="order_1", error=None):
        self.order_id = order_id
        self.error = error
        self.calls = []

    def create_order(self, amount_minor_units, description):
        self.calls.append((amount_minor_units, description))
        if self.error is not None:
            raise self.error
        return {"id": self.order_id, "amount": amount_minor_units, "currency": "INR"}


class FakeOrderStore:
    def __init__(self, error=None, lookup_error=None):
        self.error = error
        self.lookup_error = lookup_error
        self.calls = []
        self.orders = []

    def find_by_payment_ref(self, payment_ref):
        if self.lookup_error is not None:
            raise self.lookup_error
        return next((o for o in self.orders if o.external_payment_ref == payment_ref), None)

    def create_order(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        order = PersistedOrder(
            order_id=f"3f2a9c1e-0000-4000-8000-{len(self.orders) + 1:012d}",
            purchaser_id=kwargs["purchaser_id"],
            vendor_id=kwargs["vendor_id"],
            line_items=tuple(kwargs["lines"]),
            total_price=kwargs["total_price"],
            status=kwargs["status"],
            external_payment_ref=kwargs["payment_ref"],
        )
        self.orders.append(order)
        return order


def _cart_145():
    cart = CartManager()
    cart.add({"id": "i1", "name": "Masala Dosa", "price": 45})
    cart.add({"id": "i2", "name": "Paneer Roll", "price": 50})
    cart.add({"id": "i2", "name": "Paneer Roll", "price": 50})
    return cart

def _session():
    return SessionContext(Identity(user_id="student-1", email="s@campus.edu"))

def _confirmed(order_ref="order_1", payment_ref="pay_1", signature=None):
    return Confirmed(confirmation=PaymentConfirmation(
        external_order_ref=order_ref,
        external_payment_ref=payment_ref,
        signature=signature if signature is not None else compute_signature(SECRET, order_ref, payment_ref),
    ))

def _orchestrator(gateway=None, store=None, hooks=None, schedule=None):
    return CheckoutOrchestrator(
        gateway=gateway or FakeGateway(),
        orders=store or FakeOrderStore(),
        secret_key=SECRET,
        hooks=hooks,
        schedule=schedule,
    )

def _collect(outcome):
    async def collect_payment(intent):
        return outcome
    return collect_payment


def test_checkout_happy_path_persists_pending_order_and_clears_cart():
    gateway, store = FakeGateway(), FakeOrderStore()
    notified = []
    hooks = PostCommitHooks([notified.append])
    orch = _orchestrator(gateway, store, hooks)
    cart = _cart_145()

    result = asyncio.run(orch.checkout(cart, _session(), "canteen-1", _collect(_confirmed()), "Lunch"))

    assert gateway.calls == [(14500, "Lunch")]
    assert result.status == "completed"
    assert result.order.status == OrderStatus.PENDING
    assert result.order.total_price == Decimal("145")
    assert result.order.external_payment_ref == "pay_1"
    assert cart.is_empty
    assert notified == [result.order]
    assert orch.current_attempt.state == CheckoutState.COMPLETED

    persisted = store.calls[0]
    assert persisted["purchaser_id"] == "student-1"
    assert persisted["vendor_id"] == "canteen-1"
    assert [(line.item_id, line.quantity) for line in persisted["lines"]] == [("i1", 1), ("i2", 2)]

CARTS = {
    "single_line": [{"id": "i1", "name": "Chai", "price": 12}],
    "many_lines": [{"id": f"i{n}", "name": f"Item {n}", "price": 10 + n} for n in range(12)],
    "fractional_price": [{"id": "i1", "name": "Cutting Chai", "price": "7.50"}, {"id": "i2", "name": "Bun Maska", "price": "22.25"}],
    "repeated_item": [{"id": "i1", "name": "Samosa", "price": 15}] * 4,
}

@pytest.mark.parametrize("signature", ["0" * 64, "", "not-hex", compute_signature("wrong_secret", "order_1", "pay_1")])
@pytest.mark.parametrize("items", list(CARTS.values()), ids=list(CARTS))
def test_bad_signature_never_persists_and_keeps_cart(items, signature):
    store = FakeOrderStore()
    notified = []
    orch = _orchestrator(store=store, hooks=PostCommitHooks([notified.append]))
    cart = CartManager()
    for it in items:
        cart.add(it)
    total_before = cart.total()
    lines_before = cart.snapshot()

    with pytest.raises(PaymentVerificationFailed):
        asyncio.run(orch.checkout(cart, _session(), "canteen-1", _collect(_confirmed(signature=signature))))

    assert store.calls == []
    assert notified == []
    assert cart.total() == total_before
    assert cart.snapshot() == lines_before
    assert orch.current_attempt.state == CheckoutState.FAILED

def test_confirmation_for_another_order_is_rejected():
    store = FakeOrderStore()
    orch = _orchestrator(store=store)
    cart = _cart_145()

    with pytest.raises(PaymentVerificationFailed):
        asyncio.run(orch.checkout(cart, _session(), "canteen-1", _collect(_confirmed(order_ref="order_other"))))
    assert store.calls == []

def test_cart_changed_during_payment_fails_verification():
    store = FakeOrderStore()
    orch = _orchestrator(store=store)
    cart = _cart_145()
    attempt, intent = orch.begin(cart, "")
    cart.add({"id": "i3", "name": "Lassi", "price": 30})

    with pytest.raises(PaymentVerificationFailed):
        orch.complete(attempt, intent, cart, _confirmed().confirmation, "student-1", "canteen-1")
    assert store.calls == []
    assert not cart.is_empty

def test_persist_failure_raises_and_preserves_cart():
    store = FakeOrderStore(error=OrderPersistFailed("insert rejected", payment_id="pay_1"))
    notified = []
    orch = _orchestrator(store=store, hooks=PostCommitHooks([notified.append]))
    cart = _cart_145()

    with pytest.raises(OrderPersistFailed) as exc:
        asyncio.run(orch.checkout(cart, _session(), "canteen-1", _collect(_confirmed())))

    assert exc.value.to_dict()["payment_id"] == "pay_1"
    assert cart.total() == Decimal("145")
    assert notified == []
    assert orch.current_attempt.state == CheckoutState.FAILED

def test_notification_failure_does_not_affect_result():
    def boom(order):
        raise RuntimeError("whatsapp down")
    seen = []
    orch = _orchestrator(hooks=PostCommitHooks([boom, seen.append]))
    cart = _cart_145()

    result = asyncio.run(orch.checkout(cart, _session(), "canteen-1", _collect(_confirmed())))

    assert result.status == "completed"
    assert len(seen) == 1
    assert cart.is_empty

def test_hooks_are_scheduled_when_scheduler_given():
    scheduled = []
    ran = []
    hooks = PostCommitHooks([ran.append])
    orch = _orchestrator(hooks=hooks, schedule=lambda fn, *args: scheduled.append((fn, args)))

    result = asyncio.run(orch.checkout(_cart_145(), _session(), "canteen-1", _collect(_confirmed())))

    assert ran == []
    assert scheduled == [(hooks.run, (result.order,))]

def test_gateway_failure_leaves_cart_untouched():
    gateway = FakeGateway(error=GatewayUnavailable("503 from gateway", status=503))
    store = FakeOrderStore()
    orch = _orchestrator(gateway=gateway, store=store)
    cart = _cart_145()

    with pytest.raises(GatewayUnavailable):
        asyncio.run(orch.checkout(cart, _session(), "canteen-1", _collect(_confirmed())))

    assert cart.total() == Decimal("145")
    assert store.calls == []
    assert orch.current_attempt.state == CheckoutState.FAILED

def test_cancelled_payment_returns_to_idle():
    store = FakeOrderStore()
    orch = _orchestrator(store=store)
    cart = _cart_145()

    result = asyncio.run(orch.checkout(cart, _session(), "canteen-1", _collect(Cancelled())))

    assert result.status == "cancelled"
    assert result.order is None
    assert cart.item_count == 3
    assert store.calls == []
    assert orch.current_attempt.state == CheckoutState.IDLE

def test_failed_payment_raises_payment_failed_with_reason():
    orch = _orchestrator()
    cart = _cart_145()

    with pytest.raises(PaymentFailed) as exc:
        asyncio.run(orch.checkout(cart, _session(), "canteen-1", _collect(Failed(reason="card declined"))))

    assert exc.value.reason == "card declined"
    assert cart.item_count == 3

@pytest.mark.parametrize("items", [[], [{"id": "free", "name": "Water", "price": 0}]])
def test_empty_or_zero_cart_is_rejected_before_gateway(items):
    gateway = FakeGateway()
    orch = _orchestrator(gateway=gateway)
    cart = CartManager()
    for it in items:
        cart.add(it)

    with pytest.raises(InvalidAmount):
        orch.begin(cart, "")
    assert gateway.calls == []

def test_anonymous_session_cannot_checkout():
    gateway = FakeGateway()
    orch = _orchestrator(gateway=gateway)

    with pytest.raises(PermissionError):
        asyncio.run(orch.checkout(_cart_145(), SessionContext(), "canteen-1", _collect(_confirmed())))
    assert gateway.calls == []

def test_begin_again_discards_previous_attempt():
    orch = _orchestrator()
    cart = _cart_145()
    first, _ = orch.begin(cart, "")
    second, intent = orch.begin(cart, "")

    assert first.attempt_id != second.attempt_id
    assert orch.current_attempt is second
    assert intent.amount == Decimal("145")
    assert intent.external_order_ref == "order_1"

def test_replayed_confirmation_returns_existing_order_without_new_row():
    store = FakeOrderStore()
    notified = []
    orch = _orchestrator(store=store, hooks=PostCommitHooks([notified.append]))
    first = asyncio.run(orch.checkout(_cart_145(), _session(), "canteen-1", _collect(_confirmed())))

    replay_cart = _cart_145()
    again = asyncio.run(orch.checkout(replay_cart, _session(), "canteen-1", _collect(_confirmed())))

    assert len(store.calls) == 1
    assert again.status == "completed"
    assert again.order == first.order
    assert notified == [first.order]
    assert replay_cart.is_empty
    assert orch.current_attempt.state == CheckoutState.COMPLETED

def test_confirmation_reused_by_another_purchaser_is_rejected():
    store = FakeOrderStore()
    orch = _orchestrator(store=store)
    asyncio.run(orch.checkout(_cart_145(), _session(), "canteen-1", _collect(_confirmed())))

    other = SessionContext(Identity(user_id="student-2", email="t@campus.edu"))
    cart = _cart_145()
    with pytest.raises(PaymentVerificationFailed) as exc:
        asyncio.run(orch.checkout(cart, other, "canteen-1", _collect(_confirmed())))

    assert exc.value.to_dict()["payment_id"] == "pay_1"
    assert len(store.calls) == 1
    assert cart.total() == Decimal("145")
    assert orch.current_attempt.state == CheckoutState.FAILED

def test_payment_lookup_failure_is_a_persist_failure():
    store = FakeOrderStore(lookup_error=OrderPersistFailed("read timeout", payment_id="pay_1"))
    orch = _orchestrator(store=store)
    cart = _cart_145()

    with pytest.raises(OrderPersistFailed):
        asyncio.run(orch.checkout(cart, _session(), "canteen-1", _collect(_confirmed())))

    assert store.calls == []
    assert not cart.is_empty
    assert orch.current_attempt.state == CheckoutState.FAILED

@pytest.mark.parametrize("price", ["0.004", "0.001"])
def test_sub_paisa_total_is_rejected_before_gateway(price):
    gateway = FakeGateway()
    orch = _orchestrator(gateway=gateway)
    cart = CartManager()
    cart.add({"id": "crumb", "name": "Crumb", "price": price})

    with pytest.raises(InvalidAmount):
        orch.begin(cart, "")
    assert gateway.calls == []
    assert orch.current_attempt.state == CheckoutState.FAILED
