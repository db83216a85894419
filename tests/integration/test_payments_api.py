import pytest

from roomezes.payments import razorpay_client
from roomezes.utils.security import require_user

VALID_SIGNATURE = "73f70dc9afd0f0ec1a6673aac9158b61bbb686a0cb6b62f3055f11e274698b1f"

class _Resp:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    def json(self):
        return self._body

def test_create_order_returns_gateway_order(client, monkeypatch):
    captured = {}

    def fake_request(method, url, json=None, auth=None, timeout=None):
        captured["json"] = json
        return _Resp(200, {"id": "order_1", "amount": json["amount"], "currency": "INR", "receipt": json["receipt"]})

    monkeypatch.setattr(razorpay_client.httpx, "request", fake_request)
    r = client.post("/api/v1/payments/create-order", json={"amount": 145, "description": "Lunch"})

    assert r.status_code == 200
    assert r.json() == {"id": "order_1", "amount": 14500, "currency": "INR"}
    assert captured["json"]["amount"] == 14500

@pytest.mark.parametrize("body", [{"amount": 0}, {"amount": -5}, {}, {"amount": "abc"}])
def test_create_order_invalid_amount(client, monkeypatch, body):
    called = []
    monkeypatch.setattr(razorpay_client.httpx, "request", lambda *a, **kw: called.append(1))
    r = client.post("/api/v1/payments/create-order", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid amount"}
    assert called == []

def test_create_order_gateway_error_forwards_status(client, monkeypatch):
    monkeypatch.setattr(
        razorpay_client.httpx, "request",
        lambda *a, **kw: _Resp(401, {"error": {"code": "BAD_REQUEST_ERROR", "description": "Authentication failed"}}),
    )
    r = client.post("/api/v1/payments/create-order", json={"amount": 10})
    assert r.status_code == 401
    assert r.json() == {"error": "Authentication failed"}

def test_verify_payment_success(client):
    r = client.post("/api/v1/payments/verify-payment", json={
        "razorpayOrderId": "ORDER123",
        "razorpayPaymentId": "PAY456",
        "razorpaySignature": VALID_SIGNATURE,
    })
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "message": "Payment verified successfully",
        "orderId": "ORDER123",
        "paymentId": "PAY456",
    }

def test_verify_payment_rejects_tampered_signature(client):
    r = client.post("/api/v1/payments/verify-payment", json={
        "razorpayOrderId": "ORDER123",
        "razorpayPaymentId": "PAY457",
        "razorpaySignature": VALID_SIGNATURE,
    })
    assert r.status_code == 400
    assert r.json() == {"error": "Payment verification failed"}

def test_payments_require_authentication(app, client):
    from fastapi import HTTPException

    def _unauthenticated():
        raise HTTPException(status_code=401, detail="Not authenticated")

    app.dependency_overrides[require_user] = _unauthenticated
    r = client.post("/api/v1/payments/create-order", json={"amount": 10})
    assert r.status_code == 401
