from fastapi import HTTPException

from roomezes.canteens import repository as canteens_repository
from roomezes.utils.security import require_vendor

ORDER_ROW = {
    "id": "o1",
    "user_id": "test-user",
    "canteen_id": "c1",
    "items": [{"item": "i1", "name": "Masala Dosa", "quantity": 2, "price": 45}],
    "total_price": 90,
    "payment_id": "pay_1",
    "status": "pending",
}

def test_list_canteens_is_public(client, monkeypatch):
    monkeypatch.setattr(canteens_repository, "list_canteens", lambda: [{"id": "c1", "name": "Main Canteen"}])
    r = client.get("/api/v1/canteens")
    assert r.status_code == 200
    assert r.json() == {"items": [{"id": "c1", "name": "Main Canteen"}]}

def test_menu_is_normalized_and_filtered(client, monkeypatch):
    seen = {}

    def fake_list(canteen_id, category):
        seen["args"] = (canteen_id, category)
        return [{"id": "i1", "item_name": "Poha", "price": "30", "available": True}]

    monkeypatch.setattr(canteens_repository, "list_menu_items", fake_list)
    r = client.get("/api/v1/canteens/c1/menu", params={"category": "Breakfast"})

    assert r.status_code == 200
    item = r.json()["items"][0]
    assert item["name"] == "Poha"
    assert item["price"] == 30.0
    assert item["category"] == "Lunch"
    assert seen["args"] == ("c1", "Breakfast")

def test_my_orders_uses_current_user(client, monkeypatch):
    seen = []
    monkeypatch.setattr(canteens_repository, "list_orders_for_user", lambda uid: seen.append(uid) or [ORDER_ROW])
    r = client.get("/api/v1/canteens/orders/mine")
    assert r.status_code == 200
    assert seen == ["test-user"]
    order = r.json()["items"][0]
    assert order["total_price"] == 90.0
    assert order["items"][0]["quantity"] == 2

def test_vendor_routes_reject_students(app, client):
    def _forbidden():
        raise HTTPException(status_code=403, detail="Forbidden")

    app.dependency_overrides[require_vendor] = _forbidden
    try:
        r = client.get("/api/v1/canteens/c1/orders")
    finally:
        app.dependency_overrides.pop(require_vendor, None)
    assert r.status_code == 403

def test_vendor_lists_canteen_orders(vendor_client, monkeypatch):
    monkeypatch.setattr(canteens_repository, "list_orders_for_canteen", lambda cid, limit=50: [ORDER_ROW])
    r = vendor_client.get("/api/v1/canteens/c1/orders")
    assert r.status_code == 200
    assert r.json()["items"][0]["id"] == "o1"

def test_vendor_updates_order_status(vendor_client, monkeypatch):
    monkeypatch.setattr(
        canteens_repository, "update_order_status",
        lambda oid, status: dict(ORDER_ROW, status=status),
    )
    r = vendor_client.patch("/api/v1/canteens/orders/o1/status", json={"status": "preparing"})
    assert r.status_code == 200
    assert r.json()["order"]["status"] == "preparing"

def test_order_status_unknown_order_is_404(vendor_client, monkeypatch):
    monkeypatch.setattr(canteens_repository, "update_order_status", lambda oid, status: None)
    r = vendor_client.patch("/api/v1/canteens/orders/missing/status", json={"status": "ready"})
    assert r.status_code == 404

def test_order_status_rejects_unknown_value(vendor_client):
    r = vendor_client.patch("/api/v1/canteens/orders/o1/status", json={"status": "teleported"})
    assert r.status_code == 422

def test_inventory_update(vendor_client, monkeypatch):
    monkeypatch.setattr(canteens_repository, "update_inventory", lambda iid, qty: {"id": iid, "stock_quantity": qty})
    r = vendor_client.patch("/api/v1/canteens/inventory/inv1", json={"stock_quantity": 12})
    assert r.status_code == 200
    assert r.json()["inventory"] == {"id": "inv1", "stock_quantity": 12}

def test_inventory_negative_stock_is_422(vendor_client):
    r = vendor_client.patch("/api/v1/canteens/inventory/inv1", json={"stock_quantity": -1})
    assert r.status_code == 422

def test_inventory_missing_row_is_404(vendor_client, monkeypatch):
    monkeypatch.setattr(canteens_repository, "update_inventory", lambda iid, qty: None)
    r = vendor_client.patch("/api/v1/canteens/inventory/nope", json={"stock_quantity": 3})
    assert r.status_code == 404

def test_add_menu_item_creates_item_and_stock(vendor_client, monkeypatch):
    monkeypatch.setattr(canteens_repository, "insert_menu_item", lambda data: dict(data, id="i9"))
    monkeypatch.setattr(canteens_repository, "insert_inventory_row", lambda cid, item_id: {"item_id": item_id, "stock_quantity": 50})
    r = vendor_client.post("/api/v1/canteens/c1/items", json={"name": "Vada Pav", "price": 20})
    assert r.status_code == 201
    body = r.json()
    assert body["item"]["id"] == "i9"
    assert body["inventory"]["stock_quantity"] == 50

def test_add_menu_item_failure_is_500(vendor_client, monkeypatch):
    monkeypatch.setattr(canteens_repository, "insert_menu_item", lambda data: None)
    r = vendor_client.post("/api/v1/canteens/c1/items", json={"name": "Vada Pav", "price": 20})
    assert r.status_code == 500

def test_toggle_availability_missing_item_is_404(vendor_client, monkeypatch):
    monkeypatch.setattr(canteens_repository, "get_menu_item", lambda iid: None)
    r = vendor_client.patch("/api/v1/canteens/items/nope/availability")
    assert r.status_code == 404
