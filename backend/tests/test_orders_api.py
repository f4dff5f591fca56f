"""Заказы через HTTP и ошибки целостности."""
import pytest

pytestmark = pytest.mark.anyio


def _order(seed, items, table=None):
    return {
        "table_id": table if table is not None else seed["tables"][0],
        "employee_id": seed["employee_attendant"],
        "items": [{"product_id": p, "quantity": q} for p, q in items],
    }


async def test_order_lifecycle(client, headers, seed):
    r = await client.post("/orders", json=_order(seed, [(seed["coffee"], 2)]), headers=headers["attendant"])
    assert r.status_code == 201
    order_id = r.json()["orderId"]

    r = await client.get(f"/orders/{order_id}", headers=headers["alice"])
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "pending"
    assert data["items"][0]["quantity"] == 2
    assert data["items"][0]["price_at_order_time"] == 5.5
    assert data["items"][0]["product"]["stock_quantity"] == 8

    r = await client.put(f"/orders/{order_id}", json={"status": "delivered"}, headers=headers["attendant"])
    assert r.status_code == 200
    r = await client.get("/orders", params={"search": "deliv"}, headers=headers["attendant"])
    assert [o["id"] for o in r.json()["data"]] == [order_id]

    r = await client.put(f"/orders/{order_id}", json={"status": "lost"}, headers=headers["attendant"])
    assert r.status_code == 400

    assert (await client.delete(f"/orders/{order_id}", headers=headers["attendant"])).status_code == 200
    assert (await client.get(f"/orders/{order_id}", headers=headers["attendant"])).status_code == 404


async def test_order_requires_auth_and_items(client, headers, seed):
    body = _order(seed, [(seed["coffee"], 1)])
    assert (await client.post("/orders", json=body)).status_code == 401

    r = await client.post("/orders", json=_order(seed, []), headers=headers["attendant"])
    assert r.status_code == 400

    r = await client.post("/orders", json=_order(seed, [(seed["coffee"], 0)]), headers=headers["attendant"])
    assert r.status_code == 400


async def test_failed_order_leaves_stock_untouched(client, headers, seed):
    r = await client.post(
        "/orders",
        json=_order(seed, [(seed["coffee"], 1), (seed["cake"], 3)]),
        headers=headers["attendant"],
    )
    assert r.status_code == 400
    assert r.json()["message"] == f"Not enough stock for product ID {seed['cake']}"

    r = await client.post("/orders", json=_order(seed, [(999, 1)]), headers=headers["attendant"])
    assert r.status_code == 404

    assert (await client.get(f"/products/{seed['coffee']}", headers=headers["attendant"])).json()["stock_quantity"] == 10
    assert (await client.get("/orders", headers=headers["attendant"])).json()["total"] == 0


async def test_foreign_key_errors_are_400(client, headers, seed):
    r = await client.post(
        "/orders", json=_order(seed, [(seed["coffee"], 1)], table=999), headers=headers["attendant"]
    )
    assert r.status_code == 400
    assert r.json()["message"] == "One of the specified foreign keys does not exist"

    await client.post("/orders", json=_order(seed, [(seed["coffee"], 1)]), headers=headers["attendant"])
    r = await client.delete(f"/tables/{seed['tables'][0]}", headers=headers["admin"])
    assert r.status_code == 400
    assert r.json()["message"] == "Cannot delete or update because a related record exists"


async def test_dashboard_endpoints(client, headers, seed):
    await client.post("/orders", json=_order(seed, [(seed["coffee"], 2)]), headers=headers["attendant"])

    r = await client.get("/dashboard/stats", headers=headers["manager"])
    assert r.status_code == 200
    data = r.json()
    assert data["pendingOrders"] == 1
    assert data["lowStockProducts"] == 2
    assert set(data) >= {"totalOrders", "completedOrders", "todayReservations", "topSellingProducts"}

    r = await client.get("/dashboard/stats/detailed", params={"period": "week"}, headers=headers["manager"])
    assert r.status_code == 200
    assert r.json()["period"] == "week"
