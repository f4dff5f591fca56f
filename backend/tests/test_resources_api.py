"""CRUD справочников через HTTP: клиенты, сотрудники, столы, товары, позиции заказа."""
import pytest
from sqlalchemy import event

pytestmark = pytest.mark.anyio


async def test_customer_sign_up_is_public(client):
    body = {"name": "Carol", "email": "carol@cafe.test", "phone": "333", "password": "carol123"}
    r = await client.post("/customers", json=body)
    assert r.status_code == 201
    assert isinstance(r.json()["customerId"], int)

    r = await client.post("/customers", json=body)
    assert r.status_code == 409
    assert r.json()["status"] == "error"


async def test_customer_sees_only_own_record(client, headers, seed):
    r = await client.get("/customers", headers=headers["alice"])
    assert r.status_code == 200
    assert [c["email"] for c in r.json()["data"]] == ["alice@cafe.test"]

    assert (await client.get(f"/customers/{seed['alice']}", headers=headers["alice"])).status_code == 200
    assert (await client.get(f"/customers/{seed['bob']}", headers=headers["alice"])).status_code == 403
    r = await client.put(f"/customers/{seed['bob']}", json={"phone": "999"}, headers=headers["alice"])
    assert r.status_code == 403

    r = await client.get("/customers?search=bob", headers=headers["attendant"])
    assert r.json()["total"] == 1
    assert "password_hash" not in r.json()["data"][0]


async def test_customer_update_and_delete(client, headers, seed):
    url = f"/customers/{seed['bob']}"
    r = await client.put(url, json={"phone": "999"}, headers=headers["bob"])
    assert r.status_code == 200
    r = await client.get(url, headers=headers["attendant"])
    assert r.json()["phone"] == "999"
    assert r.json()["name"] == "Bob"

    assert (await client.delete(url, headers=headers["attendant"])).status_code == 403
    assert (await client.delete(url, headers=headers["manager"])).status_code == 200
    assert (await client.get(url, headers=headers["manager"])).status_code == 404


async def test_employee_crud_is_admin_only(client, headers):
    body = {"name": "Dave", "email": "dave@cafe.test", "role": "attendant", "password": "dave1234"}
    assert (await client.post("/employees", json=body, headers=headers["manager"])).status_code == 403
    r = await client.post("/employees", json=body, headers=headers["admin"])
    assert r.status_code == 201
    employee_id = r.json()["employeeId"]

    r = await client.get("/employees?role=attendant", headers=headers["manager"])
    assert {e["email"] for e in r.json()["data"]} == {"attendant@cafe.test", "dave@cafe.test"}

    r = await client.put(f"/employees/{employee_id}", json={"role": "manager"}, headers=headers["admin"])
    assert r.status_code == 200
    r = await client.get(f"/employees/{employee_id}", headers=headers["admin"])
    assert r.json()["role"] == "manager"
    assert (await client.delete(f"/employees/{employee_id}", headers=headers["admin"])).status_code == 200
    assert (await client.delete(f"/employees/{employee_id}", headers=headers["admin"])).status_code == 404


async def test_tables_crud(client, headers):
    r = await client.post("/tables", json={"table_number": 10, "capacity": 6}, headers=headers["manager"])
    assert r.status_code == 201
    table_id = r.json()["tableId"]

    r = await client.post("/tables", json={"table_number": 10}, headers=headers["manager"])
    assert r.status_code == 409

    r = await client.put(f"/tables/{table_id}", json={"status": "unavailable"}, headers=headers["admin"])
    assert r.status_code == 200
    r = await client.get("/tables?search=unavail", headers=headers["alice"])
    assert [t["table_number"] for t in r.json()["data"]] == [10]
    assert (await client.get("/tables/999", headers=headers["alice"])).status_code == 404


async def test_stock_endpoints(client, headers, seed):
    url = f"/products/{seed['cake']}"
    r = await client.post(f"{url}/decrease", json={"quantity": 3}, headers=headers["manager"])
    assert r.status_code == 400
    assert r.json()["message"] == "Not enough stock to decrease"

    assert (await client.post(f"{url}/increase", json={"quantity": 3}, headers=headers["manager"])).status_code == 200
    assert (await client.post(f"{url}/decrease", json={"quantity": 5}, headers=headers["manager"])).status_code == 200
    assert (await client.get(url, headers=headers["alice"])).json()["stock_quantity"] == 0


async def test_order_items_snapshot_price_without_touching_stock(client, headers, seed):
    r = await client.post(
        "/orders",
        json={
            "table_id": seed["tables"][0],
            "employee_id": seed["employee_attendant"],
            "items": [{"product_id": seed["coffee"], "quantity": 1}],
        },
        headers=headers["attendant"],
    )
    order_id = r.json()["orderId"]

    r = await client.post(
        "/order-items",
        json={"order_id": order_id, "product_id": seed["cake"], "quantity": 4},
        headers=headers["attendant"],
    )
    assert r.status_code == 201
    item_id = r.json()["orderItemId"]

    r = await client.get(f"/order-items/{item_id}", headers=headers["attendant"])
    assert r.json()["price_at_order_time"] == 12.0
    assert (await client.get(f"/products/{seed['cake']}", headers=headers["attendant"])).json()["stock_quantity"] == 2

    r = await client.get(f"/order-items?order_id={order_id}", headers=headers["attendant"])
    assert r.json()["total"] == 2

    r = await client.post(
        "/order-items",
        json={"order_id": 999, "product_id": seed["cake"], "quantity": 1},
        headers=headers["attendant"],
    )
    assert r.status_code == 404


async def test_email_is_case_insensitive_identity(client):
    body = {"name": "Carol", "email": "Carol@Cafe.test", "phone": "333", "password": "carol123"}
    r = await client.post("/customers", json=body)
    assert r.status_code == 201

    r = await client.post("/customers", json={**body, "email": "carol@cafe.test"})
    assert r.status_code == 409

    r = await client.post("/auth/customer/login", json={"email": "CAROL@cafe.test", "password": "carol123"})
    assert r.status_code == 200
    assert "token" in r.json()


async def test_employee_email_stored_lowercase(client, headers):
    body = {"name": "Erin", "email": "Erin@Cafe.test", "role": "other", "password": "erin1234"}
    r = await client.post("/employees", json=body, headers=headers["admin"])
    employee_id = r.json()["employeeId"]
    r = await client.get(f"/employees/{employee_id}", headers=headers["admin"])
    assert r.json()["email"] == "erin@cafe.test"

    r = await client.post("/employees", json={**body, "email": "ERIN@cafe.test"}, headers=headers["admin"])
    assert r.status_code == 409

    r = await client.put(
        f"/employees/{employee_id}", json={"email": "Admin@Cafe.Test"}, headers=headers["admin"]
    )
    assert r.status_code == 409


async def test_search_ignores_case(client, headers, engine):
    statements = []

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _collect(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement.lower())

    r = await client.get("/customers?search=ALICE", headers=headers["attendant"])
    assert [c["name"] for c in r.json()["data"]] == ["Alice"]
    r = await client.get("/products?search=cOfFeE", headers=headers["attendant"])
    assert [p["name"] for p in r.json()["data"]] == ["Coffee"]
    r = await client.get("/employees?search=MANAGER", headers=headers["admin"])
    assert [e["email"] for e in r.json()["data"]] == ["manager@cafe.test"]

    event.remove(engine.sync_engine, "before_cursor_execute", _collect)
    # ILIKE в SQLite компилируется в lower(...) LIKE lower(...)
    searches = [s for s in statements if " like " in s and "count(" not in s]
    assert len(searches) == 3
    assert all("lower(" in s for s in searches)
