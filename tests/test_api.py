from datetime import datetime

from fastapi.testclient import TestClient

from app.enums.lifecycle_states import LifecycleState
from app.main import app
from app.models.product import Product
from app.routes import products as products_routes
from app.services import lifecycle_service
from conftest import make_active_product, make_product


def test_register_login_and_me(client):
    res = client.post(
        "/auth/register",
        json={"username": "alice", "password": "pw123456", "email": "alice@example.com"},
    )
    assert res.status_code == 201
    assert res.json()["role"] == "user"

    duplicate = client.post("/auth/register", json={"username": "alice", "password": "another1"})
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False

    tokens = client.post("/auth/login", data={"username": "alice", "password": "pw123456"}).json()
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.json()["username"] == "alice"

    refreshed = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["access_token"]


def test_refresh_token_cannot_authenticate(client):
    client.post("/auth/register", json={"username": "bob", "password": "pw123456"})
    tokens = client.post("/auth/login", data={"username": "bob", "password": "pw123456"}).json()

    res = client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})

    assert res.status_code == 401


def test_bad_login(client):
    res = client.post("/auth/login", data={"username": "ghost", "password": "nope"})

    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Invalid credentials"}


def test_create_product_requires_staff(client, category):
    payload = {"name": "Tablet", "category_id": category.id, "unit_price": 199.0}

    assert client.post("/products/", json=payload).status_code == 401

    client.post("/auth/register", json={"username": "viewer", "password": "pw123456"})
    token = client.post("/auth/login", data={"username": "viewer", "password": "pw123456"}).json()
    res = client.post("/products/", json=payload, headers={"Authorization": f"Bearer {token['access_token']}"})
    assert res.status_code == 403


def _login(client, username, password="pw123456"):
    token = client.post("/auth/login", data={"username": username, "password": password}).json()
    return {"Authorization": f"Bearer {token['access_token']}"}


def test_registration_ignores_requested_role(client, db, category):
    res = client.post(
        "/auth/register",
        json={"username": "mallory", "password": "pw123456", "role": "admin"},
    )
    assert res.status_code == 201
    assert res.json()["role"] == "user"

    product = make_product(db, category_id=category.id)
    lifecycle_service.transition(db, product.id, LifecycleState.pending_approval, "staff")

    res = client.post(f"/products/{product.id}/approve", headers=_login(client, "mallory"))

    assert res.status_code == 403
    db.expire_all()
    assert db.get(Product, product.id).lifecycle_state == "pending_approval"


def test_admin_assigns_roles(client, category, admin_headers, staff_headers):
    client.post("/auth/register", json={"username": "carol", "password": "pw123456"})
    carol = _login(client, "carol")
    payload = {"name": "Tablet", "category_id": category.id, "unit_price": 199.0}
    assert client.post("/products/", json=payload, headers=carol).status_code == 403

    # only admins grant roles
    denied = client.put("/auth/users/carol/role", json={"role": "admin"}, headers=staff_headers)
    assert denied.status_code == 403

    res = client.put("/auth/users/carol/role", json={"role": "warehouse_staff"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["role"] == "warehouse_staff"
    assert client.post("/products/", json=payload, headers=carol).status_code == 201

    own = client.put("/auth/users/admin/role", json={"role": "user"}, headers=admin_headers)
    assert own.status_code == 400
    assert own.json()["message"] == "Cannot change your own role"

    missing = client.put("/auth/users/ghost/role", json={"role": "user"}, headers=admin_headers)
    assert missing.status_code == 404

    unknown = client.put("/auth/users/carol/role", json={"role": "owner"}, headers=admin_headers)
    assert unknown.status_code == 400


def test_product_crud_flow(client, category, staff_headers, admin_headers):
    res = client.post(
        "/products/lifecycle",
        json={"name": "Tablet", "category_id": category.id, "unit_price": 199.0},
        headers=staff_headers,
    )
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    product = body["data"]
    assert product["lifecycle_state"] == "draft"
    assert product["created_by"] == "staff"
    assert product["sku"].startswith("ELE-")

    fetched = client.get(f"/products/{product['id']}").json()["data"]
    assert fetched["name"] == "Tablet"
    by_sku = client.get(f"/products/sku/{product['sku']}").json()["data"]
    assert by_sku["id"] == product["id"]

    updated = client.put(
        f"/products/{product['id']}", json={"color": "silver"}, headers=staff_headers
    ).json()["data"]
    assert updated["color"] == "silver"

    batch = client.post("/products/batch", json={"ids": [product["id"], 999]}).json()
    assert batch["count"] == 1

    listing = client.get("/products/", params={"category_id": category.id}).json()
    assert listing["count"] == 1

    assert client.delete(f"/products/{product['id']}", headers=staff_headers).status_code == 403
    assert client.delete(f"/products/{product['id']}", headers=admin_headers).json()["success"] is True
    assert client.get(f"/products/{product['id']}").status_code == 404


def test_not_found_envelope(client):
    res = client.get("/products/999")

    assert res.status_code == 404
    assert res.json() == {"success": False, "message": "Product not found: 999"}


def test_lifecycle_over_http(client, db, category, staff_headers, admin_headers):
    product = make_product(db, category_id=category.id)

    res = client.post(f"/products/{product.id}/submit-for-approval", headers=staff_headers)
    assert res.json()["data"]["lifecycle_state"] == "pending_approval"

    # staff cannot approve
    assert client.post(f"/products/{product.id}/approve", headers=staff_headers).status_code == 403

    pending = client.get("/products/pending-approvals", headers=admin_headers).json()
    assert pending["count"] == 1
    assert pending["data"][0]["history_count"] == 2

    res = client.post(
        f"/products/{product.id}/approve", json={"notes": "ok"}, headers=admin_headers
    )
    assert res.json()["data"]["approved_by"] == "admin"

    res = client.post(
        f"/products/{product.id}/transition",
        json={"new_state": "active", "notes": "launch"},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["data"]["is_active"] is True

    history = client.get(f"/products/{product.id}/lifecycle-history", params={"limit": 1}).json()
    assert history["count"] == 1
    assert history["data"][0]["notes"] == "launch"
    assert history["data"][0]["old_state"] == "approved"

    by_state = client.get("/products/by-state/active").json()
    assert [p["id"] for p in by_state["data"]] == [product.id]

    stats = client.get("/products/lifecycle-stats", headers=admin_headers).json()["data"]
    assert stats["counts"]["active"] == 1


def test_invalid_transition_over_http(client, db, category, admin_headers):
    product = make_product(db, category_id=category.id)

    res = client.post(
        f"/products/{product.id}/transition",
        json={"new_state": "active"},
        headers=admin_headers,
    )

    assert res.status_code == 400
    assert res.json()["message"] == "Invalid state transition: draft -> active"
    assert db.get(Product, product.id).lifecycle_state == "draft"


def test_unknown_state_is_a_validation_error(client, db, category, admin_headers):
    product = make_product(db, category_id=category.id)

    res = client.post(
        f"/products/{product.id}/transition",
        json={"new_state": "sold_out"},
        headers=admin_headers,
    )

    assert res.status_code == 400
    assert res.json()["message"] == "Validation failed"
    assert res.json()["errors"][0].startswith("new_state")


def test_bulk_approve_over_http(client, db, category, admin_headers):
    ready = make_product(db, category_id=category.id, name="Ready")
    client.post(f"/products/{ready.id}/submit-for-approval", headers=admin_headers)
    draft = make_product(db, category_id=category.id, name="Draft")

    res = client.post(
        "/products/bulk-approve",
        json={"product_ids": [ready.id, draft.id]},
        headers=admin_headers,
    )

    data = res.json()["data"]
    assert data["success_count"] == 1
    assert data["failure_count"] == 1
    assert data["results"][0]["product"]["lifecycle_state"] == "approved"
    assert data["results"][1]["error_type"] == "InvalidTransitionError"


def test_pricing_rules_and_calculation(client, db, category, admin_headers):
    product = make_active_product(db, category.id, unit_price=100.0)

    res = client.post(
        "/pricing/rules/",
        json={
            "rule_name": "Bulk 10+",
            "rule_type": "bulk",
            "product_id": product.id,
            "min_quantity": 10,
            "discount_percentage": 10,
        },
        headers=admin_headers,
    )
    assert res.status_code == 201
    rule_id = res.json()["data"]["id"]

    today = datetime.utcnow().date()
    client.post(
        "/pricing/rules/",
        json={
            "rule_name": "Flash Week",
            "rule_type": "promotion",
            "product_id": product.id,
            "discount_percentage": 5,
            "valid_from": today.isoformat(),
            "valid_until": today.isoformat(),
        },
        headers=admin_headers,
    )

    res = client.post("/pricing/calculate", json={"product_id": product.id, "quantity": 10})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["price_per_unit"] == 85.5
    assert data["final_total"] == 855.0
    assert [d["rule"] for d in data["applied_discounts"]] == ["Bulk 10+", "Flash Week"]

    listed = client.get("/pricing/rules/", params={"rule_type": "bulk"}, headers=admin_headers).json()
    assert listed["count"] == 1

    deactivated = client.delete(f"/pricing/rules/{rule_id}", headers=admin_headers).json()["data"]
    assert deactivated["is_active"] is False
    res = client.post("/pricing/calculate", json={"product_id": product.id, "quantity": 10})
    assert res.json()["data"]["price_per_unit"] == 95.0


def test_invalid_rule_is_rejected(client, admin_headers):
    res = client.post(
        "/pricing/rules/",
        json={"rule_name": "Broken", "rule_type": "promotion", "discount_percentage": 5},
        headers=admin_headers,
    )

    assert res.status_code == 400
    assert res.json()["errors"] == ["Promotion rules require both valid_from and valid_until"]


def test_calculate_rejects_bad_quantity(client, db, category):
    product = make_active_product(db, category.id)

    res = client.post("/pricing/calculate", json={"product_id": product.id, "quantity": 0})

    assert res.status_code == 400
    assert res.json()["success"] is False
    assert res.json()["errors"][0].startswith("quantity")


def test_bundle_and_compare_over_http(client, db, category):
    first = make_active_product(db, category.id, unit_price=100.0, name="Console")
    second = make_active_product(db, category.id, unit_price=60.0, name="Controller")

    bundle = client.post(
        "/pricing/calculate-bundle",
        json={"items": [{"product_id": first.id}, {"product_id": second.id, "quantity": 2}]},
    ).json()["data"]
    assert bundle["subtotal"] == 220.0
    assert bundle["bundle_discount"] == 11.0
    assert bundle["final_total"] == 209.0

    compare = client.post(
        "/pricing/compare",
        json={"product_id": first.id, "competitor_prices": [{"name": "Rival", "price": 125.0}]},
    ).json()["data"]
    assert compare["positioning"] == "lowest"


def test_categories_over_http(client, staff_headers, admin_headers):
    res = client.post("/categories/", json={"name": "Toys", "code": "toy"}, headers=staff_headers)
    assert res.status_code == 201
    category = res.json()["data"]
    assert category["code"] == "TOY"

    conflict = client.post("/categories/", json={"name": "Toys"}, headers=staff_headers)
    assert conflict.status_code == 409

    assert client.get("/categories/").json()["count"] == 1
    assert client.delete(f"/categories/{category['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/categories/{category['id']}").status_code == 404


def test_health_and_metrics(client, db, category, admin_headers):
    make_active_product(db, category.id)
    make_product(db, category_id=category.id, name="Draft One")

    health = client.get("/health").json()
    assert health["status"] == "ok"
    assert health["db_ok"] is True

    metrics = client.get("/metrics", headers=admin_headers).json()
    assert metrics["requests_count"] >= 1
    assert metrics["total_products"] == 2
    assert metrics["products_by_state"]["active"] == 1
    assert metrics["products_by_state"]["draft"] == 1
    assert metrics["active_pricing_rules"] == 0


def test_unexpected_error_is_a_500_envelope(client, db, category, monkeypatch):
    product = make_product(db, category_id=category.id)

    def explode(db, product_id):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(products_routes, "get_product", explode)
    safe_client = TestClient(app, raise_server_exceptions=False)

    res = safe_client.get(f"/products/{product.id}")

    assert res.status_code == 500
    assert res.json() == {"success": False, "message": "Internal server error"}
