"""
HTTP API routes through the FastAPI test client.
"""
import pytest
from fastapi.testclient import TestClient

from b2b_pricing.api.main import app
from b2b_pricing.api.state import state


@pytest.fixture
def client(settings):
    state.configure(settings)
    with TestClient(app) as c:
        yield c


QUOTE = {
    'name': 'Ada Buyer',
    'email': 'ada@example.com',
    'contact': 'wechat:ada',
    'items': [{'product_id': 'P-1', 'name': 'LED Panel', 'price': 11.0, 'quantity': 5}],
}


def test_root(client):
    assert client.get("/").json()["status"] == "online"


def test_system_status(client):
    data = client.get("/system/status").json()
    assert data["products_count"] == 3
    assert data["tier_tables"] == 2


def test_product_price(client):
    data = client.get("/products/P-1/price", params={"quantity": 5}).json()
    assert data["unit_price"] == 10.0
    assert data["next_tier"] == {"quantity_needed": 5, "next_price": 9.0, "savings_percent": 10}


def test_product_price_unknown(client):
    assert client.get("/products/NOPE/price").status_code == 404


def test_product_price_rejects_zero_quantity(client):
    assert client.get("/products/P-1/price", params={"quantity": 0}).status_code == 422


def test_calculate(client):
    data = client.post("/calculate", json={"items": {"P-1": 50}}).json()
    assert data["total"] == 350.0
    assert data["lines"][0]["source"] == "Tier"


def test_get_tiers(client):
    data = client.get("/api/tiers/P-1").json()
    assert [t["label"] for t in data["tiers"]] == ["1-9 units", "10-49 units", "50+ units"]


def test_validate_tiers(client):
    ok = client.post("/api/tiers/validate", json={"tiers": [
        {"min_quantity": 1, "max_quantity": 9, "unit_price": 10},
        {"min_quantity": 10, "unit_price": 8},
    ]}).json()
    assert ok == {"valid": True, "reason": None}

    bad = client.post("/api/tiers/validate", json={"tiers": [
        {"min_quantity": 2, "max_quantity": 9, "unit_price": 10},
    ]}).json()
    assert bad["valid"] is False
    assert "start at quantity 1" in bad["reason"]


def test_replace_tiers_updates_prices(client):
    resp = client.put("/api/tiers/P-3", json={"tiers": [
        {"min_quantity": 1, "max_quantity": 4, "unit_price": 89},
        {"min_quantity": 5, "unit_price": 79},
    ]})
    assert resp.status_code == 200

    price = client.get("/products/P-3/price", params={"quantity": 5}).json()
    assert price["unit_price"] == 79.0


def test_replace_tiers_rejects_invalid(client):
    resp = client.put("/api/tiers/P-1", json={"tiers": [
        {"min_quantity": 1, "max_quantity": 9, "unit_price": 10},
        {"min_quantity": 11, "unit_price": 8},
    ]})
    assert resp.status_code == 400
    assert "contiguous" in resp.json()["detail"]["reason"]


def test_delete_tiers(client):
    assert client.delete("/api/tiers/P-1").status_code == 200
    assert client.delete("/api/tiers/P-1").status_code == 404
    assert client.get("/products/P-1/price").json()["unit_price"] == 11.0


def test_quote_flow(client):
    created = client.post("/api/quotes", json=QUOTE).json()
    assert created["success"] is True
    quote_id = created["id"]

    fetched = client.get(f"/api/quotes/{quote_id}").json()
    assert fetched["status"] == "PENDING"
    assert fetched["item_count"] == 1
    # 5 units of P-1 sit in the 1-9 band at $10
    assert fetched["total"] == 50.0

    by_number = client.get(f"/api/quotes/number/{created['quote_number']}").json()
    assert by_number["id"] == quote_id

    resp = client.patch(f"/api/quotes/{quote_id}/status", json={"status": "QUOTED"})
    assert resp.json() == {"success": True, "status": "QUOTED"}

    listing = client.get("/api/quotes", params={"status": "QUOTED"}).json()
    assert listing["pagination"]["total"] == 1

    assert client.delete(f"/api/quotes/{quote_id}").status_code == 200
    assert client.get(f"/api/quotes/{quote_id}").status_code == 404


def test_quote_validation_errors(client):
    resp = client.post("/api/quotes", json={**QUOTE, "email": "nope", "items": []})
    assert resp.status_code == 422
    assert set(resp.json()["errors"]) == {"email", "items"}


def test_illegal_status_change(client):
    quote_id = client.post("/api/quotes", json=QUOTE).json()["id"]
    client.patch(f"/api/quotes/{quote_id}/status", json={"status": "REJECTED"})

    resp = client.patch(f"/api/quotes/{quote_id}/status", json={"status": "QUOTED"})
    assert resp.status_code == 409


def test_status_change_unknown_quote(client):
    resp = client.patch("/api/quotes/missing/status", json={"status": "QUOTED"})
    assert resp.status_code == 404


def test_replace_tiers_rejects_nan_price(client):
    body = '{"tiers": [{"min_quantity": 1, "max_quantity": 9, "unit_price": 10}, {"min_quantity": 10, "unit_price": NaN}]}'
    resp = client.put("/api/tiers/P-3", content=body, headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert client.get("/api/tiers/P-3").json()["tiers"] == []
    assert client.get("/products/P-3/price", params={"quantity": 2}).status_code == 200


@pytest.mark.parametrize("params", [{"limit": -1}, {"limit": 0}, {"page": 0}])
def test_quote_listing_rejects_bad_paging(client, params):
    client.post("/api/quotes", json=QUOTE)
    assert client.get("/api/quotes", params=params).status_code == 422


def test_quote_total_matches_tier_pricing(client):
    """12 units of P-1 are re-priced at the 10-49 band."""
    body = {**QUOTE, 'items': [{'product_id': 'P-1', 'name': 'LED Panel', 'price': 11.0, 'quantity': 12}]}
    quote_id = client.post("/api/quotes", json=body).json()["id"]

    listing = client.get("/api/quotes").json()
    assert client.get(f"/api/quotes/{quote_id}").json()["total"] == 108.0
    assert listing["quotes"][0]["total"] == 108.0
