from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.config import get_settings
from app.models.client import Client
from app.models.composite_item import CompositeItemComponent
from app.services import budget_service


@pytest.fixture
def catalog(make_category, make_resource, make_composite, make_client):
    """Client, cement at 10 and a wall item priced 62.50 (5 bags, 25% margin)."""
    cat = make_category(default_margin=25)
    cement = make_resource(name="Cemento", price=10)
    wall = make_composite(cat["id"], [{"resource_id": cement["id"], "quantity": 5}])
    cli = make_client()
    return {"client": cli, "cement": cement, "wall": wall}


def _payload(catalog, **extra):
    return {
        "client_id": catalog["client"]["id"],
        "project_name": "Casa Surco",
        "items": [
            {"item_type": "composite", "composite_item_id": catalog["wall"]["id"], "quantity": 2},
            {"item_type": "resource", "resource_id": catalog["cement"]["id"], "quantity": 3,
             "description": "Cemento adicional"},
        ],
        **extra,
    }


def _year():
    return datetime.now(timezone.utc).year


def test_create_prices_lines_and_totals(auth_client, catalog):
    resp = auth_client.post("/api/budgets", json=_payload(catalog))
    assert resp.status_code == 201
    budget = resp.json()

    assert budget["status"] == "draft"
    assert budget["budget_number"] == f"BUD-{_year()}-001"
    assert budget["client"]["name"] == catalog["client"]["name"]

    wall_line, cement_line = budget["items"]
    assert wall_line["unit_price"] == 62.5
    assert wall_line["subtotal"] == 125.0
    assert wall_line["description"] == "Muro m2"
    assert wall_line["unit"] == "m2"
    assert cement_line["description"] == "Cemento adicional"
    assert cement_line["subtotal"] == 30.0

    assert budget["subtotal"] == pytest.approx(155.0)
    assert budget["iva"] == pytest.approx(15.5)
    assert budget["total"] == pytest.approx(170.5)


def test_stored_prices_do_not_follow_the_catalog(auth_client, catalog):
    budget = auth_client.post("/api/budgets", json=_payload(catalog)).json()

    auth_client.put(f"/api/resources/{catalog['cement']['id']}", json={"price": 20})

    again = auth_client.get(f"/api/budgets/{budget['id']}").json()
    assert [line["unit_price"] for line in again["items"]] == [62.5, 10.0]
    assert again["total"] == pytest.approx(170.5)


def test_numbers_are_sequential_and_skip_deleted(auth_client, catalog):
    first = auth_client.post("/api/budgets", json=_payload(catalog)).json()
    second = auth_client.post("/api/budgets", json=_payload(catalog)).json()
    assert second["budget_number"] == f"BUD-{_year()}-002"

    auth_client.delete(f"/api/budgets/{first['id']}")

    third = auth_client.post("/api/budgets", json=_payload(catalog)).json()
    assert third["budget_number"] == f"BUD-{_year()}-003"


def test_persistent_number_collision_is_409(auth_client, catalog, monkeypatch):
    existing = auth_client.post("/api/budgets", json=_payload(catalog)).json()["budget_number"]
    monkeypatch.setattr(budget_service, "_next_budget_number", lambda db: existing)

    resp = auth_client.post("/api/budgets", json=_payload(catalog))
    assert resp.status_code == 409
    assert resp.json()["code"] == "BUDGET_NUMBER_CONFLICT"
    assert len(auth_client.get("/api/budgets").json()) == 1


def test_number_collision_recovers_on_retry(auth_client, catalog, monkeypatch):
    existing = auth_client.post("/api/budgets", json=_payload(catalog)).json()["budget_number"]
    real_next = budget_service._next_budget_number
    calls = []

    def collide_once(db):
        calls.append(1)
        return existing if len(calls) == 1 else real_next(db)

    monkeypatch.setattr(budget_service, "_next_budget_number", collide_once)

    resp = auth_client.post("/api/budgets", json=_payload(catalog))
    assert resp.status_code == 201
    budget = resp.json()
    assert len(calls) == 2
    assert budget["budget_number"] == f"BUD-{_year()}-002"
    assert [line["subtotal"] for line in budget["items"]] == [125.0, 30.0]
    assert budget["total"] == pytest.approx(170.5)
    assert len(auth_client.get("/api/budgets").json()) == 2


def test_prefix_wildcards_are_literal(auth_client, catalog, monkeypatch):
    auth_client.post("/api/budgets", json=_payload(catalog))
    monkeypatch.setattr(get_settings(), "BUDGET_NUMBER_PREFIX", "B_D")

    resp = auth_client.post("/api/budgets", json=_payload(catalog))
    assert resp.json()["budget_number"] == f"B_D-{_year()}-001"


def test_line_subtotal_matches_stored_quantity(auth_client, catalog):
    payload = _payload(catalog)
    payload["items"] = [
        {"item_type": "resource", "resource_id": catalog["cement"]["id"], "quantity": 0.33333},
    ]
    created = auth_client.post("/api/budgets", json=payload).json()

    line = auth_client.get(f"/api/budgets/{created['id']}").json()["items"][0]
    assert line["quantity"] == 0.3333
    assert Decimal(str(line["subtotal"])) == Decimal(str(line["quantity"])) * Decimal(str(line["unit_price"]))
    assert line["subtotal"] == created["items"][0]["subtotal"]


def test_quantity_rounding_to_zero_is_422(auth_client, catalog):
    payload = _payload(catalog)
    payload["items"] = [
        {"item_type": "resource", "resource_id": catalog["cement"]["id"], "quantity": 0.00001},
    ]
    assert auth_client.post("/api/budgets", json=payload).status_code == 422


def test_unknown_item_type_is_400(auth_client, catalog):
    payload = _payload(catalog)
    payload["items"] = [{"item_type": "service", "resource_id": catalog["cement"]["id"], "quantity": 1}]

    resp = auth_client.post("/api/budgets", json=payload)
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_ITEM_TYPE"


def test_missing_references_are_404(auth_client, catalog):
    payload = _payload(catalog, client_id=555)
    resp = auth_client.post("/api/budgets", json=payload)
    assert resp.status_code == 404
    assert resp.json()["code"] == "CLIENT_NOT_FOUND"

    payload = _payload(catalog)
    payload["items"].append({"item_type": "resource", "resource_id": 777, "quantity": 1})
    resp = auth_client.post("/api/budgets", json=payload)
    assert resp.status_code == 404
    assert resp.json()["code"] == "RESOURCE_NOT_FOUND"

    assert auth_client.get("/api/budgets").json() == []


def test_unpriceable_composite_is_reported_as_composite_not_found(
    auth_client, db_session, catalog
):
    db_session.query(CompositeItemComponent).filter(
        CompositeItemComponent.composite_item_id == catalog["wall"]["id"]
    ).update({"resource_id": 9999}, synchronize_session=False)
    db_session.commit()

    resp = auth_client.post("/api/budgets", json=_payload(catalog))
    assert resp.status_code == 404
    assert resp.json()["code"] == "COMPOSITE_ITEM_NOT_FOUND"


def test_line_without_its_reference_is_422(auth_client, catalog):
    payload = _payload(catalog)
    payload["items"] = [{"item_type": "composite", "quantity": 1}]
    assert auth_client.post("/api/budgets", json=payload).status_code == 422

    payload["items"] = []
    assert auth_client.post("/api/budgets", json=payload).status_code == 422


def test_update_items_reprices_at_current_prices(auth_client, catalog):
    budget = auth_client.post("/api/budgets", json=_payload(catalog)).json()
    auth_client.put(f"/api/resources/{catalog['cement']['id']}", json={"price": 20})

    resp = auth_client.put(
        f"/api/budgets/{budget['id']}",
        json={
            "notes": "Precios actualizados",
            "items": [{"item_type": "resource", "resource_id": catalog["cement"]["id"], "quantity": 2}],
        },
    )
    updated = resp.json()
    assert resp.status_code == 200
    assert updated["budget_number"] == budget["budget_number"]
    assert updated["notes"] == "Precios actualizados"
    assert len(updated["items"]) == 1
    assert updated["subtotal"] == pytest.approx(40.0)
    assert updated["total"] == pytest.approx(44.0)


def test_update_without_items_keeps_lines(auth_client, catalog):
    budget = auth_client.post("/api/budgets", json=_payload(catalog, notes="x")).json()

    resp = auth_client.put(f"/api/budgets/{budget['id']}", json={"notes": None, "project_name": "Casa Miraflores"})
    updated = resp.json()
    assert updated["notes"] is None
    assert updated["project_name"] == "Casa Miraflores"
    assert len(updated["items"]) == 2
    assert updated["total"] == pytest.approx(170.5)


def test_status_changes_and_validation(auth_client, catalog):
    budget = auth_client.post("/api/budgets", json=_payload(catalog)).json()

    resp = auth_client.patch(f"/api/budgets/{budget['id']}/status", json={"status": "approved"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"

    back = auth_client.patch(f"/api/budgets/{budget['id']}/status", json={"status": "draft"})
    assert back.json()["status"] == "draft"

    bad = auth_client.patch(f"/api/budgets/{budget['id']}/status", json={"status": "archived"})
    assert bad.status_code == 422


def test_list_filters(auth_client, catalog, make_client):
    other = make_client(name="Otro cliente")
    first = auth_client.post("/api/budgets", json=_payload(catalog)).json()
    second = auth_client.post("/api/budgets", json=_payload(catalog, client_id=other["id"])).json()
    auth_client.patch(f"/api/budgets/{first['id']}/status", json={"status": "sent"})

    by_status = auth_client.get("/api/budgets", params={"status": "sent"}).json()
    assert [b["id"] for b in by_status] == [first["id"]]

    by_client = auth_client.get("/api/budgets", params={"client_id": other["id"]}).json()
    assert [b["id"] for b in by_client] == [second["id"]]


def test_duplicate_is_a_new_draft_with_copied_prices(auth_client, catalog):
    budget = auth_client.post("/api/budgets", json=_payload(catalog)).json()
    auth_client.patch(f"/api/budgets/{budget['id']}/status", json={"status": "sent"})
    auth_client.put(f"/api/resources/{catalog['cement']['id']}", json={"price": 99})

    resp = auth_client.post(f"/api/budgets/{budget['id']}/duplicate")
    assert resp.status_code == 201
    copy = resp.json()
    assert copy["budget_number"] == f"BUD-{_year()}-002"
    assert copy["status"] == "draft"
    assert copy["project_name"] == "Casa Surco (Copy)"
    assert [line["unit_price"] for line in copy["items"]] == [62.5, 10.0]
    assert copy["total"] == pytest.approx(170.5)


def test_stats(auth_client, catalog):
    first = auth_client.post("/api/budgets", json=_payload(catalog)).json()
    auth_client.post("/api/budgets", json=_payload(catalog))
    auth_client.patch(f"/api/budgets/{first['id']}/status", json={"status": "approved"})

    stats = auth_client.get("/api/budgets/stats").json()
    assert stats["total"] == 2
    assert {s["status"]: s["count"] for s in stats["by_status"]} == {"approved": 1, "draft": 1}
    assert stats["approved_revenue"] == pytest.approx(170.5)


def test_budget_of_removed_client_has_no_client_summary(auth_client, db_session, catalog):
    budget = auth_client.post("/api/budgets", json=_payload(catalog)).json()

    db_session.query(Client).filter(Client.id == catalog["client"]["id"]).delete(
        synchronize_session=False
    )
    db_session.commit()

    fetched = auth_client.get(f"/api/budgets/{budget['id']}").json()
    assert fetched["client_id"] == catalog["client"]["id"]
    assert fetched["client"] is None


def test_exports(auth_client, catalog):
    budget = auth_client.post("/api/budgets", json=_payload(catalog)).json()

    xlsx = auth_client.get(f"/api/budgets/{budget['id']}/export/xlsx")
    assert xlsx.status_code == 200
    assert xlsx.content[:2] == b"PK"
    assert budget["budget_number"] in xlsx.headers["content-disposition"]

    pdf = auth_client.get(f"/api/budgets/{budget['id']}/export/pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content[:4] == b"%PDF"


def test_export_missing_budget_is_404(auth_client):
    resp = auth_client.get("/api/budgets/12/export/pdf")
    assert resp.status_code == 404
    assert resp.json()["code"] == "BUDGET_NOT_FOUND"
