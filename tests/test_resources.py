import io
from datetime import datetime, timedelta, timezone

from openpyxl import Workbook

from app.models.resource import Resource


def _xlsx(rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def test_create_resolves_category(auth_client, make_category, make_resource):
    cat = make_category()
    res = make_resource(category_id=cat["id"])

    assert res["price"] == 10
    assert res["category"]["name"] == "Albañilería"
    assert res["last_updated"]


def test_create_with_unknown_category_is_404(auth_client):
    resp = auth_client.post(
        "/api/resources",
        json={"name": "Arena", "type": "material", "unit": "m3", "price": 50, "category_id": 99},
    )
    assert resp.status_code == 404
    assert resp.json()["code"] == "CATEGORY_NOT_FOUND"


def test_invalid_type_and_negative_price_are_rejected(auth_client):
    base = {"name": "X", "unit": "u"}
    assert auth_client.post("/api/resources", json={**base, "type": "tool", "price": 1}).status_code == 422
    assert auth_client.post("/api/resources", json={**base, "type": "labor", "price": -1}).status_code == 422


def test_filters_by_type_and_category(auth_client, make_category, make_resource):
    cat = make_category()
    make_resource(name="Cemento", category_id=cat["id"])
    make_resource(name="Operario", type="labor", unit="h", price=20)
    make_resource(name="Mezcladora", type="equipment", unit="h", price=15)

    labor = auth_client.get("/api/resources", params={"type": "labor"}).json()
    assert [r["name"] for r in labor] == ["Operario"]

    in_cat = auth_client.get("/api/resources", params={"category_id": cat["id"]}).json()
    assert [r["name"] for r in in_cat] == ["Cemento"]

    by_path = auth_client.get("/api/resources/type/equipment").json()
    assert [r["name"] for r in by_path] == ["Mezcladora"]

    brief = auth_client.get(f"/api/resources/category/{cat['id']}").json()
    assert brief[0]["name"] == "Cemento"
    assert "category" not in brief[0]


def test_search_is_case_insensitive(auth_client, make_resource):
    make_resource(name="Cemento Portland")
    make_resource(name="Ladrillo", description="king kong de cemento")
    make_resource(name="Operario", type="labor", unit="h")

    hits = auth_client.get("/api/resources/search", params={"q": "CEMENTO"}).json()
    assert {r["name"] for r in hits} == {"Cemento Portland", "Ladrillo"}


def test_update_clears_category_with_null(auth_client, make_category, make_resource):
    cat = make_category()
    res = make_resource(category_id=cat["id"])

    resp = auth_client.put(f"/api/resources/{res['id']}", json={"category_id": None, "price": 12.5})
    body = resp.json()
    assert body["category_id"] is None
    assert body["category"] is None
    assert body["price"] == 12.5


def test_outdated_lists_stale_prices(auth_client, db_session, make_resource):
    stale = make_resource(name="Arena")
    make_resource(name="Piedra")

    db_session.query(Resource).filter(Resource.id == stale["id"]).update(
        {"last_updated": datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=45)},
        synchronize_session=False,
    )
    db_session.commit()

    rows = auth_client.get("/api/resources/outdated").json()
    assert [r["name"] for r in rows] == ["Arena"]
    assert rows[0]["days_old"] >= 44

    assert auth_client.get("/api/resources/outdated", params={"days": 60}).json() == []


def test_bulk_update_reports_failures(auth_client, make_resource):
    a = make_resource(name="A", price=1)
    b = make_resource(name="B", price=2)

    resp = auth_client.post(
        "/api/resources/bulk-update-prices",
        json={"updates": [
            {"id": a["id"], "price": 5},
            {"id": 999, "price": 3},
            {"id": b["id"], "price": -4},
        ]},
    )
    assert resp.status_code == 200
    assert resp.json() == {"updated": 1, "failed": ["999", str(b["id"])]}

    assert auth_client.get(f"/api/resources/{a['id']}").json()["price"] == 5
    assert auth_client.get(f"/api/resources/{b['id']}").json()["price"] == 2


def test_import_price_sheet(auth_client, make_resource):
    a = make_resource(name="A", price=1)
    b = make_resource(name="B", price=2)
    content = _xlsx([
        ["ID", "Nombre", "Precio"],
        [a["id"], "A", 7.25],
        [b["id"], "B", "S/. 1,250.50"],
        ["abc", "?", 3],
    ])

    resp = auth_client.post(
        "/api/resources/bulk-update-prices/import",
        files={"file": ("precios.xlsx", content, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
    )
    assert resp.status_code == 200
    assert resp.json() == {"updated": 2, "failed": ["abc"]}
    assert auth_client.get(f"/api/resources/{b['id']}").json()["price"] == 1250.5


def test_import_without_price_column_is_400(auth_client):
    content = _xlsx([["id", "nombre"], [1, "A"]])
    resp = auth_client.post(
        "/api/resources/bulk-update-prices/import",
        files={"file": ("precios.xlsx", content, "application/octet-stream")},
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_PRICE_SHEET"


def test_delete_resource_in_use_is_blocked(auth_client, make_category, make_resource, make_composite):
    cat = make_category()
    res = make_resource()
    make_composite(cat["id"], [{"resource_id": res["id"], "quantity": 2}])

    resp = auth_client.delete(f"/api/resources/{res['id']}")
    assert resp.status_code == 409
    assert resp.json()["code"] == "RESOURCE_IN_USE"


def test_delete_unused_resource(auth_client, make_resource):
    res = make_resource()
    assert auth_client.delete(f"/api/resources/{res['id']}").status_code == 200
    resp = auth_client.get(f"/api/resources/{res['id']}")
    assert resp.status_code == 404
    assert resp.json()["code"] == "RESOURCE_NOT_FOUND"


def test_price_is_stored_at_four_decimals(auth_client, make_resource):
    res = make_resource(price=12.34567)
    assert res["price"] == 12.3457

    updated = auth_client.put(f"/api/resources/{res['id']}", json={"price": 0.00004}).json()
    assert updated["price"] == 0.0
