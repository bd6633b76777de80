from datetime import datetime, timedelta, timezone

from app.models.material import Material


def _create(client, **fields):
    body = {"name": "Cemento", "unit": "bolsa", "price": 28.5, **fields}
    resp = client.post("/api/materials", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_material_crud(auth_client):
    created = _create(auth_client, category="Aglomerantes")
    assert created["price"] == 28.5

    resp = auth_client.put(f"/api/materials/{created['id']}", json={"price": 30})
    assert resp.json()["price"] == 30

    assert auth_client.delete(f"/api/materials/{created['id']}").status_code == 200
    missing = auth_client.get(f"/api/materials/{created['id']}")
    assert missing.status_code == 404
    assert missing.json()["code"] == "MATERIAL_NOT_FOUND"


def test_by_category_and_search(auth_client):
    _create(auth_client, name="Cemento", category="Aglomerantes")
    _create(auth_client, name="Cal", category="Aglomerantes")
    _create(auth_client, name="Arena gruesa", unit="m3", price=45, category="Agregados")

    names = [m["name"] for m in auth_client.get("/api/materials/category/Aglomerantes").json()]
    assert names == ["Cal", "Cemento"]

    hits = auth_client.get("/api/materials/search", params={"q": "agreg"}).json()
    assert [m["name"] for m in hits] == ["Arena gruesa"]


def test_outdated_and_bulk_update(auth_client, db_session):
    old = _create(auth_client, name="Yeso")
    fresh = _create(auth_client, name="Cal")

    db_session.query(Material).filter(Material.id == old["id"]).update(
        {"last_updated": datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=90)},
        synchronize_session=False,
    )
    db_session.commit()

    stale = auth_client.get("/api/materials/outdated").json()
    assert [m["name"] for m in stale] == ["Yeso"]

    result = auth_client.post(
        "/api/materials/bulk-update-prices",
        json={"updates": [{"id": old["id"], "price": 12}, {"id": 404, "price": 1}]},
    ).json()
    assert result == {"updated": 1, "failed": ["404"]}
    assert auth_client.get("/api/materials/outdated").json() == []
    assert auth_client.get(f"/api/materials/{fresh['id']}").json()["price"] == 28.5
