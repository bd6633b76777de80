from app.services import category_service


def test_create_defaults_and_order(auth_client):
    first = auth_client.post("/api/categories", json={"name": "Albañilería"}).json()
    second = auth_client.post("/api/categories", json={"name": "Acabados"}).json()

    assert first["default_margin"] == 20
    assert first["color"] == "#6B7280"
    assert first["active"] is True
    assert first["order"] == 1
    assert second["order"] == 2


def test_duplicate_name_conflicts(auth_client, make_category):
    make_category(name="Albañilería")
    resp = auth_client.post("/api/categories", json={"name": "Albañilería"})
    assert resp.status_code == 409
    assert resp.json()["code"] == "CATEGORY_NAME_EXISTS"


def test_margin_out_of_range_is_rejected(auth_client):
    resp = auth_client.post("/api/categories", json={"name": "X", "default_margin": 150})
    assert resp.status_code == 422


def test_list_hides_inactive_unless_requested(auth_client, make_category):
    visible = make_category(name="Visible")
    hidden = make_category(name="Oculta")
    auth_client.put(f"/api/categories/{hidden['id']}", json={"active": False})

    names = [c["name"] for c in auth_client.get("/api/categories").json()]
    assert names == [visible["name"]]

    all_names = [
        c["name"]
        for c in auth_client.get("/api/categories", params={"include_inactive": True}).json()
    ]
    assert set(all_names) == {"Visible", "Oculta"}


def test_reorder_ignores_unknown_ids(auth_client, make_category):
    a = make_category(name="A")
    b = make_category(name="B")

    resp = auth_client.post(
        "/api/categories/reorder",
        json={"orders": [{"id": a["id"], "order": 5}, {"id": 999, "order": 1}, {"id": b["id"], "order": 2}]},
    )
    assert resp.status_code == 200

    names = [c["name"] for c in auth_client.get("/api/categories").json()]
    assert names == ["B", "A"]


def test_rename_to_existing_name_conflicts(auth_client, make_category):
    make_category(name="A")
    b = make_category(name="B")
    resp = auth_client.put(f"/api/categories/{b['id']}", json={"name": "A"})
    assert resp.status_code == 409


def test_delete_category_in_use_is_blocked(
    auth_client, make_category, make_resource, make_composite
):
    cat = make_category()
    res = make_resource()
    make_composite(cat["id"], [{"resource_id": res["id"], "quantity": 1}])

    resp = auth_client.delete(f"/api/categories/{cat['id']}")
    assert resp.status_code == 409
    assert resp.json()["code"] == "CATEGORY_IN_USE"


def test_get_missing_category_is_404(auth_client):
    resp = auth_client.get("/api/categories/42")
    assert resp.status_code == 404
    assert resp.json()["code"] == "CATEGORY_NOT_FOUND"


def test_name_race_on_commit_is_409(auth_client, make_category, monkeypatch):
    make_category(name="Acabados")
    # Simulates a concurrent insert between the name check and the commit
    monkeypatch.setattr(category_service, "_check_unique_name", lambda *args, **kwargs: None)

    resp = auth_client.post("/api/categories", json={"name": "Acabados"})
    assert resp.status_code == 409
    assert resp.json()["code"] == "CATEGORY_NAME_EXISTS"

    other = make_category(name="Estructuras")
    resp = auth_client.put(f"/api/categories/{other['id']}", json={"name": "Acabados"})
    assert resp.status_code == 409
    assert resp.json()["code"] == "CATEGORY_NAME_EXISTS"
