def test_client_crud(auth_client, make_client):
    created = make_client(name="Constructora Pacífico", ruc="20100100100", email="obras@pacifico.pe")
    assert created["id"] > 0
    assert created["ruc"] == "20100100100"

    fetched = auth_client.get(f"/api/clients/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Constructora Pacífico"

    updated = auth_client.put(f"/api/clients/{created['id']}", json={"phone": "999111222"})
    assert updated.status_code == 200
    assert updated.json()["phone"] == "999111222"
    assert updated.json()["email"] == "obras@pacifico.pe"

    deleted = auth_client.delete(f"/api/clients/{created['id']}")
    assert deleted.status_code == 200
    assert auth_client.get(f"/api/clients/{created['id']}").status_code == 404


def test_list_newest_first(auth_client, make_client):
    first = make_client(name="Primero")
    second = make_client(name="Segundo")

    ids = [c["id"] for c in auth_client.get("/api/clients").json()]
    assert ids == [second["id"], first["id"]]


def test_search_matches_name_email_and_ruc(auth_client, make_client):
    make_client(name="Inmobiliaria Sol", ruc="20555")
    make_client(name="Otro", email="ventas@sol.pe")
    make_client(name="Nada que ver")

    by_name = auth_client.get("/api/clients/search", params={"q": "SOL"}).json()
    assert {c["name"] for c in by_name} == {"Inmobiliaria Sol", "Otro"}

    by_ruc = auth_client.get("/api/clients/search", params={"q": "555"}).json()
    assert [c["name"] for c in by_ruc] == ["Inmobiliaria Sol"]


def test_missing_client_is_404(auth_client):
    resp = auth_client.get("/api/clients/77")
    assert resp.status_code == 404
    assert resp.json() == {"detail": resp.json()["detail"], "code": "CLIENT_NOT_FOUND"}


def test_delete_client_with_budgets_is_blocked(auth_client, make_client, make_resource):
    cli = make_client()
    res = make_resource()
    auth_client.post(
        "/api/budgets",
        json={
            "client_id": cli["id"],
            "items": [{"item_type": "resource", "resource_id": res["id"], "quantity": 1}],
        },
    )

    resp = auth_client.delete(f"/api/clients/{cli['id']}")
    assert resp.status_code == 409
    assert resp.json()["code"] == "CLIENT_IN_USE"
