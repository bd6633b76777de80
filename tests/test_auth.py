def test_health_is_public(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_register_returns_token_and_user(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "Ana@Obra.pe", "password": "secret123", "name": "Ana"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["access_token"]
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "ana@obra.pe"
    assert "password_hash" not in body["user"]


def test_register_duplicate_email_conflicts(client):
    payload = {"email": "ana@obra.pe", "password": "secret123", "name": "Ana"}
    client.post("/api/auth/register", json=payload)
    resp = client.post("/api/auth/register", json=payload)
    assert resp.status_code == 409
    assert resp.json()["code"] == "EMAIL_EXISTS"


def test_login_wrong_password_is_401(client):
    client.post(
        "/api/auth/register",
        json={"email": "ana@obra.pe", "password": "secret123", "name": "Ana"},
    )
    resp = client.post("/api/auth/login", data={"username": "ana@obra.pe", "password": "nope"})
    assert resp.status_code == 401


def test_protected_endpoint_requires_token(client):
    assert client.get("/api/clients").status_code == 401
    assert client.get("/api/budgets/stats").status_code == 401


def test_invalid_token_is_401(client):
    resp = client.get("/api/resources", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_me_and_refresh(auth_client):
    me = auth_client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "tester@obra.pe"

    refreshed = auth_client.post("/api/auth/refresh")
    assert refreshed.status_code == 200
    assert refreshed.json()["access_token"]
