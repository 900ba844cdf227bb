from collabhub.shared.auth import create_access_token


def test_register_and_login(client):
    r = client.post("/auth/register", json={"email": "Alice@Example.com", "password": "long-enough"})
    assert r.status_code == 201, r.text
    user = r.json()["user"]
    assert user["email"] == "alice@example.com"

    r = client.post("/auth/token", data={"username": "alice@example.com", "password": "long-enough"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["user"]["id"] == user["id"]
    assert me["user"]["email"] == "alice@example.com"

def test_register_twice_is_rejected(client):
    client.post("/auth/register", json={"email": "bob@example.com", "password": "long-enough"})
    r = client.post("/auth/register", json={"email": "BOB@example.com", "password": "long-enough"})
    assert r.status_code == 422
    assert r.json()["error"]["message"] == "email_already_registered"

def test_wrong_password(client, make_user):
    make_user("carol@example.com")
    r = client.post("/auth/token", data={"username": "carol@example.com", "password": "nope-nope"})
    assert r.status_code == 401
    assert r.json()["ok"] is False

def test_missing_token_is_unauthorized(client):
    r = client.get("/files")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "unauthorized"

def test_garbage_token_is_unauthorized(client):
    r = client.get("/files", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401

def test_token_for_unknown_user_is_unauthorized(client):
    token = create_access_token(sub="ghost-id")
    r = client.get("/projects", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert "unknown user" in r.json()["error"]["message"]

def test_demo_token(client, monkeypatch):
    from collabhub.shared.config import settings
    monkeypatch.setattr(settings, "AUTH_DEMO", True)
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {settings.DEMO_TOKEN}"})
    assert r.status_code == 200
    assert r.json()["user"]["id"] == "demo-user"

def test_register_race_on_same_email(client, monkeypatch):
    from collabhub.auth import service as auth_service
    client.post("/auth/register", json={"email": "dave@example.com", "password": "long-enough"})
    # the other request already passed the existence check
    monkeypatch.setattr(auth_service, "find_user_by_email", lambda db, email: None)
    r = client.post("/auth/register", json={"email": "dave@example.com", "password": "long-enough"})
    assert r.status_code == 422
    assert r.json()["error"]["message"] == "email_already_registered"
