import json

from conftest import login


def test_session_anonymous(client):
    response = client.get("/api/session")
    assert response.status_code == 200
    assert response.json() == {"authenticated": False, "uid": None, "nickname": None}


def test_login_wrong_password_is_401(client):
    response = client.post("/api/login", json={"uid": "a", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


def test_login_unknown_user_is_401(client):
    response = client.post("/api/login", json={"uid": "nobody", "password": "right"})
    assert response.status_code == 401
    assert "set-cookie" not in response.headers


def test_login_against_corrupt_users_file_is_401(client, users_file):
    users_file.write_bytes(b"\xff\xfe\x00garbage")
    response = client.post("/api/login", json={"uid": "a", "password": "right"})
    assert response.status_code == 401


def test_login_with_non_string_stored_password_is_401(client, users_file):
    users_file.write_text(json.dumps({"users": [{"uid": "n", "password": 1234}]}))
    response = client.post("/api/login", json={"uid": "n", "password": "1234"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


def test_login_without_nickname_needs_nickname(client):
    response = client.post("/api/login", json={"uid": "a", "password": "right"})
    assert response.status_code == 200
    assert response.json() == {"ok": True, "needsNickname": True}

    cookie = response.headers["set-cookie"]
    assert "suite.sid=" in cookie
    assert "HttpOnly" in cookie
    assert "samesite=lax" in cookie.lower()


def test_login_with_bcrypt_hash(client):
    response = login(client, "bob", "hunter2")
    assert response.json() == {"ok": True, "needsNickname": False}

    session = client.get("/api/session").json()
    assert session == {"authenticated": True, "uid": "bob", "nickname": "Bob"}


def test_login_requires_both_fields(client):
    for body in ({}, {"uid": "a"}, {"password": "right"}, {"uid": "", "password": ""}):
        response = client.post("/api/login", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "UID and password required"


def test_login_without_body_is_400(client):
    response = client.post("/api/login")
    assert response.status_code == 400


def test_login_replaces_previous_session(client, sessions):
    login(client, "bob", "hunter2")
    assert len(sessions) == 1
    login(client, "a", "right")
    assert len(sessions) == 1
    assert client.get("/api/session").json()["uid"] == "a"


def test_logout_clears_session(client, sessions):
    login(client)
    response = client.post("/api/logout")
    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert len(sessions) == 0
    assert client.get("/api/session").json()["authenticated"] is False


def test_logout_without_session_is_ok(client):
    response = client.post("/api/logout")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_forged_cookie_is_not_a_session(client):
    client.cookies.set("suite.sid", "not-a-signed-value")
    assert client.get("/api/session").json()["authenticated"] is False


def test_nickname_requires_session(client, store, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("credential store touched without a session")

    monkeypatch.setattr(store, "update_nickname", fail)
    monkeypatch.setattr(store, "load", fail)

    response = client.post("/api/nickname", json={"nickname": "Al"})
    assert response.status_code == 401
    assert response.json()["error"] == "Not authenticated"


def test_nickname_round_trip(client, users_file):
    login(client, "a", "right")

    response = client.post("/api/nickname", json={"nickname": "  Al  "})
    assert response.status_code == 200
    assert response.json() == {"ok": True, "nickname": "Al"}

    assert client.get("/api/session").json() == {"authenticated": True, "uid": "a", "nickname": "Al"}

    stored = json.loads(users_file.read_text())
    assert {"uid": "a", "password": "right", "nickname": "Al"} in stored["users"]


def test_nickname_blank_is_400(client):
    login(client, "a", "right")
    for body in ({"nickname": "   "}, {}):
        response = client.post("/api/nickname", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "Nickname required"


def test_nickname_for_deleted_user_is_404(client, users_file):
    login(client, "a", "right")
    users_file.write_text(json.dumps({"users": []}))

    response = client.post("/api/nickname", json={"nickname": "Al"})
    assert response.status_code == 404
    assert response.json()["error"] == "User not found"
