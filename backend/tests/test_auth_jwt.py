PASSWORD = "StrongPassw0rd!"


def test_register_login_token_returned(client):
    r = client.post("/auth/register", json={"user_id": "userA", "password": PASSWORD})
    assert r.status_code == 201
    assert r.json() == {"user_id": "userA"}

    r = client.post("/auth/login", json={"user_id": "userA", "password": PASSWORD})
    assert r.status_code == 200
    data = r.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"


def test_register_twice_conflicts(client):
    client.post("/auth/register", json={"user_id": "userA", "password": PASSWORD})
    r = client.post("/auth/register", json={"user_id": "userA", "password": PASSWORD})
    assert r.status_code == 409


def test_register_rejects_path_like_user_id(client):
    r = client.post("/auth/register", json={"user_id": "../evil", "password": PASSWORD})
    assert r.status_code == 422


def test_login_wrong_password(client):
    client.post("/auth/register", json={"user_id": "userA", "password": PASSWORD})
    r = client.post("/auth/login", json={"user_id": "userA", "password": "wrongwrongwrong"})
    assert r.status_code == 401


def test_login_unknown_user(client):
    r = client.post("/auth/login", json={"user_id": "ghost", "password": PASSWORD})
    assert r.status_code == 401


def test_me_returns_current_user(client, login):
    headers = login("userA")
    r = client.get("/auth/me", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"user_id": "userA"}


def test_logout_revokes_token_and_drops_state(client, login):
    headers = login("userA")
    client.post("/notes", headers=headers, data={"title": "t"})

    r = client.post("/auth/logout", headers=headers)
    assert r.status_code == 204

    assert client.get("/auth/me", headers=headers).status_code == 401
    assert client.get("/notes", headers=headers).status_code == 401
    assert client.post("/auth/logout", headers=headers).status_code == 401

    # a fresh login gets a new session; notes persist in the record store
    fresh = login("userA")
    assert client.get("/notes/state", headers=fresh).json()["notes"] == []
    assert len(client.get("/notes", headers=fresh).json()["notes"]) == 1


def test_media_token_is_not_a_bearer_token(client, login):
    headers = login("userA")
    note = client.post(
        "/notes",
        headers=headers,
        data={"title": "img"},
        files={"image": ("a.png", b"a", "image/png")},
    ).json()
    media_token = note["image_url"].split("token=")[1]

    r = client.get("/auth/me", headers={"Authorization": f"Bearer {media_token}"})
    assert r.status_code == 401
