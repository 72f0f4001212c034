import os

os.environ["DATABASE_URL"] = ""
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import ensure_indexes, get_db
from main import app

API = "/api/v1"
PASSWORD = "secret1"


@pytest.fixture
def db():
    database = mongomock.MongoClient(tz_aware=True)["music_catalog_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    def _login(email, password=PASSWORD):
        res = client.post(f"{API}/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.json()
        return {"Authorization": f"Bearer {res.json()['data']['token']}"}
    return _login


@pytest.fixture
def admin(client, login):
    res = client.post(f"{API}/signup", json={"email": "admin@example.com", "password": PASSWORD})
    assert res.status_code == 201
    return login("admin@example.com")


@pytest.fixture
def viewer(client, admin, login):
    res = client.post(f"{API}/signup", json={"email": "viewer@example.com", "password": PASSWORD})
    assert res.status_code == 201
    return login("viewer@example.com")


@pytest.fixture
def editor(client, admin, login):
    res = client.post(
        f"{API}/users/add-user",
        json={"email": "editor@example.com", "password": PASSWORD, "role": "Editor"},
        headers=admin,
    )
    assert res.status_code == 201
    return login("editor@example.com")


@pytest.fixture
def artist_id(client, admin):
    res = client.post(
        f"{API}/artists/add-artist",
        json={"name": "Nina Simone", "grammy": 2, "hidden": False},
        headers=admin,
    )
    assert res.status_code == 201
    return res.json()["data"]["artist_id"]


@pytest.fixture
def album_id(client, admin, artist_id):
    res = client.post(
        f"{API}/albums/add-album",
        json={"artist_id": artist_id, "name": "Pastel Blues", "year": 1965, "hidden": False},
        headers=admin,
    )
    assert res.status_code == 201
    return res.json()["data"]["album_id"]


@pytest.fixture
def track_id(client, admin, artist_id, album_id):
    res = client.post(
        f"{API}/tracks/add-track",
        json={
            "artist_id": artist_id,
            "album_id": album_id,
            "name": "Sinnerman",
            "duration": 622,
            "hidden": False,
        },
        headers=admin,
    )
    assert res.status_code == 201
    return res.json()["data"]["track_id"]
