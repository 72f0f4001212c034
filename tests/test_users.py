import pytest
from bson import ObjectId

from conftest import API, PASSWORD
from database import FAVORITES, USERS


def test_list_users_hides_admins_by_default(client, admin, viewer, editor):
    res = client.get(f"{API}/users", headers=viewer)

    assert res.status_code == 200
    roles = sorted(u["role"] for u in res.json()["data"])
    assert roles == ["Editor", "Viewer"]


def test_list_users_filtered_by_role(client, admin, viewer):
    res = client.get(f"{API}/users", params={"role": "Admin"}, headers=viewer)

    assert res.status_code == 200
    assert [u["email"] for u in res.json()["data"]] == ["admin@example.com"]


@pytest.mark.parametrize("params", [
    {"limit": -1},
    {"offset": -3},
    {"limit": "ten"},
    {"offset": "x"},
    {"role": "Owner"},
])
def test_list_users_rejects_bad_query(client, admin, params):
    res = client.get(f"{API}/users", params=params, headers=admin)
    assert res.status_code == 400


def test_list_users_pagination(client, admin):
    for i in range(4):
        client.post(f"{API}/signup", json={"email": f"user{i}@example.com", "password": PASSWORD})

    res = client.get(f"{API}/users", params={"limit": 2, "offset": 1}, headers=admin)
    assert [u["email"] for u in res.json()["data"]] == ["user1@example.com", "user2@example.com"]


def test_add_user_as_admin(client, db, admin):
    res = client.post(
        f"{API}/users/add-user",
        json={"email": "ed@example.com", "password": PASSWORD, "role": "Editor"},
        headers=admin,
    )

    assert res.status_code == 201
    assert db[USERS].find_one({"email": "ed@example.com"})["role"] == "Editor"


def test_add_user_cannot_create_admin(client, db, admin):
    res = client.post(
        f"{API}/users/add-user",
        json={"email": "boss@example.com", "password": PASSWORD, "role": "Admin"},
        headers=admin,
    )

    assert res.status_code == 400
    assert db[USERS].find_one({"email": "boss@example.com"}) is None


def test_add_user_duplicate_email(client, admin, viewer):
    res = client.post(
        f"{API}/users/add-user",
        json={"email": "viewer@example.com", "password": PASSWORD, "role": "Editor"},
        headers=admin,
    )
    assert res.status_code == 409


def test_add_user_requires_admin(client, editor):
    res = client.post(
        f"{API}/users/add-user",
        json={"email": "x@example.com", "password": PASSWORD, "role": "Viewer"},
        headers=editor,
    )
    assert res.status_code == 403


def test_update_password(client, login, viewer):
    res = client.put(
        f"{API}/users/update-password",
        json={"old_password": PASSWORD, "new_password": "brandnew"},
        headers=viewer,
    )

    assert res.status_code == 204
    assert res.content == b""
    login("viewer@example.com", "brandnew")
    assert client.post(
        f"{API}/login", json={"email": "viewer@example.com", "password": PASSWORD}
    ).status_code == 401


def test_update_password_wrong_old_password(client, viewer):
    res = client.put(
        f"{API}/users/update-password",
        json={"old_password": "nope1", "new_password": "brandnew"},
        headers=viewer,
    )
    assert res.status_code == 401


def test_update_password_too_short(client, viewer):
    res = client.put(
        f"{API}/users/update-password",
        json={"old_password": PASSWORD, "new_password": "abc"},
        headers=viewer,
    )
    assert res.status_code == 400


def test_update_password_missing_field(client, viewer):
    res = client.put(f"{API}/users/update-password", json={"old_password": PASSWORD}, headers=viewer)
    assert res.status_code == 400


def test_delete_user(client, db, admin, viewer):
    user_id = str(db[USERS].find_one({"email": "viewer@example.com"})["_id"])

    res = client.delete(f"{API}/users/{user_id}", headers=admin)

    assert res.status_code == 200
    assert db[USERS].find_one({"email": "viewer@example.com"}) is None
    # The deleted user's still-valid token now points at nobody
    assert client.get(f"{API}/users", headers=viewer).status_code == 400


def test_delete_user_not_found(client, admin):
    assert client.delete(f"{API}/users/{ObjectId()}", headers=admin).status_code == 404
    assert client.delete(f"{API}/users/not-an-id", headers=admin).status_code == 404


def test_delete_user_requires_admin(client, db, admin, editor):
    admin_id = str(db[USERS].find_one({"email": "admin@example.com"})["_id"])
    assert client.delete(f"{API}/users/{admin_id}", headers=editor).status_code == 403


def test_delete_user_drops_favorites_nobody_else_holds(client, db, admin, viewer, artist_id, album_id):
    client.post(f"{API}/favorites/add-favorite", json={"item_id": artist_id, "category": "artist"}, headers=viewer)
    client.post(f"{API}/favorites/add-favorite", json={"item_id": album_id, "category": "album"}, headers=viewer)
    client.post(f"{API}/favorites/add-favorite", json={"item_id": album_id, "category": "album"}, headers=admin)
    user_id = str(db[USERS].find_one({"email": "viewer@example.com"})["_id"])

    client.delete(f"{API}/users/{user_id}", headers=admin)

    assert db[FAVORITES].find_one({"item_id": ObjectId(artist_id)}) is None
    assert db[FAVORITES].find_one({"item_id": ObjectId(album_id)}) is not None
