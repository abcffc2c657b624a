from __future__ import annotations

from spacebook.models import Space, SpaceStatus


def test_register_login_book_conflict_cancel(client, admin_headers, refetch):
    created = client.post(
        "/addspace",
        json={"name": "Study Room A", "location": "Library Level 2"},
        headers=admin_headers,
    )
    space_id = created.get_json()["id"]

    assert client.post("/register", json={"username": "alice", "password": "pw1"}).status_code == 201
    assert client.post("/register", json={"username": "bob", "password": "pw2"}).status_code == 201

    login = client.post("/login", json={"username": "alice", "password": "pw1"})
    assert login.status_code == 200
    alice = {"Authorization": f"Bearer {login.get_json()['token']}"}
    assert client.post("/login", json={"username": "alice", "password": "wrong"}).status_code == 401
    bob = {"Authorization": f"Bearer {client.post('/login', json={'username': 'bob', 'password': 'pw2'}).get_json()['token']}"}

    booked = client.post(
        "/bookspace",
        json={"space_id": space_id, "start_time": "2099-03-01T10:00:00Z", "end_time": "2099-03-01T11:00:00Z"},
        headers=alice,
    )
    assert booked.status_code == 201
    assert refetch(Space, space_id).status is SpaceStatus.reserved

    clash = client.post(
        "/bookspace",
        json={"space_id": space_id, "start_time": "2099-03-01T10:30:00Z", "end_time": "2099-03-01T11:30:00Z"},
        headers=bob,
    )
    assert clash.status_code == 400
    assert clash.get_json()["code"] == "time_conflict"

    assert client.post("/cancelbooking", json={"space_id": space_id}, headers=bob).status_code == 404

    cancelled = client.post("/cancelbooking", json={"space_id": space_id}, headers=alice)
    assert cancelled.status_code == 200
    assert refetch(Space, space_id).status is SpaceStatus.available

    listing = client.get("/allspaces", query_string={"status": "available"}).get_json()
    assert [space["id"] for space in listing] == [space_id]
    assert [row["status"] for row in client.get("/viewbooking", headers=alice).get_json()] == ["cancelled"]
