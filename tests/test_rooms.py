import pytest

from helpers import USER_A, USER_B, USER_C, ORIGIN, north_of, seed_room


def sync(client, point, user_id=USER_A):
    return client.post("/rooms/sync", json={"userId": user_id, "latitude": point[0], "longitude": point[1]})


def test_sync_in_empty_area_creates_and_joins_auto_room(client, profiles, db):
    response = sync(client, ORIGIN)

    assert response.status_code == 200
    body = response.json()
    assert len(body["active_rooms"]) == 1
    assert body["joined"] == body["active_rooms"]
    assert body["left"] == []

    room = db.rows("chat_rooms")[0]
    assert room["type"] == "auto_generated"
    assert room["name"] == "New Spot @ 10.00, 20.00"
    assert room["radius"] == 500
    assert room["expires_at"] is not None
    # Joined exactly once
    assert len(db.rows("room_participants", room_id=room["id"], user_id=USER_A)) == 1
    assert ("cleanup_expired_rooms", {}) in db.rpc_calls


def test_sync_updates_profile_location(client, profiles, db):
    sync(client, ORIGIN)

    profile = db.rows("profiles", id=USER_A)[0]
    assert (profile["latitude"], profile["longitude"]) == ORIGIN
    assert profile["last_seen"] is not None


def test_sync_again_in_place_is_a_no_op(client, profiles, db):
    first = sync(client, ORIGIN).json()
    second = sync(client, ORIGIN).json()

    assert second["active_rooms"] == first["active_rooms"]
    assert second["joined"] == []
    assert second["left"] == []
    assert len(db.rows("chat_rooms")) == 1


def test_sync_joins_existing_room_inside_its_radius(client, profiles, db):
    room = seed_room(db, radius=300)

    body = sync(client, north_of(ORIGIN, 290)).json()

    assert body["active_rooms"] == [room["id"]]
    assert body["joined"] == [room["id"]]
    assert len(db.rows("chat_rooms")) == 1


def test_sync_does_not_spawn_room_next_to_an_existing_one(client, profiles, db):
    seed_room(db, radius=300)

    body = sync(client, north_of(ORIGIN, 700)).json()

    assert body["active_rooms"] == []
    assert len(db.rows("chat_rooms")) == 1


def test_sync_far_away_leaves_old_room_and_spawns_new_one(client, profiles, db):
    first = sync(client, ORIGIN).json()
    old_room = first["active_rooms"][0]

    body = sync(client, north_of(ORIGIN, 2000)).json()

    assert body["left"] == [old_room]
    assert len(body["joined"]) == 1
    assert body["joined"][0] != old_room
    assert not db.rows("room_participants", room_id=old_room, user_id=USER_A)


def test_sync_ignores_expired_rooms(client, profiles, db):
    expired = seed_room(db, expires_in=-1)

    body = sync(client, ORIGIN).json()

    assert expired["id"] not in body["active_rooms"]
    assert len(body["active_rooms"]) == 1


def test_sync_never_leaves_private_rooms(client, profiles, db):
    private = db.seed("chat_rooms", name=f"private_{USER_A}_{USER_B}", type="private")
    db.seed("room_participants", room_id=private["id"], user_id=USER_A)

    body = sync(client, ORIGIN).json()

    assert private["id"] not in body["left"]
    assert db.rows("room_participants", room_id=private["id"], user_id=USER_A)


def test_sync_for_another_user_is_forbidden(client, profiles):
    response = sync(client, ORIGIN, user_id=USER_B)
    assert response.status_code == 403
    assert "error" in response.json()


def test_sync_rejects_invalid_coordinates(client, profiles):
    response = sync(client, (91.0, 0.0))
    assert response.status_code == 400
    assert "details" in response.json()


def test_cleanup_failure_does_not_break_sync(client, profiles, db):
    def broken(params):
        raise RuntimeError("function does not exist")
    db.rpc_handlers["cleanup_expired_rooms"] = broken

    assert sync(client, ORIGIN).status_code == 200


def test_nearby_rooms_sorted_with_distance(client, profiles, db):
    far = seed_room(db, north_of(ORIGIN, 400), name="Far")
    near = seed_room(db, north_of(ORIGIN, 100), name="Near")
    seed_room(db, north_of(ORIGIN, 150), name="Old", expires_in=-1)
    seed_room(db, north_of(ORIGIN, 50), type="private", name="Secret")

    response = client.get("/rooms/nearby", params={"lat": ORIGIN[0], "lng": ORIGIN[1]})

    assert response.status_code == 200
    rooms = response.json()
    assert [r["id"] for r in rooms] == [near["id"], far["id"]]
    assert rooms[0]["distance_m"] == pytest.approx(100, abs=1)


def test_nearby_rooms_respect_each_room_radius(client, profiles, db):
    seed_room(db, north_of(ORIGIN, 400), radius=200)

    rooms = client.get("/rooms/nearby", params={"lat": ORIGIN[0], "lng": ORIGIN[1]}).json()

    assert rooms == []


def test_nearby_room_without_radius_uses_query_radius(client, profiles, db):
    room = seed_room(db, north_of(ORIGIN, 300), radius=None)
    point = {"lat": ORIGIN[0], "lng": ORIGIN[1]}

    wide = client.get("/rooms/nearby", params={**point, "radius": 350}).json()
    narrow = client.get("/rooms/nearby", params={**point, "radius": 250}).json()

    assert [r["id"] for r in wide] == [room["id"]]
    assert narrow == []


def test_create_room_creates_public_room_and_joins(client, profiles, db):
    response = client.post("/rooms/create", json={
        "name": "  Coffee  ", "latitude": ORIGIN[0], "longitude": ORIGIN[1], "userId": USER_A
    })

    assert response.status_code == 201
    body = response.json()
    assert body["created"] is True
    assert body["room"]["name"] == "Coffee"
    assert body["room"]["type"] == "public"
    assert body["room"]["radius"] == 500
    assert body["room"]["is_expired"] is False
    assert db.rows("room_participants", room_id=body["room"]["id"], user_id=USER_A)


def test_create_room_on_occupied_spot_joins_existing(client, profiles, db, login_as):
    existing = seed_room(db)
    login_as(USER_B)

    response = client.post("/rooms/create", json={
        "name": "Duplicate", "latitude": north_of(ORIGIN, 50)[0], "longitude": ORIGIN[1], "userId": USER_B
    })

    assert response.status_code == 201
    body = response.json()
    assert body["created"] is False
    assert body["room"]["id"] == existing["id"]
    assert len(db.rows("chat_rooms")) == 1
    assert db.rows("room_participants", room_id=existing["id"], user_id=USER_B)


def test_create_room_beyond_dedup_distance_creates_new(client, profiles, db):
    seed_room(db)

    body = client.post("/rooms/create", json={
        "name": "Next door", "latitude": north_of(ORIGIN, 150)[0], "longitude": ORIGIN[1], "userId": USER_A
    }).json()

    assert body["created"] is True
    assert len(db.rows("chat_rooms")) == 2


def test_create_room_validates_name_and_radius(client, profiles):
    assert client.post("/rooms/create", json={
        "name": "", "latitude": 0, "longitude": 0, "userId": USER_A
    }).status_code == 400
    assert client.post("/rooms/create", json={
        "name": "Huge", "latitude": 0, "longitude": 0, "radius": 10_000, "userId": USER_A
    }).status_code == 400


def test_private_room_is_shared_regardless_of_order(client, profiles, db, login_as):
    first = client.post("/rooms/private", json={"user1_id": USER_A, "user2_id": USER_B})
    login_as(USER_B)
    second = client.post("/rooms/private", json={"user1_id": USER_B, "user2_id": USER_A})

    assert first.status_code == 200
    assert first.json()["room_id"] == second.json()["room_id"]
    rooms = db.rows("chat_rooms", type="private")
    assert len(rooms) == 1
    assert rooms[0]["name"] == "private_{}_{}".format(*sorted([USER_A, USER_B]))
    assert len(db.rows("room_participants", room_id=rooms[0]["id"])) == 2


def test_private_room_found_by_membership_when_name_differs(client, profiles, db):
    legacy = db.seed("chat_rooms", name="Chat", type="private")
    db.seed("room_participants", room_id=legacy["id"], user_id=USER_A)
    db.seed("room_participants", room_id=legacy["id"], user_id=USER_B)

    body = client.post("/rooms/private", json={"user1_id": USER_A, "user2_id": USER_B}).json()

    assert body["room_id"] == legacy["id"]


def test_private_room_with_self_is_rejected(client, profiles):
    response = client.post("/rooms/private", json={"user1_id": USER_A, "user2_id": USER_A})
    assert response.status_code == 400


def test_join_room_is_idempotent(client, profiles, db):
    room = seed_room(db)

    first = client.post(f"/rooms/{room['id']}/join", json={"userId": USER_A})
    second = client.post(f"/rooms/{room['id']}/join", json={"userId": USER_A})

    assert first.json() == {"room_id": room["id"], "joined": True}
    assert second.json() == {"room_id": room["id"], "joined": False}
    assert len(db.rows("room_participants", room_id=room["id"])) == 1


def test_join_room_errors(client, profiles, db):
    expired = seed_room(db, expires_in=-1)
    private = seed_room(db, type="private")

    assert client.post("/rooms/missing/join", json={"userId": USER_A}).status_code == 404
    assert client.post(f"/rooms/{private['id']}/join", json={"userId": USER_A}).status_code == 403
    response = client.post(f"/rooms/{expired['id']}/join", json={"userId": USER_A})
    assert response.status_code == 410
    assert response.json() == {"error": "This room is no longer active"}


def test_leave_room(client, profiles, db):
    room = seed_room(db)
    db.seed("room_participants", room_id=room["id"], user_id=USER_A)

    response = client.post(f"/rooms/{room['id']}/leave", json={"userId": USER_A})

    assert response.json() == {"room_id": room["id"], "left": True}
    assert not db.rows("room_participants", room_id=room["id"], user_id=USER_A)
    assert client.post("/rooms/missing/leave", json={"userId": USER_A}).status_code == 404


def test_get_room_reports_expiry(client, profiles, db):
    room = seed_room(db, expires_in=-2)

    body = client.get(f"/rooms/{room['id']}").json()

    assert body["id"] == room["id"]
    assert body["is_expired"] is True


def test_private_room_details_need_membership(client, profiles, db, login_as):
    room_id = client.post("/rooms/private", json={"user1_id": USER_A, "user2_id": USER_B}).json()["room_id"]

    assert client.get(f"/rooms/{room_id}/participants").status_code == 200
    login_as(USER_C)
    assert client.get(f"/rooms/{room_id}").status_code == 403
    assert client.get(f"/rooms/{room_id}/participants").status_code == 403


def test_list_my_rooms_names_private_rooms_after_other_user(client, profiles, db):
    public = seed_room(db, name="Plaza")
    db.seed("room_participants", room_id=public["id"], user_id=USER_A)
    private_id = client.post("/rooms/private", json={"user1_id": USER_A, "user2_id": USER_B}).json()["room_id"]

    rooms = client.get("/rooms").json()

    assert [r["id"] for r in rooms] == [private_id, public["id"]]
    assert rooms[0]["name"] == "Bob"
    assert rooms[0]["other_user_id"] == USER_B
    assert rooms[1]["name"] == "Plaza"


def test_list_participants(client, profiles, db):
    room = seed_room(db)
    db.seed("room_participants", room_id=room["id"], user_id=USER_A)
    db.seed("room_participants", room_id=room["id"], user_id=USER_C)

    participants = client.get(f"/rooms/{room['id']}/participants").json()

    assert {p["id"] for p in participants} == {USER_A, USER_C}
    assert {p["username"] for p in participants} == {"alice", "carol"}


def test_room_reaper_calls_cleanup_rpc(db, monkeypatch):
    import asyncio
    from app.modules.rooms import expiry_scheduler

    monkeypatch.setattr(expiry_scheduler, "get_supabase", lambda: db)

    assert asyncio.run(expiry_scheduler.purge_expired_rooms()) is True
    assert db.rpc_calls == [("cleanup_expired_rooms", {})]
