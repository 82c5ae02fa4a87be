from datetime import datetime, timedelta, timezone

USER_A = "aaaaaaaa-0000-0000-0000-000000000001"
USER_B = "bbbbbbbb-0000-0000-0000-000000000002"
USER_C = "cccccccc-0000-0000-0000-000000000003"

METERS_PER_LAT_DEGREE = 111194.93
ORIGIN = (10.0, 20.0)


def north_of(point, meters):
    return point[0] + meters / METERS_PER_LAT_DEGREE, point[1]


def iso_in(hours):
    return (datetime.now(timezone.utc) + timedelta(hours=hours)).isoformat()


def seed_room(db, point=ORIGIN, type="public", radius=500, expires_in=24, **extra):
    return db.seed(
        "chat_rooms",
        name=extra.pop("name", "Plaza"),
        type=type,
        latitude=point[0],
        longitude=point[1],
        radius=radius,
        expires_at=iso_in(expires_in) if expires_in is not None else None,
        **extra
    )
