import math
from datetime import datetime, timezone

from bson import ObjectId

EARTH_RADIUS_KM = 6371


def deg2rad(deg: float) -> float:
    return deg * (math.pi / 180)


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two (lat, lon) points given in degrees (Haversine)"""
    d_lat = deg2rad(lat2 - lat1)
    d_lon = deg2rad(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) * math.sin(d_lat / 2)
        + math.cos(deg2rad(lat1)) * math.cos(deg2rad(lat2)) * math.sin(d_lon / 2) * math.sin(d_lon / 2)
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Mongo hands back naive UTC datetimes unless the client is tz aware"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def new_id() -> str:
    return str(ObjectId())


def prevent_empty_str(v, field_name: str):
    if v is None or (isinstance(v, str) and v.strip() == ""):
        raise ValueError(f"Field '{field_name}' cannot be null or empty string")
    return v.strip() if isinstance(v, str) else v


def empty_str_to_none(v, field_name: str):
    if v == "":
        return None
    return v
