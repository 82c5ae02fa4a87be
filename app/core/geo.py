"""
Geofencing helpers: great-circle distance and bounding-box prefilters.

Bounding boxes are only a cheap database prefilter (PostgREST cannot evaluate
haversine); callers always confirm with haversine_distance afterwards.
"""

import math
from typing import Any, Dict, Optional, Tuple

EARTH_RADIUS_M = 6371000.0
METERS_PER_DEGREE = 111000.0


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in metres between two WGS84 points."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def bounding_box(lat: float, lng: float, radius_m: float) -> Tuple[float, float, float, float]:
    """Return (min_lat, max_lat, min_lng, max_lng) enclosing a circle of radius_m."""
    lat_delta = radius_m / METERS_PER_DEGREE
    cos_lat = math.cos(math.radians(lat))
    # Longitude degrees shrink towards the poles; clamp so the box stays finite
    lng_delta = radius_m / (METERS_PER_DEGREE * max(cos_lat, 1e-6))
    return lat - lat_delta, lat + lat_delta, lng - lng_delta, lng + lng_delta


def has_coordinates(row: Dict[str, Any]) -> bool:
    return row.get("latitude") is not None and row.get("longitude") is not None


def distance_to(row: Dict[str, Any], lat: float, lng: float) -> Optional[float]:
    """Distance from (lat, lng) to a row carrying latitude/longitude, or None without coordinates."""
    if not has_coordinates(row):
        return None
    return haversine_distance(lat, lng, row["latitude"], row["longitude"])


def is_within_radius(distance_m: Optional[float], radius_m: float) -> bool:
    return distance_m is not None and distance_m <= radius_m

