"""Qibla bearing and distance to the Kaaba."""

import math

from salahtimes.i18n import t
from salahtimes.models import GeoCoordinates

KAABA = GeoCoordinates(latitude=21.4225, longitude=39.8262)

_EARTH_RADIUS_KM = 6371.0088  # IUGG mean radius

_COMPASS_POINTS = (
    "north",
    "north_east",
    "east",
    "south_east",
    "south",
    "south_west",
    "west",
    "north_west",
)


def qibla_bearing(coordinates: GeoCoordinates) -> float:
    """Initial great-circle bearing from the observer to the Kaaba.

    Returns:
        Degrees clockwise from true north, in [0, 360). At the Kaaba itself the
        bearing is degenerate (0.0) but still a valid number.
    """
    lat1 = math.radians(coordinates.latitude)
    lat2 = math.radians(KAABA.latitude)
    d_lon = math.radians(KAABA.longitude - coordinates.longitude)

    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lon)
    bearing = (math.degrees(math.atan2(y, x)) + 360.0) % 360.0
    # (-tiny + 360) % 360 can round up to exactly 360.0
    return 0.0 if bearing >= 360.0 else bearing


def distance_to_kaaba(coordinates: GeoCoordinates) -> float:
    """Haversine distance to the Kaaba in kilometres."""
    lat1 = math.radians(coordinates.latitude)
    lat2 = math.radians(KAABA.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(KAABA.longitude - coordinates.longitude)
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return 2 * _EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def cardinal_direction(degrees: float, lang: str = "en") -> str:
    """Eight-point compass label for a bearing (each sector spans 45°)."""
    sector = int(((degrees % 360.0) + 22.5) // 45.0) % 8
    return t(f"direction_{_COMPASS_POINTS[sector]}", lang)


def format_distance(kilometres: float) -> str:
    """Human-readable distance: metres below 1 km, one decimal below 100 km."""
    if kilometres < 1:
        return f"{kilometres * 1000:.0f} m"
    if kilometres < 100:
        return f"{kilometres:.1f} km"
    return f"{kilometres:.0f} km"
