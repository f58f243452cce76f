"""Geographic distance calculations for distance-priced services.

Ambulance fares are priced on the straight-line (great-circle) distance
between the pickup and drop-off points picked on the map.
"""

from math import atan2, cos, radians, sin, sqrt

from .models import GeoPoint
from .surcharges import round_half_up

EARTH_RADIUS_KM = 6371.0


def haversine_km(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate the great-circle distance between two points in kilometers.

    Uses the Haversine formula to calculate the shortest distance over
    the Earth's surface between two points specified by latitude/longitude.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Unrounded distance between the two points in kilometers
    """
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)

    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
    # Rounding can push a just past 1 for near-antipodal points
    a = min(1.0, a)
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def calculate_distance(origin: GeoPoint | None, destination: GeoPoint | None) -> float | None:
    """Return the distance in kilometers rounded to one decimal place.

    Returns None when either point is missing. Callers must read None as
    "cannot price yet", never as 0 km.
    """
    if origin is None or destination is None:
        return None

    distance = haversine_km(
        origin.latitude, origin.longitude, destination.latitude, destination.longitude
    )
    return round_half_up(distance * 10) / 10
