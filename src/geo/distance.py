from math import atan2, cos, radians, sin, sqrt

from .types import GeoPoint

EARTH_MEAN_RADIUS_METERS = 6_371_000.0


def compute_distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in meters (Haversine).

    Symmetric and side-effect free. NaN coordinates propagate to a NaN result;
    validating input is the caller's job (see geo.types.ensure_finite).
    """
    phi1 = radians(a.latitude)
    phi2 = radians(b.latitude)
    delta_phi = radians(b.latitude - a.latitude)
    delta_lambda = radians(b.longitude - a.longitude)

    h = sin(delta_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(delta_lambda / 2) ** 2
    # rounding can push h a hair above 1 for antipodal points
    h = min(h, 1.0)
    c = 2 * atan2(sqrt(h), sqrt(1 - h))
    return EARTH_MEAN_RADIUS_METERS * c
