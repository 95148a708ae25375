"""Plain geographic value types.

Kept free of GIS dependencies so that eligibility checks can run in pure Python.
"""

import math
from dataclasses import dataclass


class InvalidCoordinateError(ValueError):
    """Raised when a coordinate is not a finite number."""


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees.

    Latitude is expected in [-90, 90] and longitude in [-180, 180]. Values outside
    those ranges are accepted and simply produce geometrically meaningless distances.
    """

    latitude: float
    longitude: float

    def is_finite(self) -> bool:
        """Whether both coordinates are finite numbers."""
        return math.isfinite(self.latitude) and math.isfinite(self.longitude)


def ensure_finite(point: GeoPoint) -> GeoPoint:
    """Return the point unchanged, or raise if a coordinate is NaN or infinite.

    Raises:
        InvalidCoordinateError: If either coordinate is not a finite real number.
    """
    for name in ("latitude", "longitude"):
        value = getattr(point, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidCoordinateError(f"{name} must be a number, got {type(value).__name__}.")
    if not point.is_finite():
        raise InvalidCoordinateError(f"Coordinates must be finite, got ({point.latitude}, {point.longitude}).")
    return point
