"""Geodesic distance between two coordinates on the WGS-84 ellipsoid.

Two explicit stages:
  1. Vincenty inverse formula. Sub-millimetre accurate, result rounded to 3 dp (km).
  2. Haversine on a 6371 km sphere, rounded to 1 dp. Used only when Vincenty
     does not converge, which happens for nearly antipodal points.

Both stages are pure functions. ``distance_km`` orders its arguments before
computing so that distance_km(a, b) == distance_km(b, a) holds bit-for-bit.
"""
from __future__ import annotations
from math import atan, atan2, cos, radians, sin, sqrt, tan
from typing import Optional, Tuple

from app.models.items import Location

# WGS-84
SEMI_MAJOR_AXIS_M = 6378137.0
SEMI_MINOR_AXIS_M = 6356752.314245
FLATTENING = 1 / 298.257223563

CONVERGENCE_THRESHOLD = 1e-12  # radians
MAX_ITERATIONS = 100

EARTH_RADIUS_KM = 6371.0

Coord = Tuple[float, float]


def _as_pair(point: Location | Coord) -> Coord:
    if isinstance(point, Location):
        return point.latitude, point.longitude
    lat, lon = point
    return float(lat), float(lon)


def vincenty_km(a: Coord, b: Coord) -> Optional[float]:
    """Vincenty inverse distance in km (unrounded), or None if λ did not converge."""
    lat1, lon1 = a
    lat2, lon2 = b
    f = FLATTENING

    L = radians(lon2 - lon1)
    U1 = atan((1 - f) * tan(radians(lat1)))
    U2 = atan((1 - f) * tan(radians(lat2)))
    sin_u1, cos_u1 = sin(U1), cos(U1)
    sin_u2, cos_u2 = sin(U2), cos(U2)

    lam = L
    for _ in range(MAX_ITERATIONS):
        sin_lam, cos_lam = sin(lam), cos(lam)
        sin_sigma = sqrt(
            (cos_u2 * sin_lam) ** 2
            + (cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_lam) ** 2
        )
        if sin_sigma == 0:
            return 0.0  # coincident points
        cos_sigma = sin_u1 * sin_u2 + cos_u1 * cos_u2 * cos_lam
        sigma = atan2(sin_sigma, cos_sigma)
        sin_alpha = cos_u1 * cos_u2 * sin_lam / sin_sigma
        cos_sq_alpha = 1 - sin_alpha ** 2
        # both points on the equator
        cos_2sigma_m = cos_sigma - 2 * sin_u1 * sin_u2 / cos_sq_alpha if cos_sq_alpha != 0 else 0.0
        C = f / 16 * cos_sq_alpha * (4 + f * (4 - 3 * cos_sq_alpha))
        lam_prev = lam
        lam = L + (1 - C) * f * sin_alpha * (
            sigma + C * sin_sigma * (cos_2sigma_m + C * cos_sigma * (-1 + 2 * cos_2sigma_m ** 2))
        )
        if abs(lam - lam_prev) < CONVERGENCE_THRESHOLD:
            break
    else:
        return None

    a_sq, b_sq = SEMI_MAJOR_AXIS_M ** 2, SEMI_MINOR_AXIS_M ** 2
    u_sq = cos_sq_alpha * (a_sq - b_sq) / b_sq
    A = 1 + u_sq / 16384 * (4096 + u_sq * (-768 + u_sq * (320 - 175 * u_sq)))
    B = u_sq / 1024 * (256 + u_sq * (-128 + u_sq * (74 - 47 * u_sq)))
    delta_sigma = B * sin_sigma * (
        cos_2sigma_m + B / 4 * (
            cos_sigma * (-1 + 2 * cos_2sigma_m ** 2)
            - B / 6 * cos_2sigma_m * (-3 + 4 * sin_sigma ** 2) * (-3 + 4 * cos_2sigma_m ** 2)
        )
    )
    return SEMI_MINOR_AXIS_M * A * (sigma - delta_sigma) / 1000.0


def haversine_km(a: Coord, b: Coord) -> float:
    lat1, lon1 = a
    lat2, lon2 = b
    d_lat = radians(lat2 - lat1)
    d_lon = radians(lon2 - lon1)
    h = sin(d_lat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(d_lon / 2) ** 2
    # rounding can push h just outside [0, 1] for antipodal points
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(h), sqrt(1 - h))


def distance_km(a: Location | Coord, b: Location | Coord) -> float:
    """Distance between ``a`` and ``b`` in kilometres.

    Vincenty result rounded to 3 dp; Haversine fallback rounded to 1 dp.
    """
    p, q = sorted((_as_pair(a), _as_pair(b)))
    precise = vincenty_km(p, q)
    if precise is not None:
        return round(precise, 3)
    return round(haversine_km(p, q), 1)


__all__ = ["distance_km", "vincenty_km", "haversine_km", "MAX_ITERATIONS"]
