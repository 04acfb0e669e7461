"""Great-circle distance helpers."""

import math

import numpy as np

from .constants import GeoConstants


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Compute the haversine distance in meters between two lat/lon points.

    Args:
        lat1: Latitude 1 in degrees
        lon1: Longitude 1 in degrees
        lat2: Latitude 2 in degrees
        lon2: Longitude 2 in degrees

    Returns:
        Distance in meters
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    )
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return GeoConstants.MEAN_EARTH_RADIUS_M * c


def haversine_vectorized(
    lat1: np.ndarray,
    lon1: np.ndarray,
    lat2: np.ndarray,
    lon2: np.ndarray,
) -> np.ndarray:
    """Element-wise haversine distance in meters for coordinate arrays."""
    lat1_rad = np.radians(lat1)
    lon1_rad = np.radians(lon1)
    lat2_rad = np.radians(lat2)
    lon2_rad = np.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad
    a = (
        np.sin(dlat / 2) ** 2
        + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlon / 2) ** 2
    )
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return GeoConstants.MEAN_EARTH_RADIUS_M * c


def track_length_m(latitudes: np.ndarray, longitudes: np.ndarray) -> float:
    """Total length in meters of the polyline through the given points."""
    if len(latitudes) < 2:
        return 0.0
    distances = haversine_vectorized(
        latitudes[:-1], longitudes[:-1], latitudes[1:], longitudes[1:]
    )
    return float(distances.sum())
