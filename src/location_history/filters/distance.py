"""Radius filter around a centre point."""

from ..exceptions import ValidationError
from ..geo import haversine_m
from ..models import LocationRecord
from ..settings import Settings
from .base import BaseRecordFilter


def validate_center(latitude: float, longitude: float, radius_m: float) -> None:
    """Raise ValidationError unless the centre is a coordinate and the radius positive."""
    if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
        raise ValidationError(
            f"Centre point ({latitude}, {longitude}) is not a valid coordinate"
        )
    if radius_m <= 0:
        raise ValidationError(f"Radius must be positive, got {radius_m}")


class DistanceFilter(BaseRecordFilter):
    """Keeps records strictly closer than ``radius_m`` to a centre point."""

    name = "distance"

    def __init__(
        self, settings: Settings, latitude: float, longitude: float, radius_m: float
    ):
        super().__init__(settings)
        validate_center(latitude, longitude, radius_m)
        self.latitude = latitude
        self.longitude = longitude
        self.radius_m = radius_m

    def keep(self, record: LocationRecord) -> bool:
        distance = haversine_m(
            record.latitude, record.longitude, self.latitude, self.longitude
        )
        return distance < self.radius_m
