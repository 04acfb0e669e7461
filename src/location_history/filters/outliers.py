"""
Velocity-based outlier removal.

Location fixes occasionally jump hundreds of kilometres and back within a few
seconds. Such samples imply a travel speed nobody can reach and are dropped.
"""

from ..models import LocationRecord
from ..settings import Settings
from .base import BaseRecordFilter


class OutlierFilter(BaseRecordFilter):
    """
    Drops records whose implied speed from the last retained record is too high.

    The first record has no predecessor and is always kept. Each later record
    is compared with the most recent *retained* record only, so one bad fix
    does not also condemn the good fix that follows it. Speed is only
    evaluated when the two records are less than ``max_gap_seconds`` apart;
    across longer gaps the record is kept. Because the comparison chain is the
    retained sequence itself, running the filter on its own output removes
    nothing.
    """

    name = "outliers"

    def __init__(
        self,
        settings: Settings,
        max_speed_kmh: float | None = None,
        max_gap_seconds: float | None = None,
    ):
        super().__init__(settings)
        self.max_speed_kmh = (
            max_speed_kmh if max_speed_kmh is not None else settings.max_speed_kmh
        )
        self.max_gap_seconds = (
            max_gap_seconds
            if max_gap_seconds is not None
            else settings.max_gap_seconds
        )
        self._last: LocationRecord | None = None

    def reset(self) -> None:
        super().reset()
        self._last = None

    def keep(self, record: LocationRecord) -> bool:
        if self._last is not None:
            speed = record.speed_kmh(self._last, self.max_gap_seconds)
            if speed is not None and speed >= self.max_speed_kmh:
                return False
        self._last = record
        return True
