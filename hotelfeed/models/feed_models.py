"""HOTELFEED — Feed Models.

Every source adapter normalizes into NormalizedEvent. FilterState and
WatermarkPair are immutable snapshots; they are replaced, never patched.
"""

import datetime as dt
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from hotelfeed.core.type_registry import SourceKind


class NormalizedEvent(BaseModel):
    """One row of the merged feed."""

    timestamp: dt.datetime
    actor_name: str
    display_type: str
    norm_type: str
    description: str = ""
    source: SourceKind


class FilterState(BaseModel):
    """Current (date, employee, type group) selection. None means no restriction."""

    model_config = {"frozen": True}

    date: dt.date
    employee_id: Optional[int] = None
    type_group: Optional[str] = None

    @property
    def scope(self) -> Tuple[dt.date, Optional[int]]:
        """The part of the filter that scopes watermarks (type is excluded)."""
        return (self.date, self.employee_id)

    def day_bounds(self) -> Tuple[dt.datetime, dt.datetime]:
        """Half-open [start, end) interval covering the calendar day."""
        start = dt.datetime.combine(self.date, dt.time.min)
        return start, start + dt.timedelta(days=1)


class WatermarkPair(BaseModel):
    """Per-source maximum timestamps seen by the latest merge."""

    model_config = {"frozen": True}

    last_activity_max: Optional[dt.datetime] = None
    last_payment_max: Optional[dt.datetime] = None
    scope: Optional[Tuple[dt.date, Optional[int]]] = None

    def for_source(self, kind: SourceKind) -> Optional[dt.datetime]:
        if kind == SourceKind.ACTIVITY:
            return self.last_activity_max
        return self.last_payment_max


class FeedResult(BaseModel):
    """What the presentation layer receives after a merge."""

    filter: FilterState
    events: List[NormalizedEvent] = []
    count: int = 0
    empty: bool = True
    summary: str = ""
    watermark: WatermarkPair = WatermarkPair()
    skipped_rows: int = 0
    generated_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc)
    )
