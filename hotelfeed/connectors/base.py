"""HOTELFEED — Abstract Event Source.

Each source kind reads its own table for one calendar day and converts its
native row shape into NormalizedEvent. The merger never sees native rows.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from hotelfeed.config import settings
from hotelfeed.core.errors import SourceUnavailableError
from hotelfeed.core.type_registry import SourceKind
from hotelfeed.models.feed_models import FilterState, NormalizedEvent
from hotelfeed.models.store_models import Employee


class EventSource(ABC):
    """Read-only adapter over one append-only event table."""

    kind: SourceKind

    def __init__(self, engine: Engine, staff_role: str | None = None):
        self.engine = engine
        self.staff_role = staff_role or settings.staff_role

    # ── Backing store capability ──

    def fetch_events(self, filter: FilterState) -> List[Dict[str, Any]]:
        """All native rows for filter.date (and filter.employee_id when set)."""
        try:
            with Session(self.engine) as session:
                rows = session.exec(self._events_query(filter)).all()
                return [dict(r._mapping) for r in rows]
        except Exception as e:
            raise SourceUnavailableError(
                f"{self.kind.value} fetch failed: {e}", self.kind.value
            ) from e

    def fetch_max_timestamp(self, filter: FilterState) -> Optional[datetime]:
        """MAX(timestamp) for the same row set fetch_events would return."""
        try:
            with Session(self.engine) as session:
                return session.exec(self._max_query(filter)).one()
        except Exception as e:
            raise SourceUnavailableError(
                f"{self.kind.value} max-timestamp query failed: {e}", self.kind.value
            ) from e

    def _scope(self, query, employee_col, timestamp_col, filter: FilterState):
        """Restrict a query to staff-role rows of the filter's day and employee."""
        start, end = filter.day_bounds()
        query = query.join(Employee, employee_col == Employee.id).where(
            Employee.role == self.staff_role,
            timestamp_col >= start,
            timestamp_col < end,
        )
        if filter.employee_id is not None:
            query = query.where(employee_col == filter.employee_id)
        return query

    # ── Per-source hooks ──

    @abstractmethod
    def _events_query(self, filter: FilterState):
        """Select statement producing the native row shape, ordered by (timestamp, id)."""
        ...

    @abstractmethod
    def _max_query(self, filter: FilterState):
        """Select statement producing a single optional timestamp."""
        ...

    @abstractmethod
    def row_timestamp(self, row: Dict[str, Any]) -> Optional[datetime]:
        """The ordering timestamp of a native row, if it has one."""
        ...

    @abstractmethod
    def normalize(self, row: Dict[str, Any]) -> NormalizedEvent:
        """Convert a native row, raising MalformedRowError when it can't be."""
        ...
