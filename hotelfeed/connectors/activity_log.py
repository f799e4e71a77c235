"""HOTELFEED — Activity Log Source."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlmodel import select

from hotelfeed.connectors.base import EventSource
from hotelfeed.core.errors import MalformedRowError
from hotelfeed.core.type_registry import SourceKind, normalize_type
from hotelfeed.models.feed_models import FilterState, NormalizedEvent
from hotelfeed.models.store_models import ActivityLog, Employee


def actor_name(row: Dict[str, Any]) -> str:
    """'First Last' of the employee joined to a row."""
    return " ".join(
        part.strip()
        for part in (row.get("first_name"), row.get("last_name"))
        if part and part.strip()
    )


class ActivityLogSource(EventSource):
    """Employee activity entries: logins, check-ins, check-outs, reservations."""

    kind = SourceKind.ACTIVITY

    def _events_query(self, filter: FilterState):
        query = select(
            ActivityLog.id,
            ActivityLog.activity_datetime,
            ActivityLog.activity_type,
            ActivityLog.activity_description,
            Employee.first_name,
            Employee.last_name,
        )
        return self._scope(
            query, ActivityLog.employee_id, ActivityLog.activity_datetime, filter
        ).order_by(ActivityLog.activity_datetime, ActivityLog.id)

    def _max_query(self, filter: FilterState):
        query = select(func.max(ActivityLog.activity_datetime)).select_from(ActivityLog)
        return self._scope(
            query, ActivityLog.employee_id, ActivityLog.activity_datetime, filter
        )

    def row_timestamp(self, row: Dict[str, Any]) -> Optional[datetime]:
        return row.get("activity_datetime")

    def normalize(self, row: Dict[str, Any]) -> NormalizedEvent:
        timestamp = self.row_timestamp(row)
        if timestamp is None:
            raise MalformedRowError("missing activity_datetime", self.kind.value, row)
        name = actor_name(row)
        if not name:
            raise MalformedRowError("missing employee name", self.kind.value, row)
        display_type = (row.get("activity_type") or "").strip()
        if not display_type:
            raise MalformedRowError("missing activity_type", self.kind.value, row)

        return NormalizedEvent(
            timestamp=timestamp,
            actor_name=name,
            display_type=display_type,
            norm_type=normalize_type(display_type),
            description=row.get("activity_description") or "",
            source=self.kind,
        )
