"""HOTELFEED — Activity Feed API Routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session

from hotelfeed.core.errors import AggregationError, FilterValidationError
from hotelfeed.core.logging import get_logger
from hotelfeed.database import engine, get_session
from hotelfeed.feed.filters import build_filter
from hotelfeed.feed.session import FeedSession, build_feed_session
from hotelfeed.models.feed_models import FeedResult
from hotelfeed.services.filter_options import (
    EmployeeOption,
    TypeOption,
    list_employee_options,
    list_type_options,
)

logger = get_logger("api.feed")

router = APIRouter(prefix="/feed", tags=["Feed"])

_feed_session: Optional[FeedSession] = None


def get_feed_session() -> FeedSession:
    """Dependency — the single active feed session."""
    global _feed_session
    if _feed_session is None:
        _feed_session = build_feed_session(engine)
    return _feed_session


# ── Response Models ──


class PollResponse(BaseModel):
    """Response for GET /feed/poll."""

    refreshed: bool
    feed: Optional[FeedResult] = None


class FilterOptionsResponse(BaseModel):
    """Response for GET /feed/filters."""

    employees: List[EmployeeOption]
    types: List[TypeOption]


# ── Endpoints ──


@router.get("", response_model=FeedResult)
async def get_feed(
    date: str = Query(..., description="Calendar day (YYYY-MM-DD)"),
    employee_id: Optional[int] = Query(None, description="Restrict to one employee"),
    type_group: Optional[str] = Query(None, description="login | checkin | checkout | reservation | payment"),
    feed_session: FeedSession = Depends(get_feed_session),
):
    """Apply a filter selection and return the merged feed for that day."""
    try:
        filter = build_filter(date, employee_id, type_group)
    except FilterValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        return await feed_session.apply_filter(filter)
    except AggregationError as e:
        logger.error(f"Feed merge failed: {e}", extra={"source": e.source})
        raise HTTPException(status_code=503, detail=f"Error loading activity logs: {e}")


@router.get("/poll", response_model=PollResponse)
async def poll_feed(feed_session: FeedSession = Depends(get_feed_session)):
    """Run one staleness check; refresh the feed only if something is newer."""
    refreshed = await feed_session.poll()
    return PollResponse(refreshed=refreshed, feed=feed_session.latest)


@router.get("/filters", response_model=FilterOptionsResponse)
async def get_filter_options(session: Session = Depends(get_session)):
    """Options for the employee and activity-type selectors."""
    return FilterOptionsResponse(
        employees=list_employee_options(session),
        types=list_type_options(),
    )
