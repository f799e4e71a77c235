"""HOTELFEED — Feed Session.

One session per viewer: owns the active filter, its watermark tracker and the
latest published feed. At most one merge runs at a time; scheduler ticks that
arrive while a merge is in flight are dropped, not queued.
"""

import asyncio
from typing import Callable, Optional, Sequence

from sqlalchemy.engine import Engine

from hotelfeed.connectors.activity_log import ActivityLogSource
from hotelfeed.connectors.base import EventSource
from hotelfeed.connectors.payments import PaymentSource
from hotelfeed.core.errors import AggregationError, FeedError
from hotelfeed.core.logging import get_logger
from hotelfeed.feed.merger import FeedMerger
from hotelfeed.feed.watermark import WatermarkTracker
from hotelfeed.models.feed_models import FeedResult, FilterState

logger = get_logger("feed.session")


class FeedSession:
    """Entry points for the scheduler and the filter selector."""

    def __init__(
        self,
        sources: Sequence[EventSource],
        timeout: float | None = None,
        on_result: Optional[Callable[[FeedResult], None]] = None,
    ):
        self.merger = FeedMerger(sources, timeout)
        self.tracker = WatermarkTracker(sources, timeout)
        self.on_result = on_result
        self.filter: Optional[FilterState] = None
        self.latest: Optional[FeedResult] = None
        self._merge_lock = asyncio.Lock()
        self._generation = 0

    @property
    def busy(self) -> bool:
        return self._merge_lock.locked()

    async def _run_merge(self, filter: FilterState, generation: int) -> Optional[FeedResult]:
        """Merge under the lock; publish unless a newer filter has superseded it."""
        async with self._merge_lock:
            if generation != self._generation:
                return None
            result = await self.merger.merge(filter)
            if generation != self._generation:
                logger.info("Discarding merge result for superseded filter")
                return None
            self.latest = result
            self.tracker.rebaseline(result.watermark)
        if self.on_result is not None:
            self.on_result(result)
        return result

    async def apply_filter(self, filter: FilterState) -> FeedResult:
        """Switch to a new selection and merge immediately. Errors propagate."""
        self._generation += 1
        generation = self._generation
        self.filter = filter
        logger.info(
            f"Filter changed: type_group={filter.type_group}",
            extra={"filter_date": filter.date.isoformat(), "employee_id": filter.employee_id},
        )
        result = await self._run_merge(filter, generation)
        if result is None:
            # Superseded by a newer filter; wait for its merge to land
            async with self._merge_lock:
                pass
            latest = self.latest
            if latest is None or latest.filter != self.filter:
                # The newer filter's merge failed; an older feed would be stale
                raise AggregationError("Filter superseded and its replacement failed to load")
            return latest
        return result

    async def poll(self) -> bool:
        """One scheduler tick. Returns True when the feed was refreshed.

        Never raises: staleness and refresh failures are logged and the
        cycle is skipped.
        """
        filter, generation = self.filter, self._generation
        if filter is None:
            return False
        if self.busy:
            logger.debug("Merge in flight, dropping poll tick")
            return False

        try:
            stale = await self.tracker.has_new_data(filter)
        except FeedError as e:
            logger.warning(f"Staleness check failed, skipping cycle: {e}")
            return False
        if not stale or self.busy:
            return False

        try:
            result = await self._run_merge(filter, generation)
        except FeedError as e:
            logger.warning(f"Poll refresh failed: {e}")
            return False
        return result is not None


def build_feed_session(
    engine: Engine,
    timeout: float | None = None,
    on_result: Optional[Callable[[FeedResult], None]] = None,
) -> FeedSession:
    """Session over the two standard sources, activity log first."""
    sources = [ActivityLogSource(engine), PaymentSource(engine)]
    return FeedSession(sources, timeout=timeout, on_result=on_result)
