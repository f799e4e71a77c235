"""HOTELFEED — Watermark Tracker.

Cheap staleness check: compares each source's MAX(timestamp) under the
current (date, employee) scope with the maxima recorded by the latest merge.
"""

import asyncio
from datetime import datetime
from typing import Optional, Sequence

from hotelfeed.config import settings
from hotelfeed.connectors.base import EventSource
from hotelfeed.core.logging import get_logger
from hotelfeed.feed.merger import call_source
from hotelfeed.models.feed_models import FilterState, WatermarkPair

logger = get_logger("feed.watermark")


def is_newer(candidate: Optional[datetime], stored: Optional[datetime]) -> bool:
    """A present maximum is newer than an absent one or a strictly smaller one."""
    if candidate is None:
        return False
    return stored is None or candidate > stored


class WatermarkTracker:
    """Holds one session's WatermarkPair. Never fetches the full feed."""

    def __init__(self, sources: Sequence[EventSource], timeout: float | None = None):
        self.sources = list(sources)
        self.timeout = timeout if timeout is not None else settings.source_timeout_seconds
        self._current: Optional[WatermarkPair] = None

    @property
    def current(self) -> Optional[WatermarkPair]:
        return self._current

    def rebaseline(self, watermark: WatermarkPair) -> None:
        """Replace the stored pair wholesale."""
        self._current = watermark
        logger.debug(
            f"Watermark rebaselined: activity={watermark.last_activity_max} "
            f"payment={watermark.last_payment_max}"
        )

    async def has_new_data(self, filter: FilterState) -> bool:
        """True when any source has a row newer than the stored watermark.

        Raises SourceUnavailableError if a max query fails; callers on a
        polling loop are expected to swallow it and skip the cycle.
        """
        stored = self._current
        if stored is None or stored.scope != filter.scope:
            return True

        maxima = await asyncio.gather(
            *(
                call_source(source, source.fetch_max_timestamp, filter, self.timeout)
                for source in self.sources
            )
        )
        for source, latest in zip(self.sources, maxima):
            if is_newer(latest, stored.for_source(source.kind)):
                logger.info(
                    f"New {source.kind.value} data since {stored.for_source(source.kind)}",
                    extra={"source": source.kind.value},
                )
                return True
        return False
