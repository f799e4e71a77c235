"""HOTELFEED — Feed Merger.

Runs the full data flow for one filter:
  fetch (all sources, concurrently) → normalize → watermark → type filter → sort

Either every source contributes or the merge fails; there is no partial feed.
"""

import asyncio
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from hotelfeed.config import settings
from hotelfeed.connectors.base import EventSource
from hotelfeed.core.errors import AggregationError, MalformedRowError, SourceUnavailableError
from hotelfeed.core.logging import get_logger
from hotelfeed.core.type_registry import SourceKind, matches_type_group
from hotelfeed.models.feed_models import (
    FeedResult,
    FilterState,
    NormalizedEvent,
    WatermarkPair,
)

logger = get_logger("feed.merger")


async def call_source(source: EventSource, fn, filter: FilterState, timeout: float):
    """Run a blocking source call in a worker thread, bounded by timeout."""
    try:
        return await asyncio.wait_for(asyncio.to_thread(fn, filter), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise SourceUnavailableError(
            f"{source.kind.value} source timed out after {timeout}s", source.kind.value
        ) from e
    except SourceUnavailableError:
        raise
    except Exception as e:
        raise SourceUnavailableError(
            f"{source.kind.value} source failed: {e}", source.kind.value
        ) from e


def _max_timestamp(
    source: EventSource, rows: List[Dict[str, Any]]
) -> Optional[datetime]:
    stamps = [ts for ts in (source.row_timestamp(r) for r in rows) if ts is not None]
    return max(stamps) if stamps else None


def _normalize_rows(
    source: EventSource, rows: List[Dict[str, Any]]
) -> Tuple[List[NormalizedEvent], int]:
    """Normalize rows, dropping (and counting) the ones that can't be."""
    events: List[NormalizedEvent] = []
    skipped = 0
    for row in rows:
        try:
            events.append(source.normalize(row))
        except MalformedRowError as e:
            skipped += 1
            logger.warning(
                f"Skipping malformed row id={row.get('id')}: {e.reason}",
                extra={"source": source.kind.value},
            )
    return events, skipped


def summarize(count: int, filter: FilterState) -> str:
    """Display line shown above the feed."""
    return f"Showing {count} activities for {filter.date:%Y-%m-%d}"


class FeedMerger:
    """Unions normalized events from every registered source."""

    def __init__(self, sources: Sequence[EventSource], timeout: float | None = None):
        if not sources:
            raise ValueError("FeedMerger needs at least one source")
        self.sources = list(sources)
        self.timeout = timeout if timeout is not None else settings.source_timeout_seconds

    async def _fetch_all(self, filter: FilterState) -> List[List[Dict[str, Any]]]:
        tasks = [
            asyncio.ensure_future(
                call_source(source, source.fetch_events, filter, self.timeout)
            )
            for source in self.sources
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except SourceUnavailableError as e:
            for task in tasks:
                task.cancel()
            raise AggregationError(f"Feed unavailable: {e}", e.source) from e

    async def merge(self, filter: FilterState) -> FeedResult:
        """Build the ordered feed for one filter."""
        started = time.perf_counter()
        batches = await self._fetch_all(filter)

        union: List[NormalizedEvent] = []
        maxima: Dict[SourceKind, Optional[datetime]] = {}
        skipped = 0
        for source, rows in zip(self.sources, batches):
            # Watermarks are taken before the type filter
            maxima[source.kind] = _max_timestamp(source, rows)
            events, dropped = _normalize_rows(source, rows)
            union.extend(events)
            skipped += dropped

        kept = [e for e in union if matches_type_group(e.norm_type, filter.type_group)]
        # sorted() is stable: equal timestamps keep source order, then row id order
        kept = sorted(kept, key=lambda e: e.timestamp, reverse=True)

        watermark = WatermarkPair(
            last_activity_max=maxima.get(SourceKind.ACTIVITY),
            last_payment_max=maxima.get(SourceKind.PAYMENT),
            scope=filter.scope,
        )

        logger.info(
            f"Merged {len(kept)} of {len(union)} events ({skipped} skipped)",
            extra={
                "filter_date": filter.date.isoformat(),
                "employee_id": filter.employee_id,
                "row_count": len(kept),
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
        return FeedResult(
            filter=filter,
            events=kept,
            count=len(kept),
            empty=not kept,
            summary=summarize(len(kept), filter),
            watermark=watermark,
            skipped_rows=skipped,
        )
