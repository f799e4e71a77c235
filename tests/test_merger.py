import asyncio
import datetime as dt
import time

import pytest

from conftest import DAY, add_activity, add_payment, at
from hotelfeed.connectors.activity_log import ActivityLogSource
from hotelfeed.connectors.payments import PaymentSource
from hotelfeed.core.errors import AggregationError, SourceUnavailableError
from hotelfeed.feed.filters import build_filter
from hotelfeed.feed.merger import FeedMerger


class BrokenPayments(PaymentSource):
    def fetch_events(self, filter):
        raise SourceUnavailableError("store offline", self.kind.value)


class SlowPayments(PaymentSource):
    def fetch_events(self, filter):
        time.sleep(0.5)
        return []


class GarbledActivity(ActivityLogSource):
    def fetch_events(self, filter):
        rows = super().fetch_events(filter)
        rows.append({"id": 999, "activity_datetime": at(23), "first_name": None, "last_name": None})
        return rows


def merger_for(engine, **kwargs):
    return FeedMerger([ActivityLogSource(engine), PaymentSource(engine)], **kwargs)


def test_payment_then_login(engine, staff):
    add_activity(engine, staff["ana"], at(9), "Login")
    add_payment(engine, staff["ana"], at(10, 15))

    result = asyncio.run(merger_for(engine).merge(build_filter(DAY)))
    assert [e.norm_type for e in result.events] == ["payment", "login"]
    assert result.count == 2
    assert result.empty is False
    assert result.summary == "Showing 2 activities for 2024-03-01"


def test_type_group_payment(engine, staff):
    add_activity(engine, staff["ana"], at(9), "Login")
    add_payment(engine, staff["ana"], at(10, 15))

    result = asyncio.run(merger_for(engine).merge(build_filter(DAY, type_group="payment")))
    assert result.count == 1
    assert result.events[0].display_type == "Payment"


def test_empty_day(engine, staff):
    result = asyncio.run(merger_for(engine).merge(build_filter(DAY)))
    assert result.events == []
    assert result.count == 0
    assert result.empty is True


def test_checkin_filter_excludes_checkout(engine, staff):
    add_activity(engine, staff["ana"], at(9), "Check-In")
    add_activity(engine, staff["ana"], at(11), "Check-Out")

    result = asyncio.run(merger_for(engine).merge(build_filter(DAY, type_group="checkin")))
    assert [e.norm_type for e in result.events] == ["checkin"]


def test_sorted_descending_and_idempotent(engine, staff):
    for hour, kind in [(8, "Login"), (14, "Check-Out"), (9, "Reservation"), (14, "Check-In")]:
        add_activity(engine, staff["ben"], at(hour), kind)
    add_payment(engine, staff["ana"], at(12))
    merger = merger_for(engine)

    first = asyncio.run(merger.merge(build_filter(DAY)))
    second = asyncio.run(merger.merge(build_filter(DAY)))
    stamps = [e.timestamp for e in first.events]
    assert stamps == sorted(stamps, reverse=True)
    assert first.events == second.events


def test_watermark_taken_before_type_filter(engine, staff):
    add_activity(engine, staff["ana"], at(9), "Login")
    add_payment(engine, staff["ana"], at(10, 15))

    result = asyncio.run(merger_for(engine).merge(build_filter(DAY, type_group="login")))
    assert result.count == 1
    assert result.watermark.last_activity_max == at(9)
    assert result.watermark.last_payment_max == at(10, 15)
    assert result.watermark.scope == (DAY, None)


def test_source_failure_fails_whole_merge(engine, staff):
    add_activity(engine, staff["ana"], at(9))
    merger = FeedMerger([ActivityLogSource(engine), BrokenPayments(engine)])

    with pytest.raises(AggregationError) as excinfo:
        asyncio.run(merger.merge(build_filter(DAY)))
    assert excinfo.value.source == "payment"


def test_source_timeout_is_a_failure(engine, staff):
    merger = FeedMerger([ActivityLogSource(engine), SlowPayments(engine)], timeout=0.05)
    with pytest.raises(AggregationError):
        asyncio.run(merger.merge(build_filter(DAY)))


def test_malformed_row_skipped(engine, staff):
    add_activity(engine, staff["ana"], at(9))
    merger = FeedMerger([GarbledActivity(engine), PaymentSource(engine)])

    result = asyncio.run(merger.merge(build_filter(DAY)))
    assert result.count == 1
    assert result.skipped_rows == 1


def test_merge_never_leaves_requested_day(engine, staff):
    add_activity(engine, staff["ana"], at(0, 0), "Login")
    add_activity(engine, staff["ana"], at(0, 0, day=DAY + dt.timedelta(days=1)), "Login")
    add_payment(engine, staff["ana"], at(23, 59))
    add_payment(engine, staff["ana"], at(23, 59, day=DAY - dt.timedelta(days=1)))

    result = asyncio.run(merger_for(engine).merge(build_filter(DAY)))
    assert [e.timestamp for e in result.events] == [at(23, 59), at(0, 0)]
    assert all(e.timestamp.date() == DAY for e in result.events)
    assert result.watermark.last_activity_max == at(0, 0)
    assert result.watermark.last_payment_max == at(23, 59)


def test_equal_timestamps_have_fixed_order(engine, staff):
    add_payment(engine, staff["ben"], at(10), reservation_id=7)
    first_login = add_activity(engine, staff["ana"], at(10), "Login", "first")
    second_login = add_activity(engine, staff["ben"], at(10), "Login", "second")
    assert first_login < second_login
    merger = merger_for(engine)

    runs = [asyncio.run(merger.merge(build_filter(DAY))) for _ in range(3)]
    for result in runs:
        assert [(e.source.value, e.description[:6]) for e in result.events] == [
            ("activity", "first"),
            ("activity", "second"),
            ("payment", "Paymen"),
        ]
