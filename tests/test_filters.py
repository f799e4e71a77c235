import datetime as dt

import pytest
from pydantic import ValidationError

from hotelfeed.core.errors import FilterValidationError
from hotelfeed.feed.filters import build_filter


def test_build_filter_parses_selector_values():
    f = build_filter("2024-03-01", 3, "Check-In")
    assert f.date == dt.date(2024, 3, 1)
    assert f.employee_id == 3
    assert f.type_group == "checkin"


@pytest.mark.parametrize("value", [None, "", "All", " any "])
def test_any_type_means_no_restriction(value):
    assert build_filter(dt.date(2024, 3, 1), type_group=value).type_group is None


@pytest.mark.parametrize("value", [None, "", "03/01/2024"])
def test_missing_or_bad_date_rejected(value):
    with pytest.raises(FilterValidationError):
        build_filter(value)


def test_bad_employee_id_rejected():
    with pytest.raises(FilterValidationError):
        build_filter("2024-03-01", employee_id=0)


def test_filter_state_is_immutable():
    f = build_filter("2024-03-01")
    with pytest.raises(ValidationError):
        f.employee_id = 5


def test_day_bounds_cover_one_calendar_day():
    start, end = build_filter("2024-03-01").day_bounds()
    assert start == dt.datetime(2024, 3, 1, 0, 0)
    assert end == dt.datetime(2024, 3, 2, 0, 0)


def test_scope_ignores_type_group():
    a = build_filter("2024-03-01", 1, "login")
    b = build_filter("2024-03-01", 1, "payment")
    assert a.scope == b.scope
