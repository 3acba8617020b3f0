from datetime import datetime, timezone

import pytest

from src.payroll_office.payroll_office.common.datetime_utils import parse_optional_datetime, require_month
from src.payroll_office.payroll_office.core.exceptions import ValidationError


def test_offset_datetimes_become_naive_local():
    parsed = parse_optional_datetime("2024-04-01T10:00:00Z")

    assert parsed.tzinfo is None
    assert parsed == datetime(2024, 4, 1, 10, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)


def test_aware_datetime_objects_are_normalised_too():
    aware = datetime(2024, 4, 1, 15, 30, tzinfo=timezone.utc)

    assert parse_optional_datetime(aware).tzinfo is None


def test_plain_dates_and_blanks():
    assert parse_optional_datetime("2024-04-01") == datetime(2024, 4, 1)
    assert parse_optional_datetime("") is None
    assert parse_optional_datetime(None) is None


def test_garbage_is_rejected():
    with pytest.raises(ValidationError):
        parse_optional_datetime("first of april")


@pytest.mark.parametrize("month", ["2024-00", "24-04", "2024-4"])
def test_bad_months(month):
    with pytest.raises(ValidationError):
        require_month(month)
