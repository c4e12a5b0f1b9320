from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.salon_billing.salon_billing.common.datetime_utils import parse_iso_datetime
from src.salon_billing.salon_billing.common.validators import normalize_phone, optional_datetime, require_number
from src.salon_billing.salon_billing.core.exceptions import ValidationError


@pytest.mark.parametrize("value", ["nan", "inf", "-Infinity", float("nan"), float("inf")])
def test_require_number_rejects_non_finite(value):
    with pytest.raises(ValidationError):
        require_number(value, "subtotal")


def test_require_number_accepts_numeric_strings():
    assert require_number("12.5", "subtotal", minimum=0) == 12.5


def test_offset_datetimes_become_local_time():
    expected = datetime(2026, 3, 15, 5, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)

    assert parse_iso_datetime("2026-03-15T10:00+05:00") == expected
    assert parse_iso_datetime("2026-03-15T05:00:00Z") == expected


def test_naive_datetimes_are_kept_as_is():
    assert parse_iso_datetime("2026-03-15T10:00:00") == datetime(2026, 3, 15, 10, 0)
    assert parse_iso_datetime("") is None


def test_optional_datetime_rejects_malformed_values():
    with pytest.raises(ValidationError):
        optional_datetime("tomorrow", "scheduledFor")
    assert optional_datetime(None, "scheduledFor") is None


def test_normalize_phone_strips_punctuation():
    assert normalize_phone("+92 (300) 123-4567") == "923001234567"
