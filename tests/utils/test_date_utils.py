# tests/utils/test_date_utils.py

from datetime import datetime, timedelta, timezone

from memwatch.utils.date_utils import ensure_utc, to_rfc3339


def test_ensure_utc_assumes_naive_is_utc():
    dt = ensure_utc(datetime(2024, 5, 1, 12, 0, 0))
    assert dt.tzinfo == timezone.utc
    assert dt.hour == 12


def test_ensure_utc_converts_other_timezones():
    dt = ensure_utc(datetime(2024, 5, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2))))
    assert dt.hour == 12
    assert dt.tzinfo == timezone.utc


def test_to_rfc3339_uses_z_suffix_and_seconds():
    dt = datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)
    assert to_rfc3339(dt) == "2024-05-01T12:30:15Z"
