from datetime import datetime, timezone


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensures a datetime object is timezone-aware and in UTC.
    If input is naive, it assumes UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_rfc3339(dt: datetime) -> str:
    """
    Converts a datetime to an RFC3339 string in UTC with second precision
    and a 'Z' suffix, e.g. '2023-12-01T10:00:00Z'.
    """
    return ensure_utc(dt).replace(microsecond=0).isoformat().replace("+00:00", "Z")
