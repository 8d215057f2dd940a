from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now, matching the timezone-less DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
