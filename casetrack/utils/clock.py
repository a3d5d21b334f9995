from datetime import datetime, timezone


def utcnow() -> datetime:
    # Naive UTC, the form the DateTime columns round-trip through every backend
    return datetime.now(timezone.utc).replace(tzinfo=None)
