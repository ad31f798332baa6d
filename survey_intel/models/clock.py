from datetime import datetime, timezone


def utcnow() -> datetime:
    # Naive UTC: SQLite's DateTime column drops tzinfo anyway
    return datetime.now(tz=timezone.utc).replace(tzinfo=None)
