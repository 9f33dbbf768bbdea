from datetime import datetime, timezone


def as_utc(moment: datetime) -> datetime:
    """Convert to UTC; naive datetimes are taken to already be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
