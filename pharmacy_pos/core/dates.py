from datetime import datetime, timedelta, timezone
from typing import Tuple


def day_bounds(days_ago: int = 0) -> Tuple[datetime, datetime]:
    """[start, end) of a UTC calendar day, `days_ago` days before today"""
    now = datetime.now(timezone.utc)
    start = now.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=days_ago)
    return start, start + timedelta(days=1)
