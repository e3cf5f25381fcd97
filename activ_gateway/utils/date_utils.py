"""Date manipulation utilities"""

from datetime import date, timedelta
from typing import Optional, Tuple


def days_ago(days: int, today: Optional[date] = None) -> str:
    """ISO date string for `days` days before today"""
    return ((today or date.today()) - timedelta(days=days)).isoformat()


def lookback_window(days: int, today: Optional[date] = None) -> Tuple[str, str]:
    """(start, end) ISO dates covering the last `days` days, today inclusive"""
    return days_ago(days, today), days_ago(0, today)
