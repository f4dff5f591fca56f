from datetime import datetime
from typing import Optional

from cafeteria.core.errors import InvalidInterval

# Формат времени в API: "2025-01-24 19:30:00"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_datetime(value: str, field: str = "value") -> datetime:
    try:
        return datetime.strptime(value, DATETIME_FORMAT)
    except (TypeError, ValueError):
        raise InvalidInterval(f"{field} must be a valid date in the format: yyyy-MM-dd HH:mm:ss")


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(DATETIME_FORMAT)


def validate_interval(start: Optional[datetime], end: Optional[datetime]) -> None:
    """Проверка start < end. Если одна из границ не задана, проверять нечего."""
    if start is not None and end is not None and start >= end:
        raise InvalidInterval("start_time must be before end_time")
