from datetime import date, datetime


def month_key(day: date) -> str:
    """Zero-padded YYYY-MM key of the month containing day."""
    return f"{day.year:04d}-{day.month:02d}"


def current_month_key() -> str:
    return month_key(date.today())


def parse_month_key(key: str) -> date:
    """Return the first day of a YYYY-MM month key. Raises ValueError."""
    try:
        parsed = datetime.strptime(key, "%Y-%m")
    except (TypeError, ValueError):
        raise ValueError(f"'{key}' is not a YYYY-MM month")
    return parsed.date()


def month_bounds(key: str) -> tuple[datetime, datetime]:
    """[start, end) datetimes covering the given month."""
    first = parse_month_key(key)
    if first.month == 12:
        following = date(first.year + 1, 1, 1)
    else:
        following = date(first.year, first.month + 1, 1)
    return (
        datetime(first.year, first.month, 1),
        datetime(following.year, following.month, 1),
    )
