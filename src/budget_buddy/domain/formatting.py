import math
from datetime import date, datetime


def parse_calendar_date(value: str | date | datetime | None) -> date | None:
    """Parse ``value`` into a calendar date, or ``None`` when it cannot be read.

    Datetimes (and ISO datetime strings) are reduced to their date part so that
    comparisons never depend on the host timezone.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if not stripped:
        return None
    try:
        return date.fromisoformat(stripped[:10])
    except ValueError:
        return None


def format_display_date(value: str | date | datetime) -> str:
    parsed = parse_calendar_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_amount(amount: float) -> str:
    return f"{amount:.2f}"


def format_currency(amount: float | None, abbreviated: bool = False) -> str:
    if amount is None or math.isnan(amount):
        return "$0" if abbreviated else "$0.00"

    if abbreviated:
        if amount == 0:
            return "$0"
        if abs(amount) >= 1_000_000:
            return f"${amount / 1_000_000:.1f}M"
        if abs(amount) >= 1_000:
            return f"${amount / 1_000:.1f}k"
        return f"${amount:.0f}"

    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_duration(seconds: float) -> str:
    if seconds <= 0:
        return "0 ms"
    if seconds < 1:
        return f"{seconds * 1000:.1f} ms"
    return f"{seconds:.2f} s"
