"""
Helper utilities
"""
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple
import secrets
import string

from dateutil.relativedelta import relativedelta

# Same alphabet as the public shipment / payment references printed on receipts
PUBLIC_ID_ALPHABET = string.digits + string.ascii_uppercase
PUBLIC_ID_LENGTH = 10


def generate_public_id(prefix: str, length: int = PUBLIC_ID_LENGTH) -> str:
    """Generate a human-readable reference such as ``SHP7Q2K9ZC1MD``"""
    return prefix + "".join(secrets.choice(PUBLIC_ID_ALPHABET) for _ in range(length))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safely divide two numbers"""
    try:
        return numerator / denominator if denominator != 0 else default
    except (TypeError, ZeroDivisionError):
        return default


def isoformat(value: Optional[datetime | date]) -> Optional[str]:
    """
    ISO-8601 string for a datetime/date, ``None`` passes through.

    Datetimes are stored as naive UTC; they go out with a ``Z`` suffix.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.isoformat() + "Z"
    return value.isoformat()


def month_start(value: datetime) -> datetime:
    """Midnight on the first day of ``value``'s month"""
    return datetime(value.year, value.month, 1)


def trailing_months(months: int, now: Optional[datetime] = None) -> List[Tuple[int, int]]:
    """
    (year, month) pairs for the trailing window ending with the current month.

    trailing_months(3, datetime(2026, 2, 10)) -> [(2025, 12), (2026, 1), (2026, 2)]
    """
    now = now or datetime.utcnow()
    first = month_start(now) - relativedelta(months=months - 1)
    window = []
    for i in range(months):
        d = first + relativedelta(months=i)
        window.append((d.year, d.month))
    return window


def month_label(year: int, month: int) -> str:
    """Short month name used as the chart axis label (``Jan``)"""
    return date(year, month, 1).strftime("%b")


def format_currency(amount: float, currency: str = "KSh") -> str:
    """Format amount as currency"""
    return f"{currency} {amount:,.2f}"
