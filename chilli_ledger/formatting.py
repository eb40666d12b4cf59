"""Display formatting helpers (Indian number system, rupees, relative dates)."""
from datetime import date, datetime

from chilli_ledger.config import CURRENCY_SYMBOL


def _group_indian(digits: str) -> str:
    """Group an integer digit string as 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount) -> str:
    """Format an amount as rupees with two decimals, e.g. ₹1,23,456.78."""
    sign = "-" if amount < 0 and round(abs(amount), 2) != 0 else ""
    whole, fraction = f"{abs(amount):.2f}".split(".")
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(whole)}.{fraction}"


def format_number(value) -> str:
    """Format a number with Indian grouping and at most three decimals."""
    sign = "-" if value < 0 and round(abs(value), 3) != 0 else ""
    text = f"{abs(value):.3f}".rstrip("0").rstrip(".")
    whole, _, fraction = text.partition(".")
    grouped = _group_indian(whole)
    return f"{sign}{grouped}.{fraction}" if fraction else f"{sign}{grouped}"


def _plural(count, unit):
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def get_relative_time(value, now=None) -> str:
    """Describe a date relative to now: Today, Yesterday, 3 days ago, last week..."""
    now = now or date.today()
    if isinstance(now, datetime):
        now = now.date()
    if isinstance(value, datetime):
        value = value.date()
    elif isinstance(value, str):
        value = date.fromisoformat(value[:10])

    days = (now - value).days
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days == -1:
        return "Tomorrow"
    if days < 0:
        return f"in {_plural(-days, 'day')}"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        weeks = days // 7
        return "last week" if weeks == 1 else f"{weeks} weeks ago"
    if days < 365:
        months = days // 30
        return "last month" if months == 1 else f"{months} months ago"
    years = days // 365
    return "last year" if years == 1 else f"{years} years ago"
