"""Loan interest accrual for ChilliLedger.

Loans earn simple interest for every whole period of INTEREST_PERIOD_DAYS
calendar days since the loan date. Nothing here is stored; current values
are always derived from the principal, the rate and an "as of" date.
"""
from datetime import date, datetime

from chilli_ledger.config import INTEREST_PERIOD_DAYS, LOAN_DUE_SOON_DAYS, LOAN_OVERDUE_DAYS
from chilli_ledger.data_structures import StatusBadge


def _to_date(value):
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def days_elapsed(loan_date, as_of=None) -> int:
    """Whole calendar days from loan_date to as_of (negative if as_of is earlier)."""
    return (_to_date(as_of) - _to_date(loan_date)).days


def interest_periods(loan_date, as_of=None) -> int:
    """Number of completed interest periods.

    Floor division, so a loan dated after as_of yields a negative count.
    """
    return days_elapsed(loan_date, as_of) // INTEREST_PERIOD_DAYS


def calculate_interest(principal, interest_rate, periods) -> float:
    return principal * (interest_rate / 100) * periods


def calculate_loan_with_interest(loan, as_of=None) -> float:
    """Current value of a loan: principal plus interest for whole periods.

    Args:
        loan: Loan record (amount, interest_rate, loan_date).
        as_of: Evaluation date, defaults to today.

    Returns:
        principal + principal * rate/100 * periods
    """
    periods = interest_periods(loan.loan_date, as_of)
    return loan.amount + calculate_interest(loan.amount, loan.interest_rate, periods)


def get_loan_status(loan, as_of=None) -> StatusBadge:
    """Classify a loan by age: Overdue after 90 days, Due Soon after 60."""
    age = days_elapsed(loan.loan_date, as_of)
    if age > LOAN_OVERDUE_DAYS:
        return StatusBadge("Overdue", "danger")
    elif age > LOAN_DUE_SOON_DAYS:
        return StatusBadge("Due Soon", "warning")
    return StatusBadge("Active", "success")
