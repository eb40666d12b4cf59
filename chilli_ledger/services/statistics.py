"""Dashboard statistics and summary aggregation for ChilliLedger.

Every function takes complete collections and recomputes from scratch.
"""
from datetime import date

import pandas as pd

from chilli_ledger.config import BALANCE_EPSILON, MONTHLY_SUMMARY_LIMIT
from chilli_ledger.data_structures import (
    DashboardStats, LoanSummary, RecoverySummary, MonthlyTotal, ChilliesSummary
)
from .balance_calculator import calculate_customer_balances
from .loan_calculator import calculate_loan_with_interest


def compute_dashboard_stats(customers, loans, recoveries, transactions, as_of=None) -> DashboardStats:
    """Aggregate the headline dashboard figures.

    total_outstanding_loans only sums customers whose balance is Outstanding;
    a customer in credit (or Clear within BALANCE_EPSILON) contributes nothing
    rather than offsetting others.
    """
    balances = calculate_customer_balances([c.id for c in customers], loans, recoveries, as_of)
    return DashboardStats(
        total_customers=len(customers),
        total_outstanding_loans=sum(b for b in balances.values() if b >= BALANCE_EPSILON),
        total_commission=sum(t.commission for t in transactions),
        total_service_charges=sum(t.service_charge for t in transactions),
        total_chillies_traded=sum(t.weight_kg for t in transactions),
        customer_balances=balances,
    )


def summarize_loans(loans, as_of=None) -> LoanSummary:
    total_principal = sum(loan.amount for loan in loans)
    total_current_value = sum(calculate_loan_with_interest(loan, as_of) for loan in loans)
    return LoanSummary(
        count=len(loans),
        total_principal=total_principal,
        total_current_value=total_current_value,
        interest_earned=total_current_value - total_principal,
    )


def summarize_recoveries(recoveries, today=None, limit=MONTHLY_SUMMARY_LIMIT) -> RecoverySummary:
    """Totals for the recoveries screen.

    Args:
        recoveries: All recoveries.
        today: Date used for "today's recoveries", defaults to date.today().
        limit: Maximum number of months in the monthly breakdown.

    Returns:
        RecoverySummary with monthly totals, most recent month first.
    """
    today = today or date.today()
    todays = [r for r in recoveries if r.recovery_date == today]

    monthly = []
    if recoveries:
        df = pd.DataFrame({
            'month': [r.recovery_date.strftime("%Y-%m") for r in recoveries],
            'amount': [r.amount for r in recoveries],
        })
        grouped = df.groupby('month')['amount'].agg(['sum', 'count'])
        grouped = grouped.sort_index(ascending=False).head(limit)
        monthly = [MonthlyTotal(month=month, amount=float(row['sum']), count=int(row['count']))
                   for month, row in grouped.iterrows()]

    return RecoverySummary(
        total_recovered=sum(r.amount for r in recoveries),
        todays_count=len(todays),
        todays_total=sum(r.amount for r in todays),
        monthly=monthly,
    )


def summarize_chillies(transactions) -> ChilliesSummary:
    """Trading totals and averages.

    total_earnings is the operator's income (commission + service charges).
    Averages are 0 when there is nothing to average.
    """
    total_weight = sum(t.weight_kg for t in transactions)
    total_bags = sum(t.number_of_bags for t in transactions)
    total_commission = sum(t.commission for t in transactions)
    total_service_charges = sum(t.service_charge for t in transactions)
    return ChilliesSummary(
        total_weight=total_weight,
        total_bags=total_bags,
        total_commission=total_commission,
        total_service_charges=total_service_charges,
        total_earnings=total_commission + total_service_charges,
        count=len(transactions),
        average_weight_per_bag=total_weight / total_bags if total_bags else 0.0,
        average_market_rate=generate_stats([t.market_rate for t in transactions])['average'],
    )


def generate_stats(values) -> dict:
    """Sum, average, min, max and count of a list of numbers."""
    values = list(values)
    if not values:
        return {'sum': 0, 'average': 0, 'min': 0, 'max': 0, 'count': 0}
    total = sum(values)
    return {
        'sum': total,
        'average': total / len(values),
        'min': min(values),
        'max': max(values),
        'count': len(values),
    }
