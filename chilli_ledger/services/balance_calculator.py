"""Customer balance calculation for ChilliLedger.

A customer's balance is the current value of all their loans minus
everything they have repaid. It is recomputed from the full collections
on every call.
"""
from chilli_ledger.config import BALANCE_EPSILON
from chilli_ledger.data_structures import StatusBadge
from .loan_calculator import calculate_loan_with_interest


def calculate_customer_balance(customer_id, loans, recoveries, as_of=None) -> float:
    """Net balance for one customer.

    Args:
        customer_id: ID of the customer.
        loans: All loans (any customer).
        recoveries: All recoveries (any customer).
        as_of: Evaluation date for interest accrual, defaults to today.

    Returns:
        sum(current loan values) - sum(recovery amounts). Positive means
        the customer owes money.
    """
    total_loans = sum(calculate_loan_with_interest(loan, as_of)
                      for loan in loans if loan.customer_id == customer_id)
    total_recoveries = sum(recovery.amount
                           for recovery in recoveries if recovery.customer_id == customer_id)
    return total_loans - total_recoveries


def calculate_customer_balances(customer_ids, loans, recoveries, as_of=None) -> dict:
    """Balances for many customers in one pass over loans and recoveries.

    Loans and recoveries whose customer is not in customer_ids are ignored.
    """
    balances = {customer_id: 0.0 for customer_id in customer_ids}
    for loan in loans:
        if loan.customer_id in balances:
            balances[loan.customer_id] += calculate_loan_with_interest(loan, as_of)
    for recovery in recoveries:
        if recovery.customer_id in balances:
            balances[recovery.customer_id] -= recovery.amount
    return balances


def get_balance_status(balance) -> StatusBadge:
    """Outstanding (owes), Credit (overpaid) or Clear (settled)."""
    if abs(balance) < BALANCE_EPSILON:
        return StatusBadge("Clear", "success")
    if balance > 0:
        return StatusBadge("Outstanding", "danger")
    return StatusBadge("Credit", "info")
