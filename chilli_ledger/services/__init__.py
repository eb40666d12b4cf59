"""Services package for ChilliLedger business calculations.

Pure functions over complete collections: loan interest accrual, customer
balances, chillies settlement and dashboard statistics.
"""

from .loan_calculator import (calculate_loan_with_interest, calculate_interest, days_elapsed,
                              interest_periods, get_loan_status)
from .balance_calculator import calculate_customer_balance, calculate_customer_balances, get_balance_status
from .settlement import calculate_chillies_transaction
from .statistics import (compute_dashboard_stats, summarize_loans, summarize_recoveries,
                         summarize_chillies, generate_stats)

__all__ = ['calculate_loan_with_interest', 'calculate_interest', 'days_elapsed', 'interest_periods',
           'get_loan_status', 'calculate_customer_balance', 'calculate_customer_balances',
           'get_balance_status', 'calculate_chillies_transaction', 'compute_dashboard_stats',
           'summarize_loans', 'summarize_recoveries', 'summarize_chillies', 'generate_stats']
