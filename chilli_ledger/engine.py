"""Business logic engine for ChilliLedger.

This module provides the LedgerEngine class, a facade that validates input,
runs the calculation services and persists through DatabaseManager. Both the
HTTP API and the desktop window go through it.

Service modules:
    - services.loan_calculator: interest accrual
    - services.balance_calculator: customer balances
    - services.settlement: chillies trade settlement
    - services.statistics: dashboard aggregation
"""
import logging
from datetime import date

from chilli_ledger.data_structures import LedgerSnapshot
from chilli_ledger.exceptions import CustomerNotFoundError, ValidationError
from chilli_ledger.services import (
    calculate_chillies_transaction, calculate_customer_balance, compute_dashboard_stats
)
from chilli_ledger.validation import (
    validate_customer_payload, validate_customer_updates, validate_loan_payload,
    validate_recovery_payload, validate_chillies_payload, check_settlement
)

log = logging.getLogger(__name__)


class LedgerEngine:
    """Handles business logic, interfacing with DatabaseManager.

    Every add_* method validates its payload completely before touching the
    database, so a ValidationError always means nothing was written.

    Attributes:
        db: DatabaseManager instance for data persistence.
    """

    def __init__(self, db_manager):
        self.db = db_manager

    def _require_customer(self, customer_id):
        customer = self.db.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer

    # Customers
    def add_customer(self, data):
        customer = validate_customer_payload(data)
        return self.db.create_customer(customer.name, customer.phone, customer.address)

    def update_customer(self, customer_id, data):
        """Apply a partial update.

        Raises:
            CustomerNotFoundError: If the customer doesn't exist.
        """
        updates = validate_customer_updates(data)
        self._require_customer(customer_id)
        return self.db.update_customer(customer_id, **updates)

    def delete_customer(self, customer_id):
        if not self.db.delete_customer(customer_id):
            raise CustomerNotFoundError(customer_id)
        log.info("Deleted customer %s", customer_id)

    # Loans, recoveries and trades
    def add_loan(self, data):
        loan = validate_loan_payload(data)
        self._require_customer(loan.customer_id)
        return self.db.create_loan(loan.customer_id, loan.amount, loan.interest_rate, loan.loan_date)

    def add_recovery(self, data):
        recovery = validate_recovery_payload(data)
        self._require_customer(recovery.customer_id)
        return self.db.create_recovery(recovery.customer_id, recovery.amount, recovery.recovery_date)

    def add_chillies_transaction(self, data):
        """Validate a trade, settle it once and store the derived fields."""
        trade = validate_chillies_payload(data)
        self._require_customer(trade.customer_id)
        settlement = self._settle(trade)
        return self.db.create_chillies_transaction(
            trade.customer_id, trade.number_of_bags, trade.weight_kg, trade.market_rate,
            trade.transaction_date, settlement)

    @staticmethod
    def _settle(trade):
        return check_settlement(calculate_chillies_transaction(
            trade.number_of_bags, trade.weight_kg, trade.market_rate))

    def settle_chillies_transaction(self, data):
        """Settlement of an unsaved trade; customer and date are not required.

        Raises:
            ValidationError: If bags, weight or rate are invalid, or the
                settlement overflows.
        """
        return self._settle(validate_chillies_payload(data, require_customer=False, require_date=False))

    def preview_chillies_transaction(self, data):
        """Settlement for a trade being typed in, or None while inputs are incomplete or invalid."""
        try:
            return self.settle_chillies_transaction(data)
        except ValidationError:
            return None

    # Reads
    def load_snapshot(self, as_of=None) -> LedgerSnapshot:
        """Reload every collection and recompute the statistics from scratch."""
        as_of = as_of or date.today()
        customers = self.db.get_customers()
        loans = self.db.get_loans()
        recoveries = self.db.get_recoveries()
        transactions = self.db.get_chillies_transactions()
        stats = compute_dashboard_stats(customers, loans, recoveries, transactions, as_of)
        return LedgerSnapshot(as_of=as_of, customers=customers, loans=loans,
                              recoveries=recoveries, transactions=transactions, stats=stats)

    def get_dashboard_stats(self, as_of=None):
        return self.load_snapshot(as_of).stats

    def get_customer_balance(self, customer_id, as_of=None) -> float:
        self._require_customer(customer_id)
        return calculate_customer_balance(customer_id,
                                          self.db.get_loans_by_customer(customer_id),
                                          self.db.get_recoveries_by_customer(customer_id),
                                          as_of)
