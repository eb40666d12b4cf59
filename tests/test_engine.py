"""Tests for the LedgerEngine facade."""
import os
import sys
import unittest
from datetime import date

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from chilli_ledger.database import DatabaseManager
from chilli_ledger.engine import LedgerEngine
from chilli_ledger.exceptions import ValidationError, CustomerNotFoundError

AS_OF = date(2025, 6, 30)


class TestLedgerEngine(unittest.TestCase):

    def setUp(self):
        self.db = DatabaseManager(":memory:")
        self.engine = LedgerEngine(self.db)
        self.customer = self.engine.add_customer({'name': "Ravi", 'phone': "9876543210"})

    def tearDown(self):
        self.db.close()

    def test_add_customer_validates(self):
        with self.assertRaises(ValidationError):
            self.engine.add_customer({'name': "   "})
        self.assertEqual(len(self.db.get_customers()), 1)

    def test_update_customer(self):
        updated = self.engine.update_customer(self.customer.id, {'address': "Guntur"})
        self.assertEqual(updated.address, "Guntur")
        self.assertEqual(updated.phone, "9876543210")

    def test_update_missing_customer(self):
        with self.assertRaises(CustomerNotFoundError):
            self.engine.update_customer(999, {'name': "Nobody"})

    def test_delete_customer(self):
        self.engine.delete_customer(self.customer.id)
        self.assertIsNone(self.db.get_customer(self.customer.id))
        with self.assertRaises(CustomerNotFoundError):
            self.engine.delete_customer(self.customer.id)

    def test_add_loan(self):
        loan = self.engine.add_loan({'customer_id': self.customer.id, 'amount': "1000",
                                     'loan_date': "2025-01-01"})
        self.assertEqual(loan.amount, 1000.0)
        self.assertEqual(loan.interest_rate, 2.0)
        self.assertEqual(loan.customer.name, "Ravi")

    def test_invalid_loan_writes_nothing(self):
        with self.assertRaises(ValidationError) as ctx:
            self.engine.add_loan({'customer_id': self.customer.id, 'amount': "abc",
                                  'loan_date': "2025-01-01"})
        self.assertIn('amount', ctx.exception.errors)
        self.assertEqual(self.db.get_loans(), [])

    def test_unknown_customer_writes_nothing(self):
        with self.assertRaises(CustomerNotFoundError):
            self.engine.add_recovery({'customer_id': 999, 'amount': 10, 'recovery_date': "2025-01-01"})
        with self.assertRaises(CustomerNotFoundError):
            self.engine.add_chillies_transaction({'customer_id': 999, 'number_of_bags': 1,
                                                  'weight_kg': 1, 'market_rate': 1,
                                                  'transaction_date': "2025-01-01"})
        self.assertEqual(self.db.get_recoveries(), [])
        self.assertEqual(self.db.get_chillies_transactions(), [])

    def test_add_chillies_transaction(self):
        trade = self.engine.add_chillies_transaction({
            'customer_id': self.customer.id, 'number_of_bags': "10", 'weight_kg': "150",
            'market_rate': "20", 'transaction_date': "2025-03-01"})
        self.assertEqual(trade.total_earnings, 3450)
        self.assertEqual(trade.commission, 69.0)
        self.assertEqual(trade.service_charge, 290)
        self.assertEqual(trade.net_amount, 3091.0)

    def test_preview(self):
        preview = self.engine.preview_chillies_transaction(
            {'number_of_bags': "10", 'weight_kg': "150", 'market_rate': "20"})
        self.assertEqual(preview.total_charges, 359.0)
        self.assertIsNone(self.engine.preview_chillies_transaction(
            {'number_of_bags': "10", 'weight_kg': "", 'market_rate': "20"}))
        self.assertEqual(self.db.get_chillies_transactions(), [])

    def test_overflowing_trade_writes_nothing(self):
        data = {'customer_id': self.customer.id, 'number_of_bags': 1, 'weight_kg': 1e308,
                'market_rate': 10, 'transaction_date': "2025-03-01"}
        with self.assertRaises(ValidationError) as ctx:
            self.engine.add_chillies_transaction(data)
        self.assertIn('weight_kg', ctx.exception.errors)
        self.assertEqual(self.db.get_chillies_transactions(), [])
        self.assertIsNone(self.engine.preview_chillies_transaction(data))
        with self.assertRaises(ValidationError):
            self.engine.settle_chillies_transaction(data)

    def test_snapshot(self):
        self.engine.add_loan({'customer_id': self.customer.id, 'amount': 1000,
                              'loan_date': "2025-04-26"})
        self.engine.add_recovery({'customer_id': self.customer.id, 'amount': 500,
                                  'recovery_date': "2025-06-01"})
        snapshot = self.engine.load_snapshot(AS_OF)
        self.assertEqual(snapshot.as_of, AS_OF)
        self.assertEqual(len(snapshot.customers), 1)
        self.assertEqual(len(snapshot.loans), 1)
        self.assertEqual(len(snapshot.recoveries), 1)
        self.assertEqual(snapshot.stats.total_outstanding_loans, 540.0)
        self.assertEqual(self.engine.get_dashboard_stats(AS_OF), snapshot.stats)

    def test_customer_balance(self):
        self.engine.add_loan({'customer_id': self.customer.id, 'amount': 1000,
                              'loan_date': "2025-04-26"})
        self.assertEqual(self.engine.get_customer_balance(self.customer.id, AS_OF), 1040.0)
        with self.assertRaises(CustomerNotFoundError):
            self.engine.get_customer_balance(999, AS_OF)


if __name__ == '__main__':
    unittest.main()
