"""Tests for DatabaseManager persistence, enrichment and transaction safety."""
import os
import sys
import unittest
from datetime import date

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from chilli_ledger.database import DatabaseManager
from chilli_ledger.exceptions import DatabaseError, TransactionError
from chilli_ledger.services.settlement import calculate_chillies_transaction
from chilli_ledger.theme import ThemeManager


class TestCustomers(unittest.TestCase):

    def setUp(self):
        self.db = DatabaseManager(":memory:")

    def tearDown(self):
        self.db.close()

    def test_create_and_get(self):
        customer = self.db.create_customer("Ravi", "9876543210", "Guntur")
        self.assertIsNotNone(customer.id)
        self.assertEqual(customer.name, "Ravi")
        self.assertIsNotNone(customer.created_at)
        self.assertEqual(self.db.get_customer(customer.id), customer)

    def test_missing_customer(self):
        self.assertIsNone(self.db.get_customer(999))

    def test_newest_first(self):
        first = self.db.create_customer("First")
        second = self.db.create_customer("Second")
        self.assertEqual([c.id for c in self.db.get_customers()], [second.id, first.id])

    def test_update(self):
        customer = self.db.create_customer("Ravi", "1")
        updated = self.db.update_customer(customer.id, phone="2", address="Guntur")
        self.assertEqual(updated.name, "Ravi")
        self.assertEqual(updated.phone, "2")
        self.assertEqual(updated.address, "Guntur")

    def test_update_rejects_unknown_fields(self):
        customer = self.db.create_customer("Ravi")
        with self.assertRaises(ValueError):
            self.db.update_customer(customer.id, created_at="2000-01-01")

    def test_update_missing_customer(self):
        self.assertIsNone(self.db.update_customer(999, name="Nobody"))

    def test_delete(self):
        customer = self.db.create_customer("Ravi")
        self.assertTrue(self.db.delete_customer(customer.id))
        self.assertFalse(self.db.delete_customer(customer.id))
        self.assertEqual(self.db.get_customers(), [])


class TestLedgerRecords(unittest.TestCase):

    def setUp(self):
        self.db = DatabaseManager(":memory:")
        self.customer = self.db.create_customer("Ravi")

    def tearDown(self):
        self.db.close()

    def test_loan_is_enriched(self):
        loan = self.db.create_loan(self.customer.id, 1000.0, 2.0, date(2025, 1, 1))
        self.assertEqual(loan.loan_date, date(2025, 1, 1))
        self.assertEqual(loan.customer.id, self.customer.id)
        self.assertEqual(loan.customer.name, "Ravi")

    def test_loan_defaults(self):
        loan = self.db.create_loan(self.customer.id, 500.0)
        self.assertEqual(loan.interest_rate, 2.0)
        self.assertEqual(loan.loan_date, date.today())

    def test_records_survive_customer_delete(self):
        self.db.create_loan(self.customer.id, 1000.0, 2.0, date(2025, 1, 1))
        self.db.create_recovery(self.customer.id, 100.0, date(2025, 1, 5))
        self.db.delete_customer(self.customer.id)
        loan = self.db.get_loans()[0]
        recovery = self.db.get_recoveries()[0]
        self.assertIsNone(loan.customer)
        self.assertIsNone(loan.customer_id)
        self.assertIsNone(recovery.customer)

    def test_by_customer(self):
        other = self.db.create_customer("Lakshmi")
        self.db.create_loan(self.customer.id, 1000.0, 2.0, date(2025, 1, 1))
        self.db.create_loan(other.id, 200.0, 2.0, date(2025, 1, 1))
        self.db.create_recovery(other.id, 50.0, date(2025, 1, 2))
        self.assertEqual([l.amount for l in self.db.get_loans_by_customer(other.id)], [200.0])
        self.assertEqual(len(self.db.get_recoveries_by_customer(self.customer.id)), 0)
        self.assertEqual(len(self.db.get_recoveries_by_customer(other.id)), 1)

    def test_newest_first(self):
        self.db.create_recovery(self.customer.id, 1.0, date(2025, 1, 2))
        self.db.create_recovery(self.customer.id, 2.0, date(2025, 1, 1))
        self.assertEqual([r.amount for r in self.db.get_recoveries()], [2.0, 1.0])

    def test_settlement_stored_verbatim(self):
        settlement = calculate_chillies_transaction(7, 123.45, 17.3)
        trade = self.db.create_chillies_transaction(self.customer.id, 7, 123.45, 17.3,
                                                    "2025-03-01", settlement)
        stored = self.db.get_chillies_transactions()[0]
        self.assertEqual(stored.settlement, settlement)
        self.assertEqual(trade.transaction_date, date(2025, 3, 1))
        self.assertEqual(stored.customer.name, "Ravi")
        self.assertEqual(len(self.db.get_chillies_transactions_by_customer(self.customer.id)), 1)

    def test_check_constraint_raises_database_error(self):
        with self.assertRaises(DatabaseError):
            self.db.create_loan(self.customer.id, -5.0, 2.0, date(2025, 1, 1))
        self.assertEqual(self.db.get_loans(), [])

    def test_collection_df(self):
        self.db.create_loan(self.customer.id, 1000.0, 2.0, date(2025, 1, 1))
        df = self.db.get_collection_df("loans")
        self.assertEqual(len(df), 1)
        self.assertIn("interest_rate", df.columns)
        with self.assertRaises(ValueError):
            self.db.get_collection_df("users")


class TestTransactionSafety(unittest.TestCase):

    def setUp(self):
        self.db = DatabaseManager(":memory:")

    def tearDown(self):
        self.db.close()

    def test_rollback_on_sqlite_error(self):
        with self.assertRaises(TransactionError):
            with self.db.transaction():
                self.db.conn.execute("INSERT INTO customers (name, created_at) VALUES ('A', 'x')")
                self.db.conn.execute("INSERT INTO customers (name) VALUES ('B')")
        self.assertEqual(self.db.get_customers(), [])

    def test_rollback_on_other_error(self):
        with self.assertRaises(RuntimeError):
            with self.db.transaction():
                self.db.conn.execute("INSERT INTO customers (name, created_at) VALUES ('A', 'x')")
                raise RuntimeError("boom")
        self.assertEqual(self.db.get_customers(), [])

    def test_context_manager(self):
        with DatabaseManager(":memory:") as db:
            db.create_customer("Context Test")
            self.assertEqual(len(db.get_customers()), 1)
        self.assertTrue(db._closed)

    def test_close_is_idempotent(self):
        db = DatabaseManager(":memory:")
        db.close()
        db.close()
        self.assertTrue(db._closed)


class TestSettings(unittest.TestCase):

    def setUp(self):
        self.db = DatabaseManager(":memory:")

    def tearDown(self):
        self.db.close()

    def test_settings(self):
        self.assertEqual(self.db.get_setting("missing", "x"), "x")
        self.db.set_setting("app_theme", "dark")
        self.db.set_setting("app_theme", "light")
        self.assertEqual(self.db.get_setting("app_theme"), "light")

    def test_theme_persists(self):
        theme = ThemeManager(self.db)
        self.assertFalse(theme.is_dark)
        theme.toggle_theme()
        self.assertTrue(ThemeManager(self.db).is_dark)
        self.assertEqual(theme.get_color("no_such_key"), "#ff0000")


if __name__ == '__main__':
    unittest.main()
