"""Tests for the screen state store, selectors and load/mutate effects."""
import os
import sys
import unittest
from datetime import date
from unittest.mock import MagicMock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from chilli_ledger.app_state import (
    AppState, Store, reduce, LoadStarted, DataLoaded, LoadFailed, ErrorRaised, ErrorDismissed,
    TabSelected, SearchChanged, LOAD_ERROR_MESSAGE, UNEXPECTED_ERROR_MESSAGE, filtered_customers, customer_name,
    refresh, perform
)
from chilli_ledger.data_structures import Customer
from chilli_ledger.database import DatabaseManager
from chilli_ledger.engine import LedgerEngine
from chilli_ledger.exceptions import DatabaseError

AS_OF = date(2025, 6, 30)


class TestReducer(unittest.TestCase):

    def test_load_cycle(self):
        state = reduce(AppState(error="old"), LoadStarted())
        self.assertTrue(state.loading)
        self.assertIsNone(state.error)
        state = reduce(state, LoadFailed())
        self.assertFalse(state.loading)
        self.assertEqual(state.error, LOAD_ERROR_MESSAGE)

    def test_reduce_does_not_mutate(self):
        original = AppState()
        new = reduce(original, TabSelected("loans"))
        self.assertEqual(original.active_tab, "dashboard")
        self.assertEqual(new.active_tab, "loans")

    def test_unknown_tab(self):
        with self.assertRaises(ValueError):
            reduce(AppState(), TabSelected("settings"))

    def test_unknown_action(self):
        with self.assertRaises(TypeError):
            reduce(AppState(), "refresh")

    def test_errors(self):
        state = reduce(AppState(), ErrorRaised("Amount must be greater than 0"))
        self.assertEqual(state.error, "Amount must be greater than 0")
        self.assertIsNone(reduce(state, ErrorDismissed()).error)


class TestStore(unittest.TestCase):

    def test_subscribe_and_unsubscribe(self):
        store = Store()
        seen = []
        unsubscribe = store.subscribe(seen.append)
        store.dispatch(SearchChanged("ra"))
        unsubscribe()
        store.dispatch(SearchChanged("la"))
        self.assertEqual([s.search_term for s in seen], ["ra"])
        self.assertEqual(store.state.search_term, "la")
        unsubscribe()


class TestSelectors(unittest.TestCase):

    def setUp(self):
        self.state = AppState(customers=(Customer(1, "Ravi Kumar", "9876543210"),
                                         Customer(2, "Lakshmi", None)))

    def test_filter_by_name(self):
        state = reduce(self.state, SearchChanged("ravi"))
        self.assertEqual([c.id for c in filtered_customers(state)], [1])

    def test_filter_by_phone(self):
        state = reduce(self.state, SearchChanged("6543"))
        self.assertEqual([c.id for c in filtered_customers(state)], [1])

    def test_blank_search(self):
        state = reduce(self.state, SearchChanged("  "))
        self.assertEqual(len(filtered_customers(state)), 2)

    def test_customer_name(self):
        self.assertEqual(customer_name(self.state, 2), "Lakshmi")
        self.assertEqual(customer_name(self.state, 3), "Unknown Customer")


class TestEffects(unittest.TestCase):

    def setUp(self):
        self.db = DatabaseManager(":memory:")
        self.engine = LedgerEngine(self.db)
        self.store = Store()
        self.customer = self.engine.add_customer({'name': "Ravi"})

    def tearDown(self):
        self.db.close()

    def test_refresh(self):
        self.assertTrue(refresh(self.store, self.engine, AS_OF))
        state = self.store.state
        self.assertFalse(state.loading)
        self.assertEqual(state.as_of, AS_OF)
        self.assertEqual(len(state.customers), 1)
        self.assertEqual(state.stats.total_customers, 1)

    def test_refresh_failure(self):
        engine = MagicMock()
        engine.load_snapshot.side_effect = DatabaseError("disk I/O error")
        self.assertFalse(refresh(self.store, engine))
        self.assertEqual(self.store.state.error, LOAD_ERROR_MESSAGE)
        self.assertFalse(self.store.state.loading)

    def test_perform_reloads(self):
        loan = perform(self.store, self.engine, self.engine.add_loan,
                       {'customer_id': self.customer.id, 'amount': 1000, 'loan_date': "2025-04-26"},
                       as_of=AS_OF)
        self.assertIsNotNone(loan)
        self.assertEqual(len(self.store.state.loans), 1)
        self.assertEqual(self.store.state.stats.total_outstanding_loans, 1040.0)

    def test_perform_validation_error(self):
        result = perform(self.store, self.engine, self.engine.add_loan,
                         {'customer_id': self.customer.id, 'amount': "0", 'loan_date': "2025-04-26"})
        self.assertIsNone(result)
        self.assertEqual(self.store.state.error, "Amount must be greater than 0")
        self.assertEqual(self.db.get_loans(), [])

    def test_perform_storage_error(self):
        operation = MagicMock(side_effect=DatabaseError("locked"))
        self.assertIsNone(perform(self.store, self.engine, operation, {}))
        self.assertEqual(self.store.state.error, "The operation failed. Please try again.")

    def test_perform_unexpected_error(self):
        operation = MagicMock(side_effect=OverflowError("Python int too large to convert to SQLite INTEGER"))
        self.assertIsNone(perform(self.store, None, operation, {}))
        self.assertEqual(self.store.state.error, UNEXPECTED_ERROR_MESSAGE)
        self.assertNotIn("SQLite", self.store.state.error)

    def test_refresh_unexpected_error(self):
        engine = MagicMock()
        engine.load_snapshot.side_effect = RuntimeError("boom")
        self.assertFalse(refresh(self.store, engine))
        self.assertEqual(self.store.state.error, LOAD_ERROR_MESSAGE)
        self.assertFalse(self.store.state.loading)


if __name__ == '__main__':
    unittest.main()
