"""Tests for loan interest accrual and loan status."""
import os
import sys
import unittest
from datetime import date, datetime, timedelta

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from chilli_ledger.data_structures import Loan
from chilli_ledger.services.loan_calculator import (
    calculate_loan_with_interest, days_elapsed, interest_periods, get_loan_status
)


def make_loan(amount=1000.0, rate=2.0, loan_date=date(2025, 1, 1)):
    return Loan(id=1, customer_id=1, amount=amount, interest_rate=rate, loan_date=loan_date)


class TestInterestAccrual(unittest.TestCase):

    def test_same_day_is_principal(self):
        for amount in (1.0, 1000.0, 2500.75, 99999.99):
            loan = make_loan(amount=amount)
            self.assertEqual(calculate_loan_with_interest(loan, loan.loan_date), amount)

    def test_no_interest_in_first_incomplete_period(self):
        loan = make_loan()
        self.assertEqual(calculate_loan_with_interest(loan, loan.loan_date + timedelta(days=29)), 1000.0)

    def test_one_full_period(self):
        for amount, rate in ((1000.0, 2.0), (2500.0, 3.5), (750.0, 1.25)):
            loan = make_loan(amount=amount, rate=rate)
            value = calculate_loan_with_interest(loan, loan.loan_date + timedelta(days=30))
            self.assertAlmostEqual(value, amount * (1 + rate / 100), places=9)

    def test_interest_is_simple_not_compound(self):
        loan = make_loan()
        # 95 days -> 3 whole periods -> 1000 + 3 * 20
        self.assertEqual(calculate_loan_with_interest(loan, date(2025, 4, 6)), 1060.0)

    def test_datetime_as_of_uses_calendar_date(self):
        loan = make_loan()
        as_of = datetime(2025, 1, 31, 23, 59)
        self.assertEqual(days_elapsed(loan.loan_date, as_of), 30)
        self.assertEqual(calculate_loan_with_interest(loan, as_of), 1020.0)

    def test_defaults_to_today(self):
        loan = make_loan(loan_date=date.today())
        self.assertEqual(calculate_loan_with_interest(loan), 1000.0)

    def test_future_dated_loan_gives_negative_interest(self):
        """A loan dated after the evaluation date floors to a negative period count."""
        loan = make_loan(loan_date=date(2025, 3, 1))
        as_of = date(2025, 2, 28)
        self.assertEqual(days_elapsed(loan.loan_date, as_of), -1)
        self.assertEqual(interest_periods(loan.loan_date, as_of), -1)
        self.assertEqual(calculate_loan_with_interest(loan, as_of), 980.0)

    def test_repeated_calls_are_identical(self):
        loan = make_loan(amount=1234.56, rate=2.3)
        as_of = date(2025, 6, 15)
        self.assertEqual(calculate_loan_with_interest(loan, as_of),
                         calculate_loan_with_interest(loan, as_of))


class TestLoanStatus(unittest.TestCase):

    def test_status_thresholds(self):
        loan = make_loan()
        self.assertEqual(get_loan_status(loan, loan.loan_date + timedelta(days=60)).status, "Active")
        self.assertEqual(get_loan_status(loan, loan.loan_date + timedelta(days=61)).status, "Due Soon")
        self.assertEqual(get_loan_status(loan, loan.loan_date + timedelta(days=90)).status, "Due Soon")
        self.assertEqual(get_loan_status(loan, loan.loan_date + timedelta(days=91)).status, "Overdue")

    def test_status_colors(self):
        loan = make_loan()
        self.assertEqual(get_loan_status(loan, loan.loan_date).color, "success")
        self.assertEqual(get_loan_status(loan, loan.loan_date + timedelta(days=100)).color, "danger")


if __name__ == '__main__':
    unittest.main()
