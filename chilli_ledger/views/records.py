"""Table views for the customer, loan, recovery and chillies tabs."""
from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QLineEdit,
                             QTableWidget, QTableWidgetItem, QHeaderView)

from ..app_state import filtered_customers, customer_name
from ..formatting import format_currency, format_number, get_relative_time
from ..services import (calculate_loan_with_interest, get_loan_status, get_balance_status,
                        summarize_loans, summarize_recoveries, summarize_chillies)


class RecordsView(QWidget):
    """Title bar with an add button, a summary line and a read-only table.

    Attributes:
        columns: Sequence of (header, getter) pairs; getter maps
            (record, state) to the cell text.
    """

    title = ""
    add_label = "Add"
    columns = ()

    def __init__(self, on_add=None, searchable=False, on_search=None, actions=()):
        super().__init__()
        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)

        header = QHBoxLayout()
        title = QLabel(self.title)
        title.setStyleSheet("font-size: 20px; font-weight: 700;")
        header.addWidget(title)
        header.addStretch()
        self.summary_label = QLabel()
        header.addWidget(self.summary_label)
        self.add_btn = QPushButton(self.add_label)
        if on_add:
            self.add_btn.clicked.connect(on_add)
        header.addWidget(self.add_btn)
        for label, callback in actions:
            btn = QPushButton(label)
            btn.clicked.connect(callback)
            header.addWidget(btn)
        layout.addLayout(header)

        self.search_input = None
        if searchable:
            self.search_input = QLineEdit()
            self.search_input.setPlaceholderText("Search by name or phone...")
            if on_search:
                self.search_input.textChanged.connect(on_search)
            layout.addWidget(self.search_input)

        self.table = QTableWidget(0, len(self.columns))
        self.table.setHorizontalHeaderLabels([header for header, _ in self.columns])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.table.verticalHeader().setVisible(False)
        layout.addWidget(self.table)

    def records(self, state):
        raise NotImplementedError

    def summary(self, state):
        return ""

    def render(self, state):
        rows = self.records(state)
        self.summary_label.setText(self.summary(state))
        self.table.setRowCount(len(rows))
        for r, record in enumerate(rows):
            for c, (_, getter) in enumerate(self.columns):
                self.table.setItem(r, c, QTableWidgetItem(getter(record, state)))

    def selected_record(self, state):
        """The record on the selected row, or None."""
        indexes = self.table.selectionModel().selectedRows()
        rows = self.records(state)
        if not indexes or indexes[0].row() >= len(rows):
            return None
        return rows[indexes[0].row()]


class CustomersView(RecordsView):
    title = "Customers"
    add_label = "Add Customer"
    columns = (
        ("Name", lambda c, s: c.name),
        ("Phone", lambda c, s: c.phone or "-"),
        ("Address", lambda c, s: c.address or "-"),
        ("Balance", lambda c, s: format_currency(s.stats.customer_balances.get(c.id, 0.0))),
        ("Status", lambda c, s: get_balance_status(s.stats.customer_balances.get(c.id, 0.0)).status),
    )

    def records(self, state):
        return filtered_customers(state)

    def summary(self, state):
        return f"Customers List ({len(filtered_customers(state))})"


class LoansView(RecordsView):
    title = "Loan Management"
    add_label = "Add Loan"
    columns = (
        ("Customer", lambda l, s: customer_name(s, l.customer_id)),
        ("Principal", lambda l, s: format_currency(l.amount)),
        ("Rate", lambda l, s: f"{format_number(l.interest_rate)}% / 30 days"),
        ("Loan Date", lambda l, s: l.loan_date.isoformat()),
        ("Current Value", lambda l, s: format_currency(calculate_loan_with_interest(l, s.as_of))),
        ("Status", lambda l, s: get_loan_status(l, s.as_of).status),
    )

    def records(self, state):
        return list(state.loans)

    def summary(self, state):
        totals = summarize_loans(state.loans, state.as_of)
        return (f"Total Active Loans: {format_currency(totals.total_current_value)} | "
                f"Interest Earned: {format_currency(totals.interest_earned)}")


class RecoveriesView(RecordsView):
    title = "Recovery Management"
    add_label = "Record Recovery"
    columns = (
        ("Customer", lambda r, s: customer_name(s, r.customer_id)),
        ("Amount", lambda r, s: format_currency(r.amount)),
        ("Date", lambda r, s: r.recovery_date.isoformat()),
        ("When", lambda r, s: get_relative_time(r.recovery_date, s.as_of)),
    )

    def records(self, state):
        return list(state.recoveries)

    def summary(self, state):
        totals = summarize_recoveries(state.recoveries, state.as_of)
        return (f"Total: {format_currency(totals.total_recovered)} | "
                f"Today's Recoveries: {format_currency(totals.todays_total)}")


class ChilliesView(RecordsView):
    title = "Chillies Trading"
    add_label = "Add Transaction"
    columns = (
        ("Customer", lambda t, s: customer_name(s, t.customer_id)),
        ("Date", lambda t, s: t.transaction_date.isoformat()),
        ("Bags", lambda t, s: str(t.number_of_bags)),
        ("Weight (kg)", lambda t, s: format_number(t.weight_kg)),
        ("Rate", lambda t, s: format_currency(t.market_rate)),
        ("Earnings", lambda t, s: format_currency(t.total_earnings)),
        ("Charges", lambda t, s: format_currency(t.total_charges)),
        ("Net Amount", lambda t, s: format_currency(t.net_amount)),
    )

    def records(self, state):
        return list(state.transactions)

    def summary(self, state):
        totals = summarize_chillies(state.transactions)
        return (f"Total Earnings: {format_currency(totals.total_earnings)} | "
                f"Average per bag: {format_number(totals.average_weight_per_bag)} kg | "
                f"Average market rate: {format_currency(totals.average_market_rate)}/kg | "
                f"Transactions: {totals.count}")
