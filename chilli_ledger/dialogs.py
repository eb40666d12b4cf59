from PyQt6.QtWidgets import (QDialog, QFormLayout, QLineEdit, QPushButton, QVBoxLayout,
                             QLabel, QDateEdit, QComboBox, QDoubleSpinBox, QGroupBox)
from PyQt6.QtCore import QDate

from .config import DEFAULT_INTEREST_RATE
from .exceptions import ValidationError
from .formatting import format_currency
from .validation import (validate_customer_payload, validate_loan_payload,
                         validate_recovery_payload, validate_chillies_payload)

ERROR_STYLE = "color: #dc3545; font-size: 11px;"


class _FormDialog(QDialog):
    """Base for entry forms: validates the payload before accepting.

    Subclasses build their rows in build_form() and return the raw field
    values from get_data(); validator parses them.
    """

    title = "Details"
    validator = None

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle(self.title)
        self.setMinimumWidth(380)
        self.layout = QFormLayout(self)
        self.build_form()

        self.error_label = QLabel()
        self.error_label.setStyleSheet(ERROR_STYLE)
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        self.layout.addRow(self.error_label)

        self.save_btn = QPushButton("Save")
        self.save_btn.clicked.connect(self.validate_and_accept)
        self.layout.addRow(self.save_btn)

    def build_form(self):
        raise NotImplementedError

    def get_data(self) -> dict:
        raise NotImplementedError

    def validate_and_accept(self):
        """Show every field error at once, or accept."""
        try:
            type(self).validator(self.get_data())
        except ValidationError as e:
            self.error_label.setText("\n".join(e.errors.values()))
            self.error_label.show()
            return
        self.error_label.hide()
        self.accept()


def _customer_combo(customers):
    combo = QComboBox()
    combo.addItem("Select Customer", None)
    for customer in customers:
        combo.addItem(customer.name, customer.id)
    return combo


def _today_edit():
    edit = QDateEdit(QDate.currentDate())
    edit.setCalendarPopup(True)
    edit.setDisplayFormat("yyyy-MM-dd")
    return edit


class CustomerDialog(_FormDialog):
    """Dialog for adding/editing customer details."""

    title = "Customer Details"
    validator = staticmethod(validate_customer_payload)

    def __init__(self, parent=None, name="", phone="", address=""):
        self._initial = (name, phone or "", address or "")
        super().__init__(parent)

    def build_form(self):
        name, phone, address = self._initial
        self.name_input = QLineEdit(name)
        self.name_input.setPlaceholderText("Customer name")
        self.phone_input = QLineEdit(phone)
        self.phone_input.setPlaceholderText("Phone number (optional)")
        self.address_input = QLineEdit(address)
        self.address_input.setPlaceholderText("Address (optional)")
        self.layout.addRow("Name:", self.name_input)
        self.layout.addRow("Phone:", self.phone_input)
        self.layout.addRow("Address:", self.address_input)

    def get_data(self):
        return {
            'name': self.name_input.text(),
            'phone': self.phone_input.text(),
            'address': self.address_input.text(),
        }


class LoanDialog(_FormDialog):
    title = "Add New Loan"
    validator = staticmethod(validate_loan_payload)

    def __init__(self, customers, parent=None):
        self._customers = customers
        super().__init__(parent)

    def build_form(self):
        self.customer_combo = _customer_combo(self._customers)
        self.amount_input = QLineEdit()
        self.amount_input.setPlaceholderText("Loan Amount (₹)")
        self.rate_input = QDoubleSpinBox()
        self.rate_input.setRange(0, 100)
        self.rate_input.setDecimals(2)
        self.rate_input.setSuffix(" % / 30 days")
        self.rate_input.setValue(DEFAULT_INTEREST_RATE)
        self.date_input = _today_edit()
        self.layout.addRow("Customer:", self.customer_combo)
        self.layout.addRow("Amount:", self.amount_input)
        self.layout.addRow("Interest:", self.rate_input)
        self.layout.addRow("Loan date:", self.date_input)

    def get_data(self):
        return {
            'customer_id': self.customer_combo.currentData(),
            'amount': self.amount_input.text(),
            'interest_rate': self.rate_input.value(),
            'loan_date': self.date_input.date().toString("yyyy-MM-dd"),
        }


class RecoveryDialog(_FormDialog):
    title = "Record Recovery"
    validator = staticmethod(validate_recovery_payload)

    def __init__(self, customers, parent=None):
        self._customers = customers
        super().__init__(parent)

    def build_form(self):
        self.customer_combo = _customer_combo(self._customers)
        self.amount_input = QLineEdit()
        self.amount_input.setPlaceholderText("Recovery Amount (₹)")
        self.date_input = _today_edit()
        self.layout.addRow("Customer:", self.customer_combo)
        self.layout.addRow("Amount:", self.amount_input)
        self.layout.addRow("Recovery date:", self.date_input)

    def get_data(self):
        return {
            'customer_id': self.customer_combo.currentData(),
            'amount': self.amount_input.text(),
            'recovery_date': self.date_input.date().toString("yyyy-MM-dd"),
        }


class ChilliesDialog(_FormDialog):
    """Trade entry with a live settlement preview."""

    title = "Add Chillies Transaction"
    validator = staticmethod(validate_chillies_payload)

    def __init__(self, customers, engine, parent=None):
        self._customers = customers
        self.engine = engine
        super().__init__(parent)

    def build_form(self):
        self.customer_combo = _customer_combo(self._customers)
        self.bags_input = QLineEdit()
        self.bags_input.setPlaceholderText("Number of bags")
        self.weight_input = QLineEdit()
        self.weight_input.setPlaceholderText("Weight (kg)")
        self.rate_input = QLineEdit()
        self.rate_input.setPlaceholderText("Market rate (₹/kg)")
        self.date_input = _today_edit()
        self.layout.addRow("Customer:", self.customer_combo)
        self.layout.addRow("Bags:", self.bags_input)
        self.layout.addRow("Weight:", self.weight_input)
        self.layout.addRow("Rate:", self.rate_input)
        self.layout.addRow("Date:", self.date_input)

        preview_group = QGroupBox("Transaction Preview")
        preview_layout = QVBoxLayout(preview_group)
        self.preview_label = QLabel("Enter bags, weight and rate to see the settlement.")
        self.preview_label.setWordWrap(True)
        preview_layout.addWidget(self.preview_label)
        self.layout.addRow(preview_group)

        for edit in (self.bags_input, self.weight_input, self.rate_input):
            edit.textChanged.connect(self.update_preview)

    def update_preview(self):
        settlement = self.engine.preview_chillies_transaction(self.get_data())
        if settlement is None:
            self.preview_label.setText("Enter bags, weight and rate to see the settlement.")
            return
        self.preview_label.setText(
            f"Total earnings: {format_currency(settlement.total_earnings)}\n"
            f"Commission (2%): {format_currency(settlement.commission)}\n"
            f"Service charge: {format_currency(settlement.service_charge)}\n"
            f"Total charges: {format_currency(settlement.total_charges)}\n"
            f"Net amount: {format_currency(settlement.net_amount)}"
        )

    def get_data(self):
        return {
            'customer_id': self.customer_combo.currentData(),
            'number_of_bags': self.bags_input.text(),
            'weight_kg': self.weight_input.text(),
            'market_rate': self.rate_input.text(),
            'transaction_date': self.date_input.date().toString("yyyy-MM-dd"),
        }
