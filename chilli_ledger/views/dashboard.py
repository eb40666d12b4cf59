"""Dashboard view for ChilliLedger."""
from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFrame, QGridLayout,
                             QTableWidget, QTableWidgetItem, QHeaderView)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QBrush, QColor

from ..formatting import format_currency, format_number
from ..services import get_balance_status


class StatCard(QFrame):
    """A titled figure on the dashboard."""

    def __init__(self, title, theme_manager):
        super().__init__()
        self.theme_manager = theme_manager
        self.setObjectName("statCard")
        self.setMinimumHeight(90)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)
        self.title_label = QLabel(title)
        self.value_label = QLabel("-")
        layout.addWidget(self.title_label)
        layout.addWidget(self.value_label)
        self.apply_theme()

    def set_value(self, text):
        self.value_label.setText(text)

    def apply_theme(self):
        t = self.theme_manager
        self.setStyleSheet(f"""
            #statCard {{
                background-color: {t.get_color('card_bg')};
                border: 1px solid {t.get_color('card_border')};
                border-radius: 8px;
            }}
        """)
        self.title_label.setStyleSheet(f"font-size: 12px; color: {t.get_color('text_secondary')};")
        self.value_label.setStyleSheet(f"font-size: 22px; font-weight: 700; color: {t.get_color('text_primary')};")


class DashboardView(QWidget):
    """Headline statistics plus every customer's current balance."""

    CARDS = (
        ('total_customers', "Total Customers"),
        ('total_outstanding_loans', "Outstanding Loans"),
        ('total_commission', "Commission Earned"),
        ('total_service_charges', "Service Charges"),
        ('total_chillies_traded', "Chillies Traded (kg)"),
    )

    def __init__(self, theme_manager):
        super().__init__()
        self.theme_manager = theme_manager
        self.cards = {}

        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(16)

        grid = QGridLayout()
        grid.setSpacing(12)
        for i, (key, title) in enumerate(self.CARDS):
            card = StatCard(title, theme_manager)
            self.cards[key] = card
            grid.addWidget(card, i // 3, i % 3)
        layout.addLayout(grid)

        heading = QHBoxLayout()
        self.balances_title = QLabel("Customer Balances")
        self.balances_title.setStyleSheet("font-size: 16px; font-weight: 700;")
        heading.addWidget(self.balances_title)
        heading.addStretch()
        layout.addLayout(heading)

        self.balances_table = QTableWidget(0, 3)
        self.balances_table.setHorizontalHeaderLabels(["Customer", "Balance", "Status"])
        self.balances_table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.balances_table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.balances_table.verticalHeader().setVisible(False)
        layout.addWidget(self.balances_table)

    def render(self, state):
        stats = state.stats
        self.cards['total_customers'].set_value(str(stats.total_customers))
        self.cards['total_outstanding_loans'].set_value(format_currency(stats.total_outstanding_loans))
        self.cards['total_commission'].set_value(format_currency(stats.total_commission))
        self.cards['total_service_charges'].set_value(format_currency(stats.total_service_charges))
        self.cards['total_chillies_traded'].set_value(format_number(stats.total_chillies_traded))

        self.balances_table.setRowCount(len(state.customers))
        for row, customer in enumerate(state.customers):
            balance = stats.customer_balances.get(customer.id, 0.0)
            badge = get_balance_status(balance)
            amount_item = QTableWidgetItem(format_currency(balance))
            amount_item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
            status_item = QTableWidgetItem(badge.status)
            status_item.setForeground(self._brush(badge.color))
            self.balances_table.setItem(row, 0, QTableWidgetItem(customer.name))
            self.balances_table.setItem(row, 1, amount_item)
            self.balances_table.setItem(row, 2, status_item)

    def _brush(self, color_key):
        return QBrush(QColor(self.theme_manager.get_color(color_key)))

    def apply_theme(self):
        for card in self.cards.values():
            card.apply_theme()
