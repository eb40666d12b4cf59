"""Main application window for ChilliLedger."""
import logging
import sys

from PyQt6.QtWidgets import (QApplication, QMainWindow, QTabWidget, QMessageBox, QDialog,
                             QVBoxLayout, QPushButton, QLabel, QFileDialog)
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtCore import Qt

from .app_state import Store, TABS, TabSelected, SearchChanged, ErrorDismissed, refresh, perform
from .config import settings, configure_logging
from .database import DatabaseManager
from .dialogs import CustomerDialog, LoanDialog, RecoveryDialog, ChilliesDialog
from .engine import LedgerEngine
from .exceptions import ChilliLedgerError
from .reports import ReportGenerator
from .theme import ThemeManager
from .views.dashboard import DashboardView
from .views.records import CustomersView, LoansView, RecoveriesView, ChilliesView

log = logging.getLogger(__name__)


class StartupDialog(QDialog):
    """Dialog to select or create a ledger file."""

    def __init__(self, default_path=None):
        super().__init__()
        self.setWindowTitle("ChilliLedger - Select Ledger")
        self.setFixedSize(400, 220)
        self.selected_db = None
        self.default_path = default_path

        layout = QVBoxLayout(self)
        layout.setSpacing(15)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title = QLabel("Welcome to ChilliLedger")
        title.setStyleSheet("font-size: 18px; font-weight: bold; color: #b91c1c;")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)

        if default_path:
            btn_default = QPushButton(f"Open {default_path}")
            btn_default.setMinimumHeight(40)
            btn_default.clicked.connect(self.open_default)
            layout.addWidget(btn_default)

        btn_new = QPushButton("Create New Ledger")
        btn_new.setMinimumHeight(40)
        btn_new.clicked.connect(self.create_new)
        layout.addWidget(btn_new)

        btn_open = QPushButton("Open Existing Ledger")
        btn_open.setMinimumHeight(40)
        btn_open.clicked.connect(self.open_existing)
        layout.addWidget(btn_open)

    def open_default(self):
        self.selected_db = self.default_path
        self.accept()

    def create_new(self):
        path, _ = QFileDialog.getSaveFileName(self, "Create New Ledger", "chilli_ledger.db", "Database Files (*.db)")
        if path:
            if not path.endswith('.db'):
                path += '.db'
            self.selected_db = path
            self.accept()

    def open_existing(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open Existing Ledger", "", "Database Files (*.db)")
        if path:
            self.selected_db = path
            self.accept()


class MainApp(QMainWindow):
    """Main application window.

    Screens render from the Store; every user action goes through the
    engine and is followed by a full reload.
    """

    def __init__(self, db_path):
        super().__init__()
        self.setWindowTitle(f"ChilliLedger - [{db_path}]")
        self.resize(1100, 700)

        self.db = DatabaseManager(db_path)
        self.engine = LedgerEngine(self.db)
        self.reports = ReportGenerator(self.db)
        self.theme_manager = ThemeManager(self.db)
        self.store = Store()

        self.dashboard = DashboardView(self.theme_manager)
        self.customers_view = CustomersView(on_add=self.add_customer, searchable=True,
                                            on_search=lambda text: self.store.dispatch(SearchChanged(text)),
                                            actions=(("Edit", self.edit_customer),
                                                     ("Delete", self.delete_customer)))
        self.loans_view = LoansView(on_add=self.add_loan)
        self.recoveries_view = RecoveriesView(on_add=self.add_recovery)
        self.chillies_view = ChilliesView(on_add=self.add_chillies_transaction)
        self.views = (self.dashboard, self.customers_view, self.loans_view,
                      self.recoveries_view, self.chillies_view)

        self.tabs = QTabWidget()
        for tab, view in zip(TABS, self.views):
            self.tabs.addTab(view, tab.capitalize())
        self.tabs.currentChanged.connect(lambda i: self.store.dispatch(TabSelected(TABS[i])))
        self.setCentralWidget(self.tabs)

        self.create_menus()
        self.apply_theme()
        self.store.subscribe(self.render)
        refresh(self.store, self.engine)

    def create_menus(self):
        menubar = self.menuBar()
        file_menu = menubar.addMenu("File")

        refresh_action = QAction("Refresh", self)
        refresh_action.setShortcut(QKeySequence("F5"))
        refresh_action.triggered.connect(lambda: refresh(self.store, self.engine))
        file_menu.addAction(refresh_action)

        export_menu = file_menu.addMenu("Export to CSV")
        for label, getter in (("Customers", lambda s: s.customers),
                              ("Loans", lambda s: s.loans),
                              ("Recoveries", lambda s: s.recoveries),
                              ("Chillies Transactions", lambda s: s.transactions)):
            action = QAction(label, self)
            action.triggered.connect(lambda _=False, l=label, g=getter: self.export_csv(l, g(self.store.state)))
            export_menu.addAction(action)

        view_menu = menubar.addMenu("View")
        theme_action = QAction("Dark Mode", self)
        theme_action.setCheckable(True)
        theme_action.setChecked(self.theme_manager.is_dark)
        theme_action.triggered.connect(self.toggle_theme)
        view_menu.addAction(theme_action)

    def render(self, state):
        if state.loading:
            self.statusBar().showMessage("Loading...")
            return
        self.statusBar().clearMessage()
        for view in self.views:
            view.render(state)
        if state.error:
            QMessageBox.warning(self, "Error", state.error)
            self.store.dispatch(ErrorDismissed())

    def _customers(self):
        return list(self.store.state.customers)

    def add_customer(self):
        dialog = CustomerDialog(self)
        if dialog.exec():
            perform(self.store, self.engine, self.engine.add_customer, dialog.get_data())

    def _selected_customer(self):
        customer = self.customers_view.selected_record(self.store.state)
        if customer is None:
            QMessageBox.information(self, "Customers", "Select a customer first.")
        return customer

    def edit_customer(self):
        customer = self._selected_customer()
        if customer is None:
            return
        dialog = CustomerDialog(self, customer.name, customer.phone, customer.address)
        if dialog.exec():
            perform(self.store, self.engine, self.engine.update_customer, customer.id, dialog.get_data())

    def delete_customer(self):
        customer = self._selected_customer()
        if customer is None:
            return
        reply = QMessageBox.question(self, "Delete Customer",
                                     f"Delete {customer.name}? Their loans, recoveries and trades are kept.",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            perform(self.store, self.engine, self.engine.delete_customer, customer.id)

    def add_loan(self):
        dialog = LoanDialog(self._customers(), self)
        if dialog.exec():
            perform(self.store, self.engine, self.engine.add_loan, dialog.get_data())

    def add_recovery(self):
        dialog = RecoveryDialog(self._customers(), self)
        if dialog.exec():
            perform(self.store, self.engine, self.engine.add_recovery, dialog.get_data())

    def add_chillies_transaction(self):
        dialog = ChilliesDialog(self._customers(), self.engine, self)
        if dialog.exec():
            perform(self.store, self.engine, self.engine.add_chillies_transaction, dialog.get_data())

    def export_csv(self, label, records):
        if not records:
            QMessageBox.information(self, "Export", f"No {label.lower()} to export.")
            return
        default_name = label.lower().replace(" ", "_") + ".csv"
        path, _ = QFileDialog.getSaveFileName(self, f"Export {label}", default_name, "CSV Files (*.csv)")
        if not path:
            return
        try:
            self.reports.export_to_csv(list(records), path)
        except OSError as e:
            QMessageBox.warning(self, "Export", f"Could not write file: {e}")
            return
        QMessageBox.information(self, "Export", f"Exported {len(records)} rows to {path}")

    def toggle_theme(self):
        try:
            self.theme_manager.toggle_theme()
        except ChilliLedgerError as e:
            log.error("Could not save theme: %s", e)
        self.apply_theme()

    def apply_theme(self):
        t = self.theme_manager
        self.setStyleSheet(f"""
            QMainWindow, QWidget {{
                background-color: {t.get_color('bg_primary')};
                color: {t.get_color('text_primary')};
            }}
            QMenuBar {{
                background: {t.get_color('bg_header')};
                color: {t.get_color('text_header')};
            }}
            QTableWidget {{
                background-color: {t.get_color('bg_secondary')};
                border: 1px solid {t.get_color('border')};
            }}
            QPushButton {{
                background-color: {t.get_color('accent')};
                color: {t.get_color('text_header')};
                border-radius: 6px;
                padding: 6px 14px;
            }}
            QPushButton:hover {{
                background-color: {t.get_color('accent_hover')};
            }}
        """)
        self.dashboard.apply_theme()

    def closeEvent(self, event):
        self.db.close()
        event.accept()


def main():
    """Entry point for the desktop application."""
    configure_logging()
    app = QApplication(sys.argv)

    dialog = StartupDialog(settings.database_path)
    if dialog.exec() == QDialog.DialogCode.Accepted and dialog.selected_db:
        window = MainApp(dialog.selected_db)
        window.show()
        sys.exit(app.exec())
    else:
        sys.exit(0)


if __name__ == "__main__":
    main()
