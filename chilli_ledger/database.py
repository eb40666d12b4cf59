"""Database management module for ChilliLedger."""
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, date

import pandas as pd

from chilli_ledger.config import TIMESTAMP_FORMAT, DEFAULT_INTEREST_RATE
from chilli_ledger.exceptions import DatabaseError, TransactionError
from chilli_ledger.data_structures import (
    Customer, CustomerRef, Loan, Recovery, ChilliesTransaction, Settlement
)

log = logging.getLogger(__name__)

COLLECTIONS = ("customers", "loans", "recoveries", "chillies_transactions")

CUSTOMER_UPDATABLE_FIELDS = ("name", "phone", "address")


def _as_date(value):
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _customer_ref(row):
    if row["customer_ref_id"] is None:
        return None
    return CustomerRef(id=row["customer_ref_id"], name=row["customer_ref_name"])


class DatabaseManager:
    """Handles all SQLite database operations.

    Every read is a full-collection select ordered newest first. Loans,
    recoveries and chillies transactions are enriched with the referenced
    customer's id and name through a LEFT JOIN.
    """

    def __init__(self, db_name="chilli_ledger.db"):
        self.db_name = db_name
        try:
            # The HTTP server hands requests to worker threads.
            self.conn = sqlite3.connect(db_name, check_same_thread=False)
        except sqlite3.Error as e:
            raise DatabaseError(f"Could not open database: {e}", {'db_name': db_name})
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._closed = False
        self.create_tables()

    def close(self):
        """Close the database connection."""
        if self.conn and not self._closed:
            self.conn.close()
            self._closed = True

    def __del__(self):
        if hasattr(self, '_closed'):
            self.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @contextmanager
    def transaction(self):
        """Context manager for database transactions with automatic rollback on failure.

        Usage:
            with db.transaction():
                db.conn.execute(...)
                db.conn.execute(...)
        """
        try:
            yield
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise TransactionError(f"Transaction failed: {str(e)}")
        except Exception:
            self.conn.rollback()
            raise

    def _execute(self, query, params=()):
        """Run a single write statement and commit it."""
        try:
            with self.transaction():
                return self.conn.execute(query, params)
        except TransactionError as e:
            log.error("Write failed on %s: %s", self.db_name, e)
            raise DatabaseError(e.message, {'query': query.split()[0]})

    def _query(self, query, params=()):
        try:
            return self.conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            log.error("Read failed on %s: %s", self.db_name, e)
            raise DatabaseError(f"Query failed: {e}")

    def create_tables(self):
        try:
            self.conn.executescript("""
                CREATE TABLE IF NOT EXISTS customers (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    phone TEXT,
                    address TEXT,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS loans (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    customer_id INTEGER REFERENCES customers(id) ON DELETE SET NULL,
                    amount REAL NOT NULL CHECK (amount > 0),
                    interest_rate REAL NOT NULL DEFAULT 2.0,
                    loan_date TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS recoveries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    customer_id INTEGER REFERENCES customers(id) ON DELETE SET NULL,
                    amount REAL NOT NULL CHECK (amount > 0),
                    recovery_date TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS chillies_transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    customer_id INTEGER REFERENCES customers(id) ON DELETE SET NULL,
                    number_of_bags INTEGER NOT NULL CHECK (number_of_bags > 0),
                    weight_kg REAL NOT NULL CHECK (weight_kg > 0),
                    market_rate REAL NOT NULL CHECK (market_rate > 0),
                    transaction_date TEXT NOT NULL,
                    total_earnings REAL NOT NULL,
                    commission REAL NOT NULL,
                    service_charge REAL NOT NULL,
                    total_charges REAL NOT NULL,
                    net_amount REAL NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT
                );
            """)
            self.conn.commit()
        except sqlite3.Error as e:
            raise DatabaseError(f"Could not create tables: {e}", {'db_name': self.db_name})

    @staticmethod
    def _now():
        return datetime.now().strftime(TIMESTAMP_FORMAT)

    # Customer operations
    @staticmethod
    def _row_to_customer(row):
        return Customer(id=row["id"], name=row["name"], phone=row["phone"],
                        address=row["address"], created_at=row["created_at"])

    def create_customer(self, name, phone=None, address=None):
        cursor = self._execute(
            "INSERT INTO customers (name, phone, address, created_at) VALUES (?, ?, ?, ?)",
            (name, phone, address, self._now()))
        log.info("Created customer %s (%s)", cursor.lastrowid, name)
        return self.get_customer(cursor.lastrowid)

    def get_customers(self):
        rows = self._query("SELECT * FROM customers ORDER BY created_at DESC, id DESC")
        return [self._row_to_customer(r) for r in rows]

    def get_customer(self, id):
        rows = self._query("SELECT * FROM customers WHERE id=?", (id,))
        return self._row_to_customer(rows[0]) if rows else None

    def update_customer(self, id, **updates):
        """Update name, phone and/or address of a customer.

        Returns:
            The updated Customer, or None if no customer has this id.
        """
        unknown = set(updates) - set(CUSTOMER_UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update customer fields: {', '.join(sorted(unknown))}")
        if updates:
            # Column names come from the whitelist above, values are bound.
            assignments = ", ".join(f"{key}=?" for key in updates)
            self._execute(f"UPDATE customers SET {assignments} WHERE id=?",
                          (*updates.values(), id))
        return self.get_customer(id)

    def delete_customer(self, id):
        cursor = self._execute("DELETE FROM customers WHERE id=?", (id,))
        return cursor.rowcount > 0

    # Loan operations
    _LOAN_SELECT = """
        SELECT l.*, c.id AS customer_ref_id, c.name AS customer_ref_name
        FROM loans l LEFT JOIN customers c ON c.id = l.customer_id
    """

    @staticmethod
    def _row_to_loan(row):
        return Loan(id=row["id"], customer_id=row["customer_id"], amount=row["amount"],
                    interest_rate=row["interest_rate"], loan_date=_as_date(row["loan_date"]),
                    created_at=row["created_at"], customer=_customer_ref(row))

    def create_loan(self, customer_id, amount, interest_rate=DEFAULT_INTEREST_RATE, loan_date=None):
        loan_date = _as_date(loan_date or date.today())
        cursor = self._execute(
            "INSERT INTO loans (customer_id, amount, interest_rate, loan_date, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (customer_id, amount, interest_rate, loan_date.isoformat(), self._now()))
        log.info("Created loan %s for customer %s: %s at %s%%",
                 cursor.lastrowid, customer_id, amount, interest_rate)
        return self.get_loan(cursor.lastrowid)

    def get_loan(self, id):
        rows = self._query(self._LOAN_SELECT + " WHERE l.id=?", (id,))
        return self._row_to_loan(rows[0]) if rows else None

    def get_loans(self):
        rows = self._query(self._LOAN_SELECT + " ORDER BY l.created_at DESC, l.id DESC")
        return [self._row_to_loan(r) for r in rows]

    def get_loans_by_customer(self, customer_id):
        rows = self._query(self._LOAN_SELECT + " WHERE l.customer_id=? ORDER BY l.created_at DESC, l.id DESC",
                           (customer_id,))
        return [self._row_to_loan(r) for r in rows]

    # Recovery operations
    _RECOVERY_SELECT = """
        SELECT r.*, c.id AS customer_ref_id, c.name AS customer_ref_name
        FROM recoveries r LEFT JOIN customers c ON c.id = r.customer_id
    """

    @staticmethod
    def _row_to_recovery(row):
        return Recovery(id=row["id"], customer_id=row["customer_id"], amount=row["amount"],
                        recovery_date=_as_date(row["recovery_date"]),
                        created_at=row["created_at"], customer=_customer_ref(row))

    def create_recovery(self, customer_id, amount, recovery_date=None):
        recovery_date = _as_date(recovery_date or date.today())
        cursor = self._execute(
            "INSERT INTO recoveries (customer_id, amount, recovery_date, created_at) VALUES (?, ?, ?, ?)",
            (customer_id, amount, recovery_date.isoformat(), self._now()))
        log.info("Created recovery %s for customer %s: %s", cursor.lastrowid, customer_id, amount)
        return self.get_recovery(cursor.lastrowid)

    def get_recovery(self, id):
        rows = self._query(self._RECOVERY_SELECT + " WHERE r.id=?", (id,))
        return self._row_to_recovery(rows[0]) if rows else None

    def get_recoveries(self):
        rows = self._query(self._RECOVERY_SELECT + " ORDER BY r.created_at DESC, r.id DESC")
        return [self._row_to_recovery(r) for r in rows]

    def get_recoveries_by_customer(self, customer_id):
        rows = self._query(self._RECOVERY_SELECT + " WHERE r.customer_id=? ORDER BY r.created_at DESC, r.id DESC",
                           (customer_id,))
        return [self._row_to_recovery(r) for r in rows]

    # Chillies transaction operations
    _CHILLIES_SELECT = """
        SELECT t.*, c.id AS customer_ref_id, c.name AS customer_ref_name
        FROM chillies_transactions t LEFT JOIN customers c ON c.id = t.customer_id
    """

    @staticmethod
    def _row_to_transaction(row):
        return ChilliesTransaction(
            id=row["id"], customer_id=row["customer_id"], number_of_bags=row["number_of_bags"],
            weight_kg=row["weight_kg"], market_rate=row["market_rate"],
            transaction_date=_as_date(row["transaction_date"]),
            total_earnings=row["total_earnings"], commission=row["commission"],
            service_charge=row["service_charge"], total_charges=row["total_charges"],
            net_amount=row["net_amount"], created_at=row["created_at"],
            customer=_customer_ref(row))

    def create_chillies_transaction(self, customer_id, number_of_bags, weight_kg, market_rate,
                                    transaction_date, settlement: Settlement):
        """Insert a trade with its settlement fields, stored verbatim."""
        transaction_date = _as_date(transaction_date)
        cursor = self._execute(
            """INSERT INTO chillies_transactions (
                   customer_id, number_of_bags, weight_kg, market_rate, transaction_date,
                   total_earnings, commission, service_charge, total_charges, net_amount, created_at
               ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (customer_id, number_of_bags, weight_kg, market_rate, transaction_date.isoformat(),
             settlement.total_earnings, settlement.commission, settlement.service_charge,
             settlement.total_charges, settlement.net_amount, self._now()))
        log.info("Created chillies transaction %s for customer %s: %s bags, %s kg",
                 cursor.lastrowid, customer_id, number_of_bags, weight_kg)
        return self.get_chillies_transaction(cursor.lastrowid)

    def get_chillies_transaction(self, id):
        rows = self._query(self._CHILLIES_SELECT + " WHERE t.id=?", (id,))
        return self._row_to_transaction(rows[0]) if rows else None

    def get_chillies_transactions(self):
        rows = self._query(self._CHILLIES_SELECT + " ORDER BY t.created_at DESC, t.id DESC")
        return [self._row_to_transaction(r) for r in rows]

    def get_chillies_transactions_by_customer(self, customer_id):
        rows = self._query(self._CHILLIES_SELECT + " WHERE t.customer_id=? ORDER BY t.created_at DESC, t.id DESC",
                           (customer_id,))
        return [self._row_to_transaction(r) for r in rows]

    def get_collection_df(self, collection):
        """Get a whole collection as a DataFrame, newest first."""
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        try:
            return pd.read_sql_query(
                f"SELECT * FROM {collection} ORDER BY created_at DESC, id DESC", self.conn)
        except (sqlite3.Error, pd.errors.DatabaseError) as e:
            raise DatabaseError(f"Query failed: {e}", {'collection': collection})

    # Settings
    def get_setting(self, key, default=None):
        rows = self._query("SELECT value FROM settings WHERE key=?", (key,))
        return rows[0]["value"] if rows else default

    def set_setting(self, key, value):
        self._execute("INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", (key, str(value)))
