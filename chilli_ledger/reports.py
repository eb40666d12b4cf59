"""
Report generation module for ChilliLedger.
Handles CSV export of the stored collections.
"""
import logging

import pandas as pd

from chilli_ledger.database import COLLECTIONS

log = logging.getLogger(__name__)


def _flatten(record):
    row = record.to_dict() if hasattr(record, 'to_dict') else dict(record)
    customer = row.pop('customer', None)
    if isinstance(customer, dict):
        row['customer_name'] = customer.get('name')
    return row


class ReportGenerator:
    def __init__(self, db_manager):
        self.db = db_manager

    @staticmethod
    def records_to_df(records):
        """Build a DataFrame from records, replacing the nested customer with customer_name."""
        return pd.DataFrame([_flatten(r) for r in records])

    def to_csv_string(self, records):
        if not records:
            return ""
        return self.records_to_df(records).to_csv(index=False)

    def export_to_csv(self, records, path):
        """Write records to a CSV file.

        Returns:
            False when there is nothing to export, True otherwise.
        """
        if not records:
            return False
        self.records_to_df(records).to_csv(path, index=False)
        log.info("Exported %d rows to %s", len(records), path)
        return True

    def collection_csv(self, collection):
        """Raw stored rows of one collection as CSV text."""
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        df = self.db.get_collection_df(collection)
        return df.to_csv(index=False)
