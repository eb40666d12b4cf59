"""ChilliLedger: customers, loans, recoveries and chillies trading."""

__version__ = "1.0.0"
