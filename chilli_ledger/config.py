"""Centralized configuration for ChilliLedger.

This module contains the business rule constants used by the calculation
services, plus the runtime settings loaded from the environment.
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# LOAN DEFAULTS
# =============================================================================

# Default interest rate, percent per interest period
DEFAULT_INTEREST_RATE = 2.0

# Interest accrues only for whole periods of this many calendar days
INTEREST_PERIOD_DAYS = 30

# Loan age thresholds (days) for status badges
LOAN_DUE_SOON_DAYS = 60
LOAN_OVERDUE_DAYS = 90

# =============================================================================
# CHILLIES TRADING
# =============================================================================

# Flat earning added per bag (currency units)
BAG_BONUS_PER_BAG = 45

# Operator commission on total earnings (2%)
COMMISSION_RATE = 0.02

# Flat service charge deducted per bag (currency units)
SERVICE_CHARGE_PER_BAG = 29

# =============================================================================
# BALANCES
# =============================================================================

# Balances closer to zero than half a paisa are classified as settled
BALANCE_EPSILON = 0.005

# =============================================================================
# DISPLAY FORMATS
# =============================================================================

# Timestamp format for created_at columns
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

CURRENCY_SYMBOL = "₹"

# Number of months shown in the monthly recovery summary
MONTHLY_SUMMARY_LIMIT = 12


class Settings(BaseSettings):
    """Runtime settings, overridable with CHILLI_LEDGER_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="CHILLI_LEDGER_", env_file=".env", extra="ignore")

    database_path: str = "chilli_ledger.db"
    log_level: str = "INFO"
    api_host: str = "127.0.0.1"
    api_port: int = 8000


settings = Settings()


def configure_logging(level=None):
    """Configure root logging for an entry point."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
