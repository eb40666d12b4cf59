from dataclasses import dataclass, field, asdict
from datetime import date
from typing import List, Dict, Any, Optional


def _serialize(value):
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


class Record:
    """Mixin giving stored records a JSON-friendly dict form."""

    def to_dict(self) -> Dict[str, Any]:
        return _serialize(asdict(self))


@dataclass
class CustomerRef(Record):
    """The id/name pair attached to enriched loan, recovery and trade rows."""
    id: int
    name: str


@dataclass
class Customer(Record):
    id: int
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = None


@dataclass
class Loan(Record):
    id: int
    customer_id: int
    amount: float
    interest_rate: float
    loan_date: date
    created_at: Optional[str] = None
    customer: Optional[CustomerRef] = None


@dataclass
class Recovery(Record):
    id: int
    customer_id: int
    amount: float
    recovery_date: date
    created_at: Optional[str] = None
    customer: Optional[CustomerRef] = None


@dataclass
class Settlement(Record):
    """Derived monetary fields of a chillies transaction."""
    total_earnings: float
    commission: float
    service_charge: float
    total_charges: float
    net_amount: float


@dataclass
class ChilliesTransaction(Record):
    id: int
    customer_id: int
    number_of_bags: int
    weight_kg: float
    market_rate: float
    transaction_date: date
    total_earnings: float
    commission: float
    service_charge: float
    total_charges: float
    net_amount: float
    created_at: Optional[str] = None
    customer: Optional[CustomerRef] = None

    @property
    def settlement(self) -> Settlement:
        return Settlement(self.total_earnings, self.commission, self.service_charge,
                          self.total_charges, self.net_amount)


@dataclass(frozen=True)
class StatusBadge(Record):
    """Classification label plus the theme color key used to render it."""
    status: str
    color: str


# =============================================================================
# VALIDATED INPUTS
# =============================================================================

@dataclass(frozen=True)
class CustomerInput:
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class LoanInput:
    customer_id: int
    amount: float
    interest_rate: float
    loan_date: date


@dataclass(frozen=True)
class RecoveryInput:
    customer_id: int
    amount: float
    recovery_date: date


@dataclass(frozen=True)
class ChilliesInput:
    customer_id: int
    number_of_bags: int
    weight_kg: float
    market_rate: float
    transaction_date: date


# =============================================================================
# AGGREGATES
# =============================================================================

@dataclass
class DashboardStats(Record):
    total_customers: int = 0
    total_outstanding_loans: float = 0.0
    total_commission: float = 0.0
    total_service_charges: float = 0.0
    total_chillies_traded: float = 0.0
    customer_balances: Dict[int, float] = field(default_factory=dict)


@dataclass
class LoanSummary(Record):
    count: int
    total_principal: float
    total_current_value: float
    interest_earned: float = 0.0


@dataclass
class MonthlyTotal(Record):
    month: str
    amount: float
    count: int


@dataclass
class RecoverySummary(Record):
    total_recovered: float
    todays_count: int
    todays_total: float
    monthly: List[MonthlyTotal] = field(default_factory=list)


@dataclass
class ChilliesSummary(Record):
    total_weight: float
    total_bags: int
    total_commission: float
    total_service_charges: float
    total_earnings: float
    count: int = 0
    average_weight_per_bag: float = 0.0
    average_market_rate: float = 0.0


@dataclass
class LedgerSnapshot:
    """Everything a screen needs, reloaded wholesale after each mutation."""
    as_of: date
    customers: List[Customer]
    loans: List[Loan]
    recoveries: List[Recovery]
    transactions: List[ChilliesTransaction]
    stats: DashboardStats
