"""
Typed records for portfolio aggregation.

These are the strictly-typed internal representations produced by the
sanitizing step in ``utils.portfolio.sanitize``. Aggregation code only ever
works on these records, never on the loosely-typed dicts that arrive from the
transport layer.
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple


def _serialize(value: Any) -> Any:
    """Convert dates nested anywhere in an asdict() result to ISO strings."""
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


class Record:
    """Mixin giving every record a JSON-friendly dict form."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return _serialize(asdict(self))


@dataclass(frozen=True)
class CustomField(Record):
    """User-defined asset or liability line on a snapshot."""
    name: str
    amount: float
    type: str                   # 'asset' or 'liability'


@dataclass(frozen=True)
class Snapshot(Record):
    """Point-in-time net worth entry."""
    date: Optional[date]
    cash: float = 0.0
    investments: float = 0.0
    real_estate: float = 0.0
    retirement_accounts: float = 0.0
    vehicles: float = 0.0
    personal_property: float = 0.0
    other_assets: float = 0.0
    liabilities: float = 0.0
    custom_fields: Tuple[CustomField, ...] = ()
    net_worth: Optional[float] = None   # Stored value, authoritative when present
    id: Optional[str] = None


@dataclass(frozen=True)
class Account(Record):
    """Linked or manually entered balance-holding account."""
    id: Optional[str]
    name: Optional[str]
    category: str               # Canonical category
    raw_category: Optional[str]
    amount: float
    institution_name: Optional[str] = None
    mask: Optional[str] = None
    manually_added: bool = False


@dataclass(frozen=True)
class RentEntry(Record):
    """Rent due for one period of a property."""
    period: str                 # Usually 'YYYY-MM'
    amount: float
    collected: bool


@dataclass(frozen=True)
class Expense(Record):
    """Expense recorded against a property."""
    amount: float
    date: Optional[date] = None
    description: str = ''
    category: str = ''


@dataclass(frozen=True)
class Unit(Record):
    """Rentable unit inside a property."""
    name: str
    rent_amount: float
    tenant: str = ''


@dataclass(frozen=True)
class ShortTermIncome(Record):
    """Income from a short-term stay."""
    amount: float
    date: Optional[date] = None
    notes: str = ''


@dataclass(frozen=True)
class Property(Record):
    """Real estate holding."""
    id: Optional[str]
    address: str
    property_type: str
    purchase_date: Optional[date]
    purchase_price: float
    value: float
    mortgage_balance: float
    rent_collected: Tuple[RentEntry, ...] = ()
    expenses: Tuple[Expense, ...] = ()
    units: Tuple[Unit, ...] = ()
    short_term_income: Tuple[ShortTermIncome, ...] = ()


@dataclass(frozen=True)
class RetirementGoals(Record):
    """Retirement planning inputs."""
    current_age: int
    retirement_age: int
    monthly_spend: float
    allocation: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class SavingsGoal(Record):
    """Savings target the user is working towards."""
    id: Optional[str]
    name: str
    target_amount: float
    current_amount: float
    end_date: Optional[date] = None


# --- Aggregation outputs ---

@dataclass(frozen=True)
class SeriesPoint(Record):
    """One point of the net worth time series."""
    date: Optional[date]
    net_worth: float
    asset_total: float
    liability_total: float


@dataclass(frozen=True)
class Growth(Record):
    """Period-over-period change, rounded for display."""
    absolute: float
    percent: float


@dataclass(frozen=True)
class NetWorthSummary(Record):
    """Headline figures for the dashboard."""
    current_net_worth: float
    previous_net_worth: Optional[float]
    period_growth: Growth
    annual_growth: Growth
    cash_percent: float
    asset_total: float
    liability_total: float
    entry_count: int
    latest_date: Optional[date] = None


@dataclass(frozen=True)
class TrendSeries(Record):
    """Cash, equities and house trends for the dashboard cards."""
    dates: List[Optional[date]]
    cash: List[float]
    equities: List[float]
    house: List[float]


@dataclass(frozen=True)
class ChartData(Record):
    """Labelled series for the net worth chart."""
    labels: List[str]
    net_worth: List[float]
    assets: List[float]
    liabilities: List[float]


@dataclass(frozen=True)
class CategoryGroup(Record):
    """Accounts sharing one canonical category."""
    items: List[Account]
    subtotal: float


@dataclass(frozen=True)
class BalanceCard(Record):
    """Per-category card shown on the accounts screen."""
    category: str
    title: str
    count: int
    subtotal: float
    share_percent: float


@dataclass(frozen=True)
class AccountsSummary(Record):
    """Totals across all accounts."""
    total_balance: float
    account_count: int
    linked_count: int
    manual_count: int
    has_linked_accounts: bool


@dataclass(frozen=True)
class PropertyMetrics(Record):
    """Derived metrics for a single property."""
    equity: float
    total_rent: float
    total_expenses: float
    noi: float
    cap_rate: float
    cash_on_cash: float
    value_increase: float           # Value minus purchase price
    value_increase_percent: float


@dataclass(frozen=True)
class PortfolioMetrics(Record):
    """Rollup of property metrics across the real estate portfolio."""
    total_equity: float
    total_rent_income: float
    total_expenses: float
    total_noi: float
    total_value: float
    total_purchase_price: float
    average_cap_rate: float
    average_coc_return: float
    total_income: float             # All rent entries plus short-term income
    real_estate_income: float       # total_income minus total_expenses
    property_count: int


@dataclass(frozen=True)
class RetirementPlan(Record):
    """Derived retirement figures."""
    years_until_retirement: int
    monthly_spend: float
    annual_spend: float
    allocation_total: int
    is_valid: bool
    dollars: Dict[str, int]


@dataclass(frozen=True)
class SavingsProgress(Record):
    """Progress towards one savings goal."""
    goal_id: Optional[str]
    name: str
    percent_complete: float
    remaining: float
    reached: bool
