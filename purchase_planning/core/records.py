# purchase_planning/core/records.py
import enum
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..exceptions import ForecastError

class ForecastMethod(enum.Enum):
    """Projection methods offered to the purchasing team.

    Values:
        AVG6 ('avg6'): Mean of the last six months
        TREND ('trend'): Least-squares straight line
        EXP ('exp'): Exponential smoothing
        WEIGHTED ('weighted'): Blend of the three above
    """
    AVG6 = 'avg6'
    TREND = 'trend'
    EXP = 'exp'
    WEIGHTED = 'weighted'

    def __str__(self):
        """Return the string value of the enum."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> 'ForecastMethod':
        """Create a ForecastMethod from a string value.

        Raises:
            ForecastError if the string value is not a known method
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ForecastError(
                f"Invalid forecast method: {value}. Valid values are: avg6, trend, exp, weighted",
                code='UNKNOWN_METHOD'
            )

class WindowMode(enum.Enum):
    AUTO = 'auto6'
    MANUAL = 'manual'

    def __str__(self):
        return self.value

class EntityKind(enum.Enum):
    SALES = 'sales'
    PURCHASES = 'purchases'

@dataclass(frozen=True)
class Transaction:
    """A single sale or purchase row, already coerced at the boundary."""
    date: str
    amount: float
    supplier_id: str
    supplier_name: str = '—'
    supplier_factor: Optional[float] = None

@dataclass(frozen=True)
class MonthlySeries:
    """Consecutive monthly totals, one value per month key, no gaps."""
    months: Tuple[str, ...] = ()
    values: Tuple[float, ...] = ()

    def __len__(self):
        return len(self.values)

    def as_list(self):
        return list(self.values)

    def total(self) -> float:
        return sum(self.values)

@dataclass(frozen=True)
class SupplierSeries:
    supplier_id: str
    supplier_name: str
    factor: float
    series: MonthlySeries

@dataclass(frozen=True)
class SupplierSales:
    """Actual sales of one supplier in the working month."""
    supplier_id: str
    supplier_name: str
    amount: float
    factor: float

@dataclass(frozen=True)
class ForecastWeights:
    avg: float = 0.2
    trend: float = 0.3
    exp: float = 0.5

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.avg, self.trend, self.exp)

    def to_dict(self) -> Dict[str, float]:
        return {'p1': self.avg, 'p2': self.trend, 'p3': self.exp}

@dataclass(frozen=True)
class HistoryWindow:
    """Resolved historical window.

    ``months`` lists every month in the window in chronological order.
    ``target_month`` is the month right after the window, the one being
    forecast.
    """
    mode: WindowMode
    months: Tuple[str, ...]
    start_month: str
    end_month: str
    target_month: str

    @property
    def start_iso(self) -> str:
        return f"{self.start_month}-01"

    @property
    def end_exclusive_iso(self) -> str:
        return f"{self.target_month}-01"

    @property
    def caption(self) -> str:
        suffix = ', rango manual' if self.mode == WindowMode.MANUAL else ''
        return f"{self.start_month} → {self.end_month} ({len(self.months)} meses{suffix})"

@dataclass(frozen=True)
class PlanningRequest:
    """Everything a planning or projection run depends on.

    Replaces the mutable filter state of the screens: build a new request
    instead of changing one.
    """
    reference_month: str
    method: ForecastMethod = ForecastMethod.WEIGHTED
    weights: ForecastWeights = field(default_factory=ForecastWeights)
    window_mode: WindowMode = WindowMode.AUTO
    start_month: Optional[str] = None
    end_month: Optional[str] = None
    history_months: int = 6
    horizon: int = 1

@dataclass(frozen=True)
class PlanLine:
    supplier_id: str
    supplier_name: str
    factor: float
    forecast_next: float
    proposed_cost: float
    restock_cost: float
    mix_cost: float

@dataclass(frozen=True)
class PlanTotals:
    total_forecast: float = 0.0
    total_proposed: float = 0.0
    total_restock: float = 0.0
    total_mix: float = 0.0

@dataclass(frozen=True)
class PlanResult:
    lines: Tuple[PlanLine, ...]
    totals: PlanTotals
    method: ForecastMethod
    weights: Optional[ForecastWeights] = None

@dataclass(frozen=True)
class MonthAggregates:
    """Month level money totals feeding the cash plan.

    ``family_sales`` maps product family to invoiced sales,
    ``family_factors`` maps product family to its markup factor and
    ``supplier_payments`` maps supplier category to the amount paid.
    """
    invoiced_total: float = 0.0
    uncollected_total: float = 0.0
    family_sales: Dict[str, float] = field(default_factory=dict)
    family_factors: Dict[str, float] = field(default_factory=dict)
    deposits_total: float = 0.0
    client_payments_total: float = 0.0
    vouchers_total: float = 0.0
    supplier_payments: Dict[str, float] = field(default_factory=dict)
    operating_budget: float = 0.0
    operating_paid: float = 0.0

@dataclass(frozen=True)
class CashPlanning:
    collection_ratio: float
    net_collected_by_family: Dict[str, float]
    requirement_by_family: Dict[str, float]
    total_requirement: float
    paid_to_suppliers: float
    shortfall: float
    total_deposited: float
    post_voucher_liquidity: float
    operating_budget: float
    operating_paid: float
    operating_headroom: float
