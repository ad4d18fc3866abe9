from .records import (
    ForecastMethod, WindowMode, EntityKind, Transaction, MonthlySeries,
    SupplierSeries, SupplierSales, ForecastWeights, HistoryWindow,
    PlanningRequest, PlanLine, PlanTotals, PlanResult, MonthAggregates,
    CashPlanning
)
from .normalization import (
    DEFAULT_FACTOR, normalize_factor, normalize_weights, normalize_forecast_weights
)
from .forecast import (
    forecast, forecast_next, forecast_avg6m, forecast_trend, forecast_exp,
    forecast_weighted
)
from .aggregation import resolve_window, build_historical_series, aggregate_supplier_sales
from .planning import build_plan, supplier_cost_of_sales
from .cash_planning import (
    sum_by_family, requirement_from_sales, planning_numbers, compute_cash_planning
)

__all__ = [
    'ForecastMethod',
    'WindowMode',
    'EntityKind',
    'Transaction',
    'MonthlySeries',
    'SupplierSeries',
    'SupplierSales',
    'ForecastWeights',
    'HistoryWindow',
    'PlanningRequest',
    'PlanLine',
    'PlanTotals',
    'PlanResult',
    'MonthAggregates',
    'CashPlanning',
    'DEFAULT_FACTOR',
    'normalize_factor',
    'normalize_weights',
    'normalize_forecast_weights',
    'forecast',
    'forecast_next',
    'forecast_avg6m',
    'forecast_trend',
    'forecast_exp',
    'forecast_weighted',
    'resolve_window',
    'build_historical_series',
    'aggregate_supplier_sales',
    'build_plan',
    'supplier_cost_of_sales',
    'sum_by_family',
    'requirement_from_sales',
    'planning_numbers',
    'compute_cash_planning'
]
