# purchase_planning/core/planning.py
from typing import Mapping, Optional

from .forecast import forecast_next
from .normalization import DEFAULT_FACTOR, normalize_factor, normalize_forecast_weights
from .records import (
    ForecastMethod, ForecastWeights, PlanLine, PlanResult, PlanTotals,
    SupplierSales, SupplierSeries
)

def build_plan_line(
    supplier: SupplierSeries,
    current_sales: Optional[SupplierSales],
    method: ForecastMethod,
    weights: Optional[ForecastWeights] = None,
    default_factor: float = DEFAULT_FACTOR
) -> PlanLine:
    """Build the suggested order of a supplier with history in the window.

    Args:
        supplier: Supplier and its monthly series over the window
        current_sales: Supplier's sales in the working month, if any
        method: Forecast method
        weights: Blend weights for the weighted method
        default_factor: Fallback markup factor

    Returns:
        PlanLine
    """
    factor = normalize_factor(supplier.factor, default_factor)
    next_sales = forecast_next(method, supplier.series.as_list(), weights)

    proposed = next_sales / factor
    restock = max(0.0, (current_sales.amount if current_sales else 0.0) / factor)
    mix = (proposed + restock) / 2

    return PlanLine(
        supplier_id=supplier.supplier_id,
        supplier_name=supplier.supplier_name,
        factor=factor,
        forecast_next=next_sales,
        proposed_cost=proposed,
        restock_cost=restock,
        mix_cost=mix
    )

def build_restock_only_line(
    sales: SupplierSales,
    default_factor: float = DEFAULT_FACTOR
) -> PlanLine:
    """Build the line of a supplier that sold this month but has no history.

    There is no forecast component, so the mix is half of the restock and
    not an average against a zero forecast.
    """
    factor = normalize_factor(sales.factor, default_factor)
    restock = max(0.0, sales.amount / factor)

    return PlanLine(
        supplier_id=sales.supplier_id,
        supplier_name=sales.supplier_name,
        factor=factor,
        forecast_next=0.0,
        proposed_cost=0.0,
        restock_cost=restock,
        mix_cost=restock / 2
    )

def build_plan(
    history: Mapping[str, SupplierSeries],
    current_month_sales: Mapping[str, SupplierSales],
    method: ForecastMethod = ForecastMethod.WEIGHTED,
    weights: Optional[ForecastWeights] = None,
    default_factor: float = DEFAULT_FACTOR
) -> PlanResult:
    """Build the suggested purchase plan for the month after the window.

    Suppliers with history come first, in the order of ``history``; then
    suppliers that only have sales in the working month.

    Args:
        history: Supplier ID to SupplierSeries over the window
        current_month_sales: Supplier ID to the working month's sales
        method: Forecast method
        weights: Raw blend weights (normalized here)
        default_factor: Fallback markup factor

    Returns:
        PlanResult with lines and totals
    """
    normalized = None
    if method == ForecastMethod.WEIGHTED:
        normalized = normalize_forecast_weights(weights or ForecastWeights())

    lines = [
        build_plan_line(
            supplier,
            current_month_sales.get(supplier_id),
            method,
            normalized,
            default_factor
        )
        for supplier_id, supplier in history.items()
    ]

    for supplier_id, sales in current_month_sales.items():
        if supplier_id not in history:
            lines.append(build_restock_only_line(sales, default_factor))

    return PlanResult(
        lines=tuple(lines),
        totals=summarize_lines(lines),
        method=method,
        weights=normalized
    )

def summarize_lines(lines) -> PlanTotals:
    """Add up the plan lines."""
    return PlanTotals(
        total_forecast=sum(line.forecast_next for line in lines),
        total_proposed=sum(line.proposed_cost for line in lines),
        total_restock=sum(line.restock_cost for line in lines),
        total_mix=sum(line.mix_cost for line in lines)
    )

def supplier_cost_of_sales(
    current_month_sales: Mapping[str, SupplierSales],
    default_factor: float = DEFAULT_FACTOR
) -> float:
    """Cost owed to suppliers for the working month's sales (sales / factor)."""
    return sum(
        sales.amount / normalize_factor(sales.factor, default_factor)
        for sales in current_month_sales.values()
    )
