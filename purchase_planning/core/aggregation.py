# purchase_planning/core/aggregation.py
from collections import OrderedDict
from typing import Dict, Iterable, Optional

from .normalization import DEFAULT_FACTOR, normalize_factor
from .records import (
    HistoryWindow, MonthlySeries, SupplierSales, SupplierSeries, Transaction, WindowMode
)
from ..utils.date_utils import (
    add_months, get_current_month, month_key_from_iso, months_between, parse_month_key
)

DEFAULT_HISTORY_MONTHS = 6

def resolve_window(
    reference_month: str,
    mode: WindowMode = WindowMode.AUTO,
    start_month: Optional[str] = None,
    end_month: Optional[str] = None,
    history_months: int = DEFAULT_HISTORY_MONTHS
) -> HistoryWindow:
    """Resolve the historical window for a working month.

    Automatic mode takes the ``history_months`` months before
    ``reference_month``; the reference month itself is left out. Manual mode
    uses the inclusive [start_month, end_month] range, swapping the ends when
    they are inverted. A missing or malformed manual end falls back to the
    automatic one.

    Args:
        reference_month: Working month as ``YYYY-MM``
        mode: Window mode
        start_month: Manual range start (inclusive)
        end_month: Manual range end (inclusive)
        history_months: Length of the automatic window

    Returns:
        HistoryWindow
    """
    if parse_month_key(reference_month) is None:
        reference_month = get_current_month()

    auto_start = add_months(reference_month, -history_months)
    auto_end = add_months(reference_month, -1)

    if mode == WindowMode.MANUAL:
        start = start_month if parse_month_key(start_month) else auto_start
        end = end_month if parse_month_key(end_month) else auto_end
        if start > end:
            start, end = end, start
    else:
        start, end = auto_start, auto_end

    months = tuple(months_between(start, end))
    return HistoryWindow(
        mode=mode,
        months=months,
        start_month=start,
        end_month=end,
        target_month=add_months(end, 1)
    )

def build_historical_series(
    transactions: Iterable[Transaction],
    window: HistoryWindow,
    default_factor: float = DEFAULT_FACTOR
) -> Dict[str, SupplierSeries]:
    """Group transactions into one zero-filled monthly series per supplier.

    Only transactions whose month falls inside the window are counted.
    Suppliers without any transaction in the window are left out. The name
    and factor of a supplier come from its first transaction.

    Args:
        transactions: Coerced transactions
        window: Resolved historical window
        default_factor: Factor used when a supplier has none

    Returns:
        Dictionary mapping supplier ID to its SupplierSeries, in order of
        first appearance
    """
    in_window = set(window.months)
    grouped = OrderedDict()

    for tx in transactions:
        ym = month_key_from_iso(tx.date)
        if ym not in in_window:
            continue

        row = grouped.get(tx.supplier_id)
        if row is None:
            row = {
                'name': tx.supplier_name,
                'factor': normalize_factor(tx.supplier_factor, default_factor),
                'months': {}
            }
            grouped[tx.supplier_id] = row

        row['months'][ym] = row['months'].get(ym, 0.0) + tx.amount

    result = OrderedDict()
    for supplier_id, row in grouped.items():
        values = tuple(row['months'].get(ym, 0.0) for ym in window.months)
        result[supplier_id] = SupplierSeries(
            supplier_id=supplier_id,
            supplier_name=row['name'],
            factor=row['factor'],
            series=MonthlySeries(months=window.months, values=values)
        )

    return result

def aggregate_supplier_sales(
    transactions: Iterable[Transaction],
    default_factor: float = DEFAULT_FACTOR
) -> Dict[str, SupplierSales]:
    """Sum the working month's sales per supplier."""
    grouped = OrderedDict()

    for tx in transactions:
        previous = grouped.get(tx.supplier_id)
        if previous is None:
            grouped[tx.supplier_id] = SupplierSales(
                supplier_id=tx.supplier_id,
                supplier_name=tx.supplier_name,
                amount=tx.amount,
                factor=normalize_factor(tx.supplier_factor, default_factor)
            )
        else:
            grouped[tx.supplier_id] = SupplierSales(
                supplier_id=previous.supplier_id,
                supplier_name=previous.supplier_name,
                amount=previous.amount + tx.amount,
                factor=previous.factor
            )

    return grouped
