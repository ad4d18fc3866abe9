# purchase_planning/utils/validation.py
from typing import Dict, Iterable, List, Mapping, Optional

from purchase_planning.core.records import ForecastMethod, PlanningRequest, Transaction, WindowMode
from purchase_planning.utils.date_utils import normalize_to_ymd, parse_month_key
from purchase_planning.utils.math_utils import parse_money

def _supplier_info(row: Mapping) -> Mapping:
    nested = row.get('suppliers') or row.get('supplier')
    return nested if isinstance(nested, Mapping) else {}

def _optional_number(value) -> Optional[float]:
    if value is None or value == '':
        return None
    number = parse_money(value)
    return number if number != 0.0 else None

def coerce_transaction(row: Mapping, date_field: str = 'date') -> Optional[Transaction]:
    """Convert a raw store row into a Transaction.

    Supplier name and factor are read from a nested ``suppliers`` object
    (as returned by a joined select) or from flat ``supplier_name`` /
    ``supplier_factor`` columns.

    Args:
        row: Raw row
        date_field: Column holding the transaction date

    Returns:
        Transaction, or None if the row has no usable date
    """
    tx_date = normalize_to_ymd(row.get(date_field))
    if not tx_date:
        return None

    supplier = _supplier_info(row)
    name = supplier.get('name') or row.get('supplier_name') or '—'
    factor = supplier.get('factor') if supplier else row.get('supplier_factor')

    return Transaction(
        date=tx_date,
        amount=parse_money(row.get('amount')),
        supplier_id=str(row.get('supplier_id')),
        supplier_name=str(name),
        supplier_factor=_optional_number(factor)
    )

def coerce_transactions(rows: Iterable[Mapping], date_field: str = 'date') -> List[Transaction]:
    """Coerce every row, dropping the ones without a usable date."""
    transactions = []
    for row in rows or []:
        tx = coerce_transaction(row, date_field)
        if tx is not None:
            transactions.append(tx)
    return transactions

def validate_planning_request(request: PlanningRequest) -> Dict[str, str]:
    """Validate a planning request.

    Args:
        request: Request to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if parse_month_key(request.reference_month) is None:
        errors['reference_month'] = 'Working month must be YYYY-MM'

    if not isinstance(request.method, ForecastMethod):
        errors['method'] = 'Unknown forecast method'

    if request.window_mode == WindowMode.MANUAL:
        if parse_month_key(request.start_month) is None:
            errors['start_month'] = 'Manual window start must be YYYY-MM'
        if parse_month_key(request.end_month) is None:
            errors['end_month'] = 'Manual window end must be YYYY-MM'

    if request.history_months < 1:
        errors['history_months'] = 'History window must cover at least one month'

    if request.horizon < 1:
        errors['horizon'] = 'Horizon must be at least one month'

    if any(w < 0 for w in request.weights.as_tuple()):
        errors['weights'] = 'Weights cannot be negative'

    return errors
