# purchase_planning/core/cash_planning.py
from typing import Dict, Iterable, Mapping, Optional

from .records import CashPlanning, MonthAggregates
from ..utils.math_utils import parse_money

FAMILIES = ('cartuchos', 'comerciales', 'importados')

FAMILY_FACTORS = {
    'cartuchos': 1.70,
    'comerciales': 1.82,
    'importados': 1.53,
}

def sum_by_family(invoices: Iterable[Mapping]) -> Dict[str, float]:
    """Sum daily invoice rows per product family.

    Args:
        invoices: Rows with one amount column per family

    Returns:
        Dictionary with the total of each family plus ``total``
    """
    sums = {family: 0.0 for family in FAMILIES}
    for row in invoices:
        for family in FAMILIES:
            sums[family] += parse_money(row.get(family))

    sums['total'] = sum(sums[family] for family in FAMILIES)
    return sums

def _family_cost(amount: float, factor: float) -> float:
    return amount / factor if factor and factor > 0 else 0.0

def requirement_from_sales(
    sums: Mapping[str, float],
    factors: Optional[Mapping[str, float]] = None
) -> Dict[str, float]:
    """Estimate what is owed to suppliers for each family (sales / factor)."""
    factors = factors or FAMILY_FACTORS
    requirement = {
        family: _family_cost(sums.get(family, 0.0), factors.get(family, 0.0))
        for family in FAMILIES
    }
    requirement['total'] = sum(requirement[family] for family in FAMILIES)
    return requirement

def planning_numbers(
    invoices: Iterable[Mapping],
    deposits_total: float = 0.0,
    client_payments_total: float = 0.0,
    vouchers_total: float = 0.0,
    factors: Optional[Mapping[str, float]] = None
) -> Dict:
    """Split the month's deposited money between suppliers and operations.

    Returns:
        Dictionary with family sums, requirement, deposited amount, money
        available before paying families, operating budget left and the
        family shortfall
    """
    sums = sum_by_family(invoices)
    requirement = requirement_from_sales(sums, factors)

    deposited = parse_money(deposits_total) + parse_money(client_payments_total)
    available_before = deposited - parse_money(vouchers_total)
    remaining = available_before - requirement['total']

    return {
        'sums': sums,
        'requirement': requirement,
        'deposited': deposited,
        'available_before_families': available_before,
        'operating_available': max(remaining, 0.0),
        'family_shortfall': max(-remaining, 0.0),
    }

def compute_cash_planning(aggregates: MonthAggregates) -> CashPlanning:
    """Compute the month's cash plan.

    The collection ratio is the share of invoiced sales already collected.
    Each family's collected sales divided by its factor estimates what is
    owed to suppliers; the shortfall is that estimate minus what was actually
    paid, never below zero.

    Args:
        aggregates: Month level totals

    Returns:
        CashPlanning
    """
    invoiced = aggregates.invoiced_total
    collection_ratio = (invoiced - aggregates.uncollected_total) / invoiced if invoiced > 0 else 0.0

    factors = aggregates.family_factors or FAMILY_FACTORS
    net_collected = {
        family: amount * collection_ratio
        for family, amount in aggregates.family_sales.items()
    }
    requirement = {
        family: _family_cost(amount, factors.get(family, 0.0))
        for family, amount in net_collected.items()
    }
    total_requirement = sum(requirement.values())

    paid_to_suppliers = sum(aggregates.supplier_payments.values())
    total_deposited = aggregates.deposits_total + aggregates.client_payments_total

    return CashPlanning(
        collection_ratio=collection_ratio,
        net_collected_by_family=net_collected,
        requirement_by_family=requirement,
        total_requirement=total_requirement,
        paid_to_suppliers=paid_to_suppliers,
        shortfall=max(total_requirement - paid_to_suppliers, 0.0),
        total_deposited=total_deposited,
        post_voucher_liquidity=total_deposited - aggregates.vouchers_total,
        operating_budget=aggregates.operating_budget,
        operating_paid=aggregates.operating_paid,
        operating_headroom=aggregates.operating_budget - aggregates.operating_paid
    )
