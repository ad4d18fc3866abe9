# purchase_planning/services/cash_planning_service.py
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from purchase_planning.config import config
from purchase_planning.core.cash_planning import (
    FAMILIES, compute_cash_planning, planning_numbers, sum_by_family
)
from purchase_planning.core.records import CashPlanning, MonthAggregates
from purchase_planning.db.interface import DataSource
from purchase_planning.logging_setup import get_logger
from purchase_planning.models import DepositConcept, SupplierBillCategory
from purchase_planning.utils.date_utils import month_start_iso, next_month_start_iso
from purchase_planning.utils.math_utils import parse_money

logger = get_logger(__name__)

OTHER_CONCEPT = 'OTROS'

@dataclass(frozen=True)
class MonthlyCashSummary:
    month: str
    family_sales: Dict[str, float]
    deposits_by_concept: Dict[str, float]
    aggregates: MonthAggregates
    planning: CashPlanning
    family_plan: Dict[str, Any]

def paid_value(row: Mapping) -> float:
    """Amount actually paid for a bill or expense row.

    ``paid_amount`` when it is positive, otherwise the full ``amount``.
    """
    paid = parse_money(row.get('paid_amount'))
    return paid if paid > 0 else parse_money(row.get('amount'))

def bill_category(raw) -> str:
    text = str(raw or '').strip().upper()
    if SupplierBillCategory.TECNOS.value in text:
        return SupplierBillCategory.TECNOS.value
    if SupplierBillCategory.DECAM.value in text:
        return SupplierBillCategory.DECAM.value
    return SupplierBillCategory.REGULAR.value

def deposit_concept(raw) -> str:
    text = str(raw or '').strip().upper()
    for concept in DepositConcept:
        if text.startswith(concept.value):
            return concept.value
    return OTHER_CONCEPT

def day_budget(row: Mapping) -> float:
    """Operating budget of a daily cash cut."""
    value = row.get('go_del_dia')
    if value is None and isinstance(row.get('totals'), Mapping):
        value = row['totals'].get('go_del_dia')
    return parse_money(value)

class CashPlanningService:
    """Service for the monthly collection and supplier payment plan."""

    def __init__(self, data_source: DataSource, family_factors: Optional[Dict[str, float]] = None):
        """Initialize the cash planning service.

        Args:
            data_source: Data store access
            family_factors: Markup factor per family, defaults to the
                FAMILY_FACTORS config section
        """
        self.data_source = data_source
        self._family_factors = family_factors

    @property
    def family_factors(self) -> Dict[str, float]:
        if self._family_factors is None:
            self._family_factors = config.family_factors
        return self._family_factors

    def _month_rows(self, table_name: str, date_column: str, month: str) -> List[Dict[str, Any]]:
        return self.data_source.fetch_month_rows(
            table_name, date_column, month_start_iso(month), next_month_start_iso(month)
        )

    def monthly_summary(self, month: str) -> MonthlyCashSummary:
        """Compute the cash plan of a month.

        Args:
            month: Month key (YYYY-MM)

        Returns:
            MonthlyCashSummary
        """
        invoices = self._month_rows('finance_invoices_daily', 'date', month)
        deposits = self._month_rows('finance_deposits', 'date', month)
        client_payments = self._month_rows('finance_client_bank_payments', 'date', month)
        vouchers = self._month_rows('finance_vouchers', 'date', month)
        pendings = self._month_rows('finance_pending_payments', 'date', month)
        bills = self._month_rows('finance_supplier_bills', 'paid_at', month)
        expenses = self._month_rows('finance_expenses', 'paid_at', month)
        days = self._month_rows('finance_days', 'day', month)

        sums = sum_by_family(invoices)
        family_sales = {family: sums[family] for family in FAMILIES}
        invoiced_total = sum(
            parse_money(row.get('total')) or sum(parse_money(row.get(f)) for f in FAMILIES)
            for row in invoices
        )

        deposits_by_concept = {concept.value: 0.0 for concept in DepositConcept}
        deposits_by_concept[OTHER_CONCEPT] = 0.0
        for row in deposits:
            deposits_by_concept[deposit_concept(row.get('concept'))] += parse_money(row.get('amount'))

        supplier_payments = {category.value: 0.0 for category in SupplierBillCategory}
        for row in bills:
            supplier_payments[bill_category(row.get('category'))] += paid_value(row)

        aggregates = MonthAggregates(
            invoiced_total=invoiced_total,
            uncollected_total=sum(parse_money(row.get('amount')) for row in pendings),
            family_sales=family_sales,
            family_factors=dict(self.family_factors),
            deposits_total=sum(deposits_by_concept.values()),
            client_payments_total=sum(parse_money(row.get('amount')) for row in client_payments),
            vouchers_total=sum(parse_money(row.get('amount')) for row in vouchers),
            supplier_payments=supplier_payments,
            operating_budget=sum(day_budget(row) for row in days),
            operating_paid=sum(paid_value(row) for row in expenses)
        )

        planning = compute_cash_planning(aggregates)
        family_plan = planning_numbers(
            invoices,
            aggregates.deposits_total,
            aggregates.client_payments_total,
            aggregates.vouchers_total,
            self.family_factors
        )

        logger.info(
            f"Cash plan for {month}: collection ratio {planning.collection_ratio:.2%}, "
            f"shortfall {planning.shortfall:.2f}"
        )
        if planning.shortfall > 0:
            logger.warning(f"Supplier payments for {month} are {planning.shortfall:.2f} below requirement")

        return MonthlyCashSummary(
            month=month,
            family_sales=family_sales,
            deposits_by_concept=deposits_by_concept,
            aggregates=aggregates,
            planning=planning,
            family_plan=family_plan
        )
