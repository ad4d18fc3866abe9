# purchase_planning/services/planning_service.py
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from purchase_planning.config import config
from purchase_planning.core.aggregation import (
    aggregate_supplier_sales, build_historical_series, resolve_window
)
from purchase_planning.core.normalization import DEFAULT_FACTOR, normalize_factor
from purchase_planning.core.planning import build_plan, supplier_cost_of_sales
from purchase_planning.core.records import (
    EntityKind, ForecastMethod, HistoryWindow, PlanLine, PlanResult, PlanTotals,
    PlanningRequest, SupplierSales
)
from purchase_planning.db.interface import DataSource
from purchase_planning.exceptions import NotFoundError, PlanError
from purchase_planning.logging_setup import get_logger
from purchase_planning.utils.date_utils import month_start_iso, next_month_start_iso
from purchase_planning.utils.math_utils import parse_money, round_money

logger = get_logger(__name__)

DEFAULT_FACTOR_PARAM = 'factor_utilidad_default'

@dataclass(frozen=True)
class PlanProposal:
    """A computed, not yet saved, purchase plan."""
    request: PlanningRequest
    window: HistoryWindow
    default_factor: float
    result: PlanResult

    @property
    def target_month(self) -> str:
        return self.window.target_month

    @property
    def lines(self) -> Tuple[PlanLine, ...]:
        return self.result.lines

    @property
    def totals(self) -> PlanTotals:
        return self.result.totals

def build_plan_record(proposal: PlanProposal) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """Shape a proposal into the stored plan header and lines.

    Args:
        proposal: Computed plan

    Returns:
        Tuple with the header dictionary and the list of line dictionaries
    """
    result = proposal.result
    totals = result.totals

    header = {
        'plan_month': month_start_iso(proposal.target_month),
        'method': result.method.value,
        'weights': result.weights.to_dict() if result.method == ForecastMethod.WEIGHTED and result.weights else None,
        'policy': 'restock',
        'budget': 0,
        'scale': 1,
        'totals': {
            'forecast': round_money(totals.total_forecast),
            'proposed': round_money(totals.total_proposed),
            'restock': round_money(totals.total_restock),
            'mix': round_money(totals.total_mix),
            'final': round_money(totals.total_proposed),
        },
    }

    lines = [
        {
            'supplier_id': line.supplier_id,
            'supplier_name': line.supplier_name,
            'factor': round(line.factor, 4),
            'forecast_next': round_money(line.forecast_next),
            'proposed': round_money(line.proposed_cost),
            'restock': round_money(line.restock_cost),
            'mix': round_money(line.mix_cost),
            'final': round_money(line.proposed_cost),
        }
        for line in result.lines
    ]

    return header, lines

class PlanningService:
    """Service for building, saving and reviewing purchase plans."""

    def __init__(self, data_source: DataSource, settings: Optional[Dict] = None):
        """Initialize the planning service.

        Args:
            data_source: Data store access
            settings: Planning settings, defaults to the PLANNING config section
        """
        self.data_source = data_source
        self._settings = settings

    @property
    def settings(self) -> Dict:
        if self._settings is None:
            self._settings = config.planning_config
        return self._settings

    def get_default_factor(self) -> float:
        """Resolve the global default markup factor.

        The stored parameter wins; the configured default (1.70 out of the
        box) applies when it is absent or invalid.
        """
        fallback = normalize_factor(self.settings.get('default_factor'), DEFAULT_FACTOR)
        raw = self.data_source.fetch_scalar_param(DEFAULT_FACTOR_PARAM)
        return normalize_factor(raw, fallback)

    def resolve_window(self, request: PlanningRequest) -> HistoryWindow:
        return resolve_window(
            request.reference_month,
            request.window_mode,
            request.start_month,
            request.end_month,
            request.history_months
        )

    def get_month_sales(self, month: str, default_factor: float) -> Dict[str, SupplierSales]:
        """Get the sales of a month summed per supplier."""
        transactions = self.data_source.fetch_transactions(
            EntityKind.SALES, month_start_iso(month), next_month_start_iso(month)
        )
        return aggregate_supplier_sales(transactions, default_factor)

    def build_plan(self, request: PlanningRequest) -> PlanProposal:
        """Build the suggested purchase plan for a request.

        Args:
            request: Planning request

        Returns:
            PlanProposal for the month right after the historical window
        """
        window = self.resolve_window(request)
        default_factor = self.get_default_factor()

        logger.info(
            f"Building purchase plan for {window.target_month} "
            f"using {request.method.value}, window {window.caption}"
        )

        history_transactions = self.data_source.fetch_transactions(
            EntityKind.SALES, window.start_iso, window.end_exclusive_iso
        )
        history = build_historical_series(history_transactions, window, default_factor)
        current_sales = self.get_month_sales(request.reference_month, default_factor)

        result = build_plan(
            history,
            current_sales,
            request.method,
            request.weights,
            default_factor
        )

        logger.info(
            f"Plan for {window.target_month}: {len(result.lines)} suppliers, "
            f"mix total {result.totals.total_mix:.2f}"
        )

        return PlanProposal(
            request=request,
            window=window,
            default_factor=default_factor,
            result=result
        )

    def save_plan(self, proposal: PlanProposal) -> Any:
        """Save a proposal as an immutable plan snapshot.

        Raises:
            PlanError if the proposal has no lines
        """
        if not proposal.lines:
            raise PlanError("No plan lines to save", code='EMPTY_PLAN')

        header, lines = build_plan_record(proposal)
        plan_id = self.data_source.insert_plan(header, lines)

        logger.info(f"Saved purchase plan {plan_id} for {header['plan_month']} with {len(lines)} lines")
        return plan_id

    def list_plans(self) -> List[Dict[str, Any]]:
        return self.data_source.list_plans()

    def get_plan(self, plan_id: Any) -> Dict[str, Any]:
        plan = self.data_source.get_plan(plan_id)
        if plan is None:
            raise NotFoundError(f"Purchase plan {plan_id} not found")
        return plan

    def delete_plan(self, plan_id: Any) -> None:
        """Delete a saved plan with all its lines."""
        deleted = self.data_source.delete_plan(plan_id)
        if not deleted:
            raise NotFoundError(f"Purchase plan {plan_id} not found")
        logger.info(f"Deleted purchase plan {plan_id}")

    def month_kpis(self, month: str) -> Dict[str, float]:
        """Informative figures of the working month.

        Returns:
            Dictionary with the supplier cost of the month's sales and the
            payables due in the month (total and already paid)
        """
        default_factor = self.get_default_factor()
        sales = self.get_month_sales(month, default_factor)

        payables = self.data_source.fetch_month_rows(
            'purchases', 'pay_date', month_start_iso(month), next_month_start_iso(month)
        )
        due_total = sum(parse_money(row.get('amount')) for row in payables)
        due_paid = sum(parse_money(row.get('amount')) for row in payables if row.get('paid_at'))

        return {
            'sales_total': sum(s.amount for s in sales.values()),
            'supplier_cost': supplier_cost_of_sales(sales, default_factor),
            'payables_due_total': due_total,
            'payables_due_paid': due_paid,
            'payables_due_pending': due_total - due_paid,
        }
