# purchase_planning/services/forecast_service.py
from dataclasses import dataclass
from typing import List, Tuple

from purchase_planning.core.aggregation import build_historical_series, resolve_window
from purchase_planning.core.forecast import forecast
from purchase_planning.core.records import EntityKind, HistoryWindow, PlanningRequest
from purchase_planning.db.interface import DataSource
from purchase_planning.logging_setup import get_logger

logger = get_logger(__name__)

@dataclass(frozen=True)
class SupplierProjection:
    supplier_id: str
    supplier_name: str
    history: Tuple[float, ...]
    total_window: float
    forecast: Tuple[float, ...]

    @property
    def next_month(self) -> float:
        return self.forecast[0] if self.forecast else 0.0

    @property
    def total_horizon(self) -> float:
        return sum(self.forecast)

@dataclass(frozen=True)
class ProjectionResult:
    window: HistoryWindow
    horizon: int
    rows: Tuple[SupplierProjection, ...]

    @property
    def total_next_month(self) -> float:
        return sum(row.next_month for row in self.rows)

    @property
    def total_horizon(self) -> float:
        return sum(row.total_horizon for row in self.rows)

class ForecastService:
    """Service for multi-month sales projections per supplier."""

    def __init__(self, data_source: DataSource):
        """Initialize the forecast service.

        Args:
            data_source: Data store access
        """
        self.data_source = data_source

    def project(
        self,
        request: PlanningRequest,
        entity_kind: EntityKind = EntityKind.SALES
    ) -> ProjectionResult:
        """Project every supplier's monthly totals over the request horizon.

        Forecast values are returned as computed; the trend method may give
        negative values.

        Args:
            request: Planning request (method, weights, window, horizon)
            entity_kind: Which transactions to project

        Returns:
            ProjectionResult
        """
        window = resolve_window(
            request.reference_month,
            request.window_mode,
            request.start_month,
            request.end_month,
            request.history_months
        )

        transactions = self.data_source.fetch_transactions(
            entity_kind, window.start_iso, window.end_exclusive_iso
        )
        history = build_historical_series(transactions, window)

        rows: List[SupplierProjection] = []
        for supplier in history.values():
            values = supplier.series.as_list()
            rows.append(SupplierProjection(
                supplier_id=supplier.supplier_id,
                supplier_name=supplier.supplier_name,
                history=tuple(values),
                total_window=supplier.series.total(),
                forecast=tuple(forecast(request.method, values, request.horizon, request.weights))
            ))

        logger.info(
            f"Projected {len(rows)} suppliers over {request.horizon} months "
            f"from window {window.caption}"
        )

        return ProjectionResult(window=window, horizon=request.horizon, rows=tuple(rows))
