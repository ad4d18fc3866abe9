from .forecast_service import ForecastService, ProjectionResult, SupplierProjection
from .planning_service import PlanningService, PlanProposal, build_plan_record
from .cash_planning_service import CashPlanningService, MonthlyCashSummary

__all__ = [
    'ForecastService',
    'ProjectionResult',
    'SupplierProjection',
    'PlanningService',
    'PlanProposal',
    'build_plan_record',
    'CashPlanningService',
    'MonthlyCashSummary'
]
