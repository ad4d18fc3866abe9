"""
Tests for the planning, projection and cash planning services.
"""
import unittest
from unittest.mock import MagicMock

from purchase_planning.core.cash_planning import FAMILY_FACTORS
from purchase_planning.core.records import (
    EntityKind, ForecastMethod, PlanningRequest, Transaction, WindowMode
)
from purchase_planning.db.interface import DataSource
from purchase_planning.exceptions import NotFoundError, PlanError
from purchase_planning.services.cash_planning_service import (
    CashPlanningService, bill_category, day_budget, deposit_concept, paid_value
)
from purchase_planning.services.forecast_service import ForecastService
from purchase_planning.services.planning_service import (
    PlanningService, build_plan_record
)

HISTORY = [
    Transaction(f'2025-{month:02d}-15', amount, 's1', 'Acme', 2)
    for month, amount in zip(range(4, 10), [1000, 1100, 1200, 1300, 1400, 1500])
]

CURRENT = [
    Transaction('2025-10-03', 400.0, 's1', 'Acme', 2),
    Transaction('2025-10-20', 200.0, 's1', 'Acme', 2),
    Transaction('2025-10-05', 900.0, 's9', 'Nuevo', 300),
]

def fetch_by_range(kind, start, end_exclusive):
    if start == '2025-04-01' and end_exclusive == '2025-10-01':
        return list(HISTORY)
    if start == '2025-10-01' and end_exclusive == '2025-11-01':
        return list(CURRENT)
    return []

class TestPlanningService(unittest.TestCase):

    def setUp(self):
        self.data_source = MagicMock(spec=DataSource)
        self.data_source.fetch_transactions.side_effect = fetch_by_range
        self.data_source.fetch_scalar_param.return_value = None
        self.service = PlanningService(self.data_source, settings={'default_factor': 1.7})

    def test_default_factor(self):
        self.assertEqual(self.service.get_default_factor(), 1.7)

        self.data_source.fetch_scalar_param.return_value = 182
        self.assertAlmostEqual(self.service.get_default_factor(), 1.82)
        self.data_source.fetch_scalar_param.assert_called_with('factor_utilidad_default')

    def test_build_plan(self):
        proposal = self.service.build_plan(PlanningRequest('2025-10'))

        self.assertEqual(proposal.target_month, '2025-10')
        self.assertEqual(proposal.default_factor, 1.7)
        self.assertEqual([line.supplier_id for line in proposal.lines], ['s1', 's9'])

        acme, nuevo = proposal.lines
        self.assertAlmostEqual(acme.forecast_next, 1431.5625)
        self.assertAlmostEqual(acme.proposed_cost, 715.78125)
        self.assertAlmostEqual(acme.restock_cost, 300.0)
        self.assertAlmostEqual(acme.mix_cost, 507.890625)

        self.assertAlmostEqual(nuevo.restock_cost, 300.0)
        self.assertAlmostEqual(nuevo.mix_cost, 150.0)
        self.assertAlmostEqual(proposal.totals.total_mix, 657.890625)

        self.data_source.fetch_transactions.assert_any_call(EntityKind.SALES, '2025-04-01', '2025-10-01')
        self.data_source.fetch_transactions.assert_any_call(EntityKind.SALES, '2025-10-01', '2025-11-01')

    def test_build_plan_manual_window(self):
        request = PlanningRequest(
            '2025-10', ForecastMethod.AVG6, window_mode=WindowMode.MANUAL,
            start_month='2025-09', end_month='2025-04'
        )
        proposal = self.service.build_plan(request)

        self.assertEqual(proposal.window.start_month, '2025-04')
        self.assertEqual(proposal.target_month, '2025-10')
        self.assertAlmostEqual(proposal.lines[0].forecast_next, 1250.0)

    def test_plan_record(self):
        proposal = self.service.build_plan(PlanningRequest('2025-10'))
        header, lines = build_plan_record(proposal)

        self.assertEqual(header['plan_month'], '2025-10-01')
        self.assertEqual(header['method'], 'weighted')
        self.assertEqual(header['policy'], 'restock')
        self.assertAlmostEqual(header['weights']['p3'], 0.5)
        self.assertEqual(header['totals']['mix'], 657.89)
        self.assertEqual(header['totals']['proposed'], 715.78)

        self.assertEqual(lines[0]['factor'], 2.0)
        self.assertEqual(lines[0]['proposed'], 715.78)
        self.assertEqual(lines[0]['mix'], 507.89)
        self.assertEqual(lines[0]['final'], 715.78)
        self.assertEqual(lines[1]['supplier_name'], 'Nuevo')

    def test_plan_record_without_weights(self):
        proposal = self.service.build_plan(PlanningRequest('2025-10', ForecastMethod.EXP))
        header, _ = build_plan_record(proposal)
        self.assertIsNone(header['weights'])

    def test_save_plan(self):
        self.data_source.insert_plan.return_value = 7
        proposal = self.service.build_plan(PlanningRequest('2025-10'))

        self.assertEqual(self.service.save_plan(proposal), 7)
        header, lines = self.data_source.insert_plan.call_args[0]
        self.assertEqual(header['plan_month'], '2025-10-01')
        self.assertEqual(len(lines), 2)

    def test_save_empty_plan(self):
        self.data_source.fetch_transactions.side_effect = None
        self.data_source.fetch_transactions.return_value = []
        proposal = self.service.build_plan(PlanningRequest('2025-10'))

        with self.assertRaises(PlanError):
            self.service.save_plan(proposal)
        self.data_source.insert_plan.assert_not_called()

    def test_missing_plan(self):
        self.data_source.get_plan.return_value = None
        self.data_source.delete_plan.return_value = 0

        with self.assertRaises(NotFoundError):
            self.service.get_plan(3)
        with self.assertRaises(NotFoundError):
            self.service.delete_plan(3)

    def test_month_kpis(self):
        self.data_source.fetch_month_rows.return_value = [
            {'amount': 100, 'paid_at': '2025-10-03'},
            {'amount': '50', 'paid_at': None},
        ]

        kpis = self.service.month_kpis('2025-10')

        self.data_source.fetch_month_rows.assert_called_once_with(
            'purchases', 'pay_date', '2025-10-01', '2025-11-01'
        )
        self.assertEqual(kpis['sales_total'], 1500.0)
        self.assertAlmostEqual(kpis['supplier_cost'], 600.0)
        self.assertEqual(kpis['payables_due_total'], 150.0)
        self.assertEqual(kpis['payables_due_paid'], 100.0)
        self.assertEqual(kpis['payables_due_pending'], 50.0)

class TestForecastService(unittest.TestCase):

    def setUp(self):
        self.data_source = MagicMock(spec=DataSource)
        self.data_source.fetch_transactions.side_effect = fetch_by_range
        self.service = ForecastService(self.data_source)

    def test_project(self):
        request = PlanningRequest('2025-10', ForecastMethod.AVG6, horizon=3)
        result = self.service.project(request)

        self.assertEqual(result.horizon, 3)
        self.assertEqual(len(result.rows), 1)

        row = result.rows[0]
        self.assertEqual(row.history, (1000, 1100, 1200, 1300, 1400, 1500))
        self.assertEqual(row.total_window, 7500)
        self.assertEqual(row.next_month, 1250.0)
        self.assertEqual(row.total_horizon, 3750.0)
        self.assertEqual(result.total_next_month, 1250.0)

    def test_trend_projection_is_not_clamped(self):
        self.data_source.fetch_transactions.side_effect = None
        self.data_source.fetch_transactions.return_value = [
            Transaction('2025-07-01', 500.0, 's1'),
            Transaction('2025-08-01', 300.0, 's1'),
            Transaction('2025-09-01', 100.0, 's1'),
        ]
        request = PlanningRequest('2025-10', ForecastMethod.TREND, history_months=3, horizon=2)

        row = self.service.project(request).rows[0]

        self.assertAlmostEqual(row.forecast[0], -100.0)
        self.assertAlmostEqual(row.forecast[1], -300.0)

    def test_project_purchases(self):
        self.data_source.fetch_transactions.side_effect = None
        self.data_source.fetch_transactions.return_value = []

        result = self.service.project(PlanningRequest('2025-10'), EntityKind.PURCHASES)

        self.assertEqual(result.rows, ())
        self.assertEqual(self.data_source.fetch_transactions.call_args[0][0], EntityKind.PURCHASES)

MONTH_ROWS = {
    'finance_invoices_daily': [
        {'cartuchos': '500', 'comerciales': 300, 'importados': 200, 'total': 1000},
    ],
    'finance_deposits': [
        {'concept': 'TARJETAS', 'amount': 500},
        {'concept': 'efectivo', 'amount': '300'},
        {'concept': 'Traspaso', 'amount': 0},
    ],
    'finance_client_bank_payments': [{'amount': 100}],
    'finance_vouchers': [{'amount': 150}],
    'finance_pending_payments': [{'amount': 200}],
    'finance_supplier_bills': [
        {'category': 'PROVEEDORES', 'amount': 400, 'paid_amount': 300},
        {'category': 'tecnos', 'amount': 50, 'paid_amount': 0},
    ],
    'finance_expenses': [{'amount': 120, 'paid_amount': None}],
    'finance_days': [
        {'go_del_dia': 300},
        {'go_del_dia': None, 'totals': {'go_del_dia': 200}},
    ],
}

class TestCashPlanningService(unittest.TestCase):

    def setUp(self):
        self.data_source = MagicMock(spec=DataSource)
        self.data_source.fetch_month_rows.side_effect = (
            lambda table, column, start, end: MONTH_ROWS.get(table, [])
        )
        self.service = CashPlanningService(self.data_source, family_factors=dict(FAMILY_FACTORS))

    def test_monthly_summary(self):
        summary = self.service.monthly_summary('2025-10')
        planning = summary.planning

        self.assertEqual(summary.family_sales, {'cartuchos': 500.0, 'comerciales': 300.0, 'importados': 200.0})
        self.assertEqual(summary.deposits_by_concept['TARJETAS'], 500.0)
        self.assertEqual(summary.deposits_by_concept['EFECTIVO'], 300.0)
        self.assertEqual(summary.deposits_by_concept['OTROS'], 0.0)

        expected_requirement = 400.0 / 1.70 + 240.0 / 1.82 + 160.0 / 1.53
        self.assertAlmostEqual(planning.collection_ratio, 0.8)
        self.assertAlmostEqual(planning.total_requirement, expected_requirement)
        self.assertEqual(planning.paid_to_suppliers, 350.0)
        self.assertAlmostEqual(planning.shortfall, expected_requirement - 350.0)
        self.assertEqual(planning.total_deposited, 900.0)
        self.assertEqual(planning.post_voucher_liquidity, 750.0)
        self.assertEqual(planning.operating_budget, 500.0)
        self.assertEqual(planning.operating_paid, 120.0)
        self.assertEqual(planning.operating_headroom, 380.0)

        self.assertEqual(summary.family_plan['deposited'], 900.0)

    def test_bills_and_expenses_are_read_by_payment_date(self):
        self.service.monthly_summary('2025-10')

        self.data_source.fetch_month_rows.assert_any_call(
            'finance_supplier_bills', 'paid_at', '2025-10-01', '2025-11-01'
        )
        self.data_source.fetch_month_rows.assert_any_call(
            'finance_expenses', 'paid_at', '2025-10-01', '2025-11-01'
        )

    def test_empty_month(self):
        self.data_source.fetch_month_rows.side_effect = None
        self.data_source.fetch_month_rows.return_value = []

        planning = self.service.monthly_summary('2025-10').planning

        self.assertEqual(planning.collection_ratio, 0.0)
        self.assertEqual(planning.shortfall, 0.0)

    def test_row_helpers(self):
        self.assertEqual(paid_value({'amount': 80, 'paid_amount': '50'}), 50.0)
        self.assertEqual(paid_value({'amount': 80, 'paid_amount': 0}), 80.0)
        self.assertEqual(bill_category('Decam SA'), 'DECAM')
        self.assertEqual(bill_category(None), 'PROVEEDORES')
        self.assertEqual(deposit_concept('anticipo cliente'), 'ANTICIPO')
        self.assertEqual(day_budget({'totals': {'go_del_dia': '1,500.00'}}), 1500.0)

if __name__ == '__main__':
    unittest.main()
