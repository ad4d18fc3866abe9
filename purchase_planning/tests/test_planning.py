"""
Tests for the purchase plan computation.
"""
import unittest

from purchase_planning.core.planning import build_plan, supplier_cost_of_sales
from purchase_planning.core.records import (
    ForecastMethod, ForecastWeights, MonthlySeries, SupplierSales, SupplierSeries
)

MONTHS = ('2025-04', '2025-05', '2025-06', '2025-07', '2025-08', '2025-09')

def make_series(supplier_id, values, factor=2.0, name=None):
    return SupplierSeries(
        supplier_id=supplier_id,
        supplier_name=name or supplier_id.upper(),
        factor=factor,
        series=MonthlySeries(months=MONTHS[-len(values):], values=tuple(values))
    )

class TestBuildPlan(unittest.TestCase):

    def test_weighted_plan_line(self):
        history = {'s1': make_series('s1', [1000, 1100, 1200, 1300, 1400, 1500])}
        current = {'s1': SupplierSales('s1', 'S1', 600.0, 2.0)}

        result = build_plan(history, current)
        line = result.lines[0]

        self.assertAlmostEqual(line.forecast_next, 1431.5625)
        self.assertAlmostEqual(line.proposed_cost, 715.78125)
        self.assertAlmostEqual(line.restock_cost, 300.0)
        self.assertAlmostEqual(line.mix_cost, 507.890625)

    def test_supplier_without_history_gets_half_restock(self):
        current = {'s9': SupplierSales('s9', 'Nuevo', 900.0, 3.0)}

        result = build_plan({}, current)
        line = result.lines[0]

        self.assertEqual(line.forecast_next, 0.0)
        self.assertEqual(line.proposed_cost, 0.0)
        self.assertAlmostEqual(line.restock_cost, 300.0)
        self.assertAlmostEqual(line.mix_cost, 150.0)

    def test_supplier_with_history_but_no_current_sales(self):
        history = {'s1': make_series('s1', [100, 100], factor=2.0)}

        line = build_plan(history, {}, ForecastMethod.AVG6).lines[0]

        self.assertEqual(line.restock_cost, 0.0)
        self.assertAlmostEqual(line.proposed_cost, 50.0)
        self.assertAlmostEqual(line.mix_cost, 25.0)

    def test_negative_trend_is_clamped(self):
        history = {'s1': make_series('s1', [500, 300, 100])}

        line = build_plan(history, {}, ForecastMethod.TREND).lines[0]

        self.assertEqual(line.forecast_next, 0.0)
        self.assertEqual(line.proposed_cost, 0.0)

    def test_invalid_factor_uses_default(self):
        history = {'s1': make_series('s1', [170, 170], factor=0)}

        line = build_plan(history, {}, ForecastMethod.AVG6, default_factor=1.7).lines[0]

        self.assertEqual(line.factor, 1.7)
        self.assertAlmostEqual(line.proposed_cost, 100.0)

    def test_line_order_and_totals(self):
        history = {
            's1': make_series('s1', [200, 200]),
            's2': make_series('s2', [400, 400]),
        }
        current = {
            's3': SupplierSales('s3', 'S3', 900.0, 3.0),
            's1': SupplierSales('s1', 'S1', 100.0, 2.0),
        }

        result = build_plan(history, current, ForecastMethod.AVG6)

        self.assertEqual([line.supplier_id for line in result.lines], ['s1', 's2', 's3'])
        self.assertAlmostEqual(result.totals.total_forecast, 600.0)
        self.assertAlmostEqual(result.totals.total_proposed, 300.0)
        self.assertAlmostEqual(result.totals.total_restock, 350.0)
        self.assertAlmostEqual(result.totals.total_mix, 75.0 + 100.0 + 150.0)

    def test_weights_are_normalized_for_weighted_method(self):
        history = {'s1': make_series('s1', [100, 100])}

        result = build_plan(history, {}, ForecastMethod.WEIGHTED, ForecastWeights(2, 3, 5))

        self.assertAlmostEqual(result.weights.avg, 0.2)
        self.assertAlmostEqual(result.weights.trend, 0.3)
        self.assertAlmostEqual(result.weights.exp, 0.5)

    def test_weights_are_dropped_for_other_methods(self):
        result = build_plan({}, {}, ForecastMethod.EXP, ForecastWeights(2, 3, 5))
        self.assertIsNone(result.weights)
        self.assertEqual(result.lines, ())
        self.assertEqual(result.totals.total_mix, 0.0)

    def test_supplier_cost_of_sales(self):
        current = {
            's1': SupplierSales('s1', 'S1', 600.0, 2.0),
            's2': SupplierSales('s2', 'S2', 900.0, 300),
        }
        self.assertAlmostEqual(supplier_cost_of_sales(current), 600.0)

if __name__ == '__main__':
    unittest.main()
