"""
Tests for date helpers and row validation.
"""
import unittest
from datetime import date, datetime

from purchase_planning.core.records import (
    ForecastMethod, ForecastWeights, PlanningRequest, WindowMode
)
from purchase_planning.utils.date_utils import (
    add_months, get_current_month, month_key_from_iso, month_label, months_between,
    next_month_start_iso, normalize_to_ymd, parse_month_key
)
from purchase_planning.utils.validation import (
    coerce_transaction, coerce_transactions, validate_planning_request
)

class TestDateUtils(unittest.TestCase):

    def test_parse_month_key(self):
        self.assertEqual(parse_month_key('2025-07'), (2025, 7))
        self.assertIsNone(parse_month_key('2025-13'))
        self.assertIsNone(parse_month_key('2025-7'))
        self.assertIsNone(parse_month_key(None))

    def test_add_months(self):
        self.assertEqual(add_months('2025-01', -1), '2024-12')
        self.assertEqual(add_months('2025-12', 1), '2026-01')
        self.assertEqual(add_months('2025-10', -6), '2025-04')
        with self.assertRaises(ValueError):
            add_months('bad', 1)

    def test_months_between(self):
        self.assertEqual(months_between('2024-11', '2025-02'), ['2024-11', '2024-12', '2025-01', '2025-02'])
        self.assertEqual(months_between('2025-03', '2025-01'), [])

    def test_month_bounds(self):
        self.assertEqual(next_month_start_iso('2025-12'), '2026-01-01')
        self.assertEqual(month_key_from_iso('2025-03-31T23:59:59Z'), '2025-03')
        self.assertEqual(get_current_month(date(2025, 8, 31)), '2025-08')

    def test_month_label(self):
        self.assertEqual(month_label('2025-10'), 'octubre 2025')
        self.assertEqual(month_label('oops'), 'oops')

    def test_normalize_to_ymd(self):
        self.assertEqual(normalize_to_ymd('2025-03-09T10:00:00'), '2025-03-09')
        self.assertEqual(normalize_to_ymd('9/3/2025'), '2025-03-09')
        self.assertEqual(normalize_to_ymd(date(2025, 3, 9)), '2025-03-09')
        self.assertEqual(normalize_to_ymd(datetime(2025, 3, 9, 23, 0)), '2025-03-09')
        self.assertEqual(normalize_to_ymd('ayer'), '')
        self.assertEqual(normalize_to_ymd(None), '')

class TestCoerceTransaction(unittest.TestCase):

    def test_nested_supplier(self):
        tx = coerce_transaction({
            'date': '2025-05-02',
            'amount': '1,250.00',
            'supplier_id': 7,
            'suppliers': {'name': 'Acme', 'factor': 170}
        })
        self.assertEqual(tx.date, '2025-05-02')
        self.assertEqual(tx.amount, 1250.0)
        self.assertEqual(tx.supplier_id, '7')
        self.assertEqual(tx.supplier_name, 'Acme')
        self.assertEqual(tx.supplier_factor, 170.0)

    def test_flat_supplier_columns(self):
        tx = coerce_transaction(
            {'pay_date': date(2025, 5, 2), 'amount': 10, 'supplier_id': 's1',
             'supplier_name': 'Beta', 'supplier_factor': '1.82'},
            'pay_date'
        )
        self.assertEqual(tx.date, '2025-05-02')
        self.assertEqual(tx.supplier_name, 'Beta')
        self.assertAlmostEqual(tx.supplier_factor, 1.82)

    def test_missing_supplier_details(self):
        tx = coerce_transaction({'date': '2025-05-02', 'amount': None, 'supplier_id': 's1', 'suppliers': None})
        self.assertEqual(tx.amount, 0.0)
        self.assertEqual(tx.supplier_name, '—')
        self.assertIsNone(tx.supplier_factor)

    def test_zero_factor_is_unknown(self):
        tx = coerce_transaction({'date': '2025-05-02', 'supplier_id': 's1', 'suppliers': {'factor': 0}})
        self.assertIsNone(tx.supplier_factor)

    def test_rows_without_date_are_dropped(self):
        rows = [
            {'date': None, 'amount': 5, 'supplier_id': 's1'},
            {'date': '2025-05-02', 'amount': 5, 'supplier_id': 's1'},
        ]
        self.assertIsNone(coerce_transaction(rows[0]))
        self.assertEqual(len(coerce_transactions(rows)), 1)
        self.assertEqual(coerce_transactions(None), [])

class TestValidatePlanningRequest(unittest.TestCase):

    def test_valid_request(self):
        self.assertEqual(validate_planning_request(PlanningRequest('2025-10')), {})

    def test_invalid_request(self):
        request = PlanningRequest(
            reference_month='2025-13',
            method='arima',
            weights=ForecastWeights(-1, 1, 1),
            window_mode=WindowMode.MANUAL,
            start_month='2025-01',
            end_month=None,
            history_months=0,
            horizon=0
        )
        errors = validate_planning_request(request)

        self.assertEqual(
            set(errors),
            {'reference_month', 'method', 'end_month', 'history_months', 'horizon', 'weights'}
        )

    def test_manual_window_ends(self):
        request = PlanningRequest(
            '2025-10', ForecastMethod.TREND, window_mode=WindowMode.MANUAL,
            start_month='2025-01', end_month='2025-06'
        )
        self.assertEqual(validate_planning_request(request), {})

if __name__ == '__main__':
    unittest.main()
