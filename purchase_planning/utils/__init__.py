from .date_utils import (
    get_current_month, month_key_from_iso, parse_month_key, add_months,
    months_between, month_label, normalize_to_ymd
)
from .math_utils import parse_money, round_money

__all__ = [
    'get_current_month',
    'month_key_from_iso',
    'parse_month_key',
    'add_months',
    'months_between',
    'month_label',
    'normalize_to_ymd',
    'parse_money',
    'round_money'
]
