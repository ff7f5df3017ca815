"""
Metric Formatter

Turns metric values into display strings. This is the single rounding point
in the engine: values stay unrounded through conversion and aggregation and
are rounded half-up exactly once here.

Locale conventions follow the display currency:
- BRL (pt-BR): R$ 1.234,56   5,00%   0,60x   1.000
- USD (en-US): $1,234.56     5.00%   0.60x   1,000
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, localcontext
from typing import Any, Optional, Union
import logging

from ...config import config
from ...utils.timezone_utils import format_for_display
from ..calculators import BaseCalculator, validate_currency
from ..currency.exchange_rate_service import ExchangeRate
from ..currency.normalizer import convert
from ..metrics.registry import MetricUnit

logger = logging.getLogger(__name__)

# currency -> (symbol, symbol separator, thousands separator, decimal separator)
LOCALE_CONVENTIONS = {
    'BRL': ('R$', ' ', '.', ','),
    'USD': ('$', '', ',', '.'),
}

# Compact suffixes used by format_currency_short
COMPACT_SUFFIXES = {
    'BRL': ((1_000_000_000, ' bi'), (1_000_000, ' mi')),
    'USD': ((1_000_000_000, 'B'), (1_000_000, 'M')),
}

NEVER_UPDATED = 'never'


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal(0)
    number = BaseCalculator.finite_or_zero(value)
    try:
        return Decimal(repr(number))
    except InvalidOperation:
        return Decimal(0)


def _group_digits(value: Decimal, decimals: int, currency: str) -> str:
    """Round half-up to `decimals` and apply the currency's separators; sign preserved."""
    _, _, thousands_sep, decimal_sep = LOCALE_CONVENTIONS[currency]
    quantum = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        # Enough digits for any finite float
        ctx.prec = 400
        rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)

    sign = '-' if rounded < 0 else ''
    integer_part, _, fraction_part = f"{abs(rounded):.{decimals}f}".partition('.')
    grouped = f"{int(integer_part):,}".replace(',', thousands_sep)
    if decimals:
        return f"{sign}{grouped}{decimal_sep}{fraction_part}"
    return f"{sign}{grouped}"


def _with_symbol(number_text: str, currency: str) -> str:
    symbol, symbol_sep, _, _ = LOCALE_CONVENTIONS[currency]
    if number_text.startswith('-'):
        return f"-{symbol}{symbol_sep}{number_text[1:]}"
    return f"{symbol}{symbol_sep}{number_text}"


def format_currency(value: Any, currency: str) -> str:
    """R$ 1.234,56 / $1,234.56 (two decimals, half-up)"""
    currency = validate_currency(currency)
    return _with_symbol(_group_digits(_to_decimal(value), 2, currency), currency)


def format_percentage(value: Any, currency: str = 'USD', precision: Optional[int] = None) -> str:
    """
    Percentage with 1 or 2 decimals.

    Args:
        precision: 1 for headline KPI cards, 2 for table cells; defaults to
            PERCENTAGE_PRECISION (2)
    """
    currency = validate_currency(currency)
    if precision is None:
        precision = config.PERCENTAGE_PRECISION
    if precision not in (1, 2):
        raise ValueError(f"Percentage precision must be 1 or 2, got {precision}")
    return f"{_group_digits(_to_decimal(value), precision, currency)}%"


def format_multiplier(value: Any, currency: str = 'USD') -> str:
    """ROAS style: 0.60x"""
    currency = validate_currency(currency)
    return f"{_group_digits(_to_decimal(value), 2, currency)}x"


def format_count(value: Any, currency: str = 'USD') -> str:
    """Whole number with thousands separators"""
    currency = validate_currency(currency)
    return _group_digits(_to_decimal(value), 0, currency)


def format_value(value: Any, unit: Union[MetricUnit, str], currency: str,
                 precision: Optional[int] = None) -> str:
    """
    Format a metric value for display.

    Args:
        value: Raw (unrounded) metric value
        unit: MetricUnit of the metric
        currency: Display currency; picks symbol and separators
        precision: Percentage decimals (1 or 2), ignored for other units

    Returns:
        str: Display string; negative values keep their sign
    """
    unit = MetricUnit(unit)
    if unit == MetricUnit.CURRENCY:
        return format_currency(value, currency)
    if unit == MetricUnit.PERCENTAGE:
        return format_percentage(value, currency, precision)
    if unit == MetricUnit.MULTIPLIER:
        return format_multiplier(value, currency)
    if unit == MetricUnit.COUNT:
        return format_count(value, currency)
    return '' if value is None else str(value)


def format_currency_short(value: Any, currency: str) -> str:
    """
    Compact currency for chart axes and small cards.

    Below one million: whole units (R$ 1.235). From one million: one decimal
    with a suffix (R$ 1,2 mi / $1.2M).
    """
    currency = validate_currency(currency)
    amount = _to_decimal(value)
    for threshold, suffix in COMPACT_SUFFIXES[currency]:
        if abs(amount) >= threshold:
            scaled = amount / Decimal(threshold)
            return _with_symbol(_group_digits(scaled, 1, currency), currency) + suffix
    return _with_symbol(_group_digits(amount, 0, currency), currency)


def format_dual_currency(amount: Any, native_currency: str, rate: Union[ExchangeRate, float]) -> str:
    """
    Native amount followed by its equivalent in the other currency.

    format_dual_currency(550, 'BRL', 5.5) -> 'R$ 550,00 (≈ $100.00)'
    """
    native = validate_currency(native_currency)
    other = 'USD' if native == 'BRL' else 'BRL'
    number = BaseCalculator.finite_or_zero(amount if amount is not None else 0)
    equivalent = convert(number, native, other, rate)
    return f"{format_currency(number, native)} (≈ {format_currency(equivalent, other)})"


def format_last_updated(exchange_rate: ExchangeRate, timezone: Optional[str] = None) -> str:
    """Stale-rate marker: fetch time in the display timezone, or 'never' for the fallback"""
    if exchange_rate.fetched_at is None:
        return NEVER_UPDATED
    return format_for_display(exchange_rate.fetched_at, timezone)
