# Formatting Module
#
# Display strings for metric values (currency, percentage, multiplier, count).

from .formatter import (
    format_value,
    format_currency,
    format_percentage,
    format_multiplier,
    format_count,
    format_currency_short,
    format_dual_currency,
    format_last_updated
)

__all__ = [
    'format_value',
    'format_currency',
    'format_percentage',
    'format_multiplier',
    'format_count',
    'format_currency_short',
    'format_dual_currency',
    'format_last_updated'
]
