#!/usr/bin/env python3
"""
Campaign dashboard utilities package.
"""

from .timezone_utils import (
    get_system_timezone,
    get_display_timezone,
    now_utc,
    from_epoch_seconds,
    format_for_display
)
from .number_parser import parse_number, parse_budget_brl, is_numeric_value

__all__ = [
    # Timezone utilities
    'get_system_timezone',
    'get_display_timezone',
    'now_utc',
    'from_epoch_seconds',
    'format_for_display',
    # Number parsing
    'parse_number',
    'parse_budget_brl',
    'is_numeric_value'
]
