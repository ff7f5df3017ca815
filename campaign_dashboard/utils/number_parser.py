"""
Number Parser

Parses campaign values that arrive as text from storage, spreadsheets or
Google Ads exports. Handles both number styles seen in the data:

- Brazilian:      1.234,56   780,00   2.000   12,5%
- International:  1,234.56   780.00   2,000   12.5%

Currency symbols and surrounding quotes are stripped. Markers that look like
values but are not numbers ("Diário", "--", "paused", ...) are never converted.
"""

import math
import re
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

CURRENCY_PATTERN = re.compile(r'US\$|R\$|[$€£¥¢₹₽₩₪]')

# Thousand separators only, no decimals: 2.000 / 15.000 and 2,000 / 15,000
THOUSAND_ONLY_BRAZILIAN = re.compile(r'^-?\d{1,3}(\.\d{3})+$')
THOUSAND_ONLY_INTERNATIONAL = re.compile(r'^-?\d{1,3}(,\d{3})+$')

# With decimals: 1.234,56 / 780,00 and 1,234.56 / 780.00
BRAZILIAN_NUMBER = re.compile(r'^-?[\d.]*,\d{1,4}$')
INTERNATIONAL_NUMBER = re.compile(r'^-?[\d,]*\.\d{1,4}$')

SIMPLE_NUMBER = re.compile(r'^-?\d+$')

LETTERS = re.compile(r'[a-zA-ZáàâãéèêíïóôõöúçñÁÀÂÃÉÈÊÍÏÓÔÕÖÚÇÑ]')

NON_NUMERIC_VALUES = {
    'diário', 'daily', 'diario',
    '--', '-', '—', '–',
    'n/a', 'na', 'null', 'none', 'undefined',
    'automático', 'automatic', 'automatico',
    'manual', 'maximize', 'maximizar',
    'target', 'alvo', 'objetivo',
    'enhanced', 'melhorado', 'aprimorado',
    'smart', 'inteligente',
    'portfolio', 'portfólio',
    'pausada', 'ativa', 'ativo', 'paused', 'active', 'enabled', 'disabled'
}


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        value = value[1:-1].strip()
    return value


def _is_non_numeric_marker(value: str) -> bool:
    return value.lower().strip() in NON_NUMERIC_VALUES


def _parse_numeric_string(value: str) -> Optional[float]:
    """Parse a cleaned string (no symbols, no %, no spaces) by detected style."""
    if not re.search(r'\d', value) or LETTERS.search(value):
        return None

    if THOUSAND_ONLY_BRAZILIAN.match(value):
        return float(value.replace('.', ''))

    if THOUSAND_ONLY_INTERNATIONAL.match(value):
        return float(value.replace(',', ''))

    if BRAZILIAN_NUMBER.match(value):
        return float(value.replace('.', '').replace(',', '.'))

    if INTERNATIONAL_NUMBER.match(value):
        return float(value.replace(',', ''))

    if SIMPLE_NUMBER.match(value):
        return float(value)

    # More than four decimals, e.g. "12.34567"
    try:
        return float(value)
    except ValueError:
        return None


def parse_number(raw: Any) -> Optional[float]:
    """
    Parse a raw campaign value into a float.

    Args:
        raw: number, numeric string in Brazilian or international style, or None

    Returns:
        The parsed value (a percentage string yields its numeric part, so
        "12,5%" -> 12.5), or None when the value is not a finite number
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else None

    if not isinstance(raw, str):
        return None

    clean_value = _strip_quotes(raw)
    if not clean_value or _is_non_numeric_marker(clean_value):
        return None

    numeric_value = CURRENCY_PATTERN.sub('', clean_value)
    numeric_value = re.sub(r'\s', '', numeric_value)
    if numeric_value.endswith('%'):
        numeric_value = numeric_value[:-1]

    if not numeric_value or _is_non_numeric_marker(numeric_value):
        return None

    parsed = _parse_numeric_string(numeric_value)
    if parsed is None or not math.isfinite(parsed):
        return None
    return parsed


def is_numeric_value(raw: Any) -> bool:
    """True if parse_number would produce a number for this value"""
    return parse_number(raw) is not None


def parse_budget_brl(raw: Any) -> float:
    """
    Parse a budget ("orçamento") value, Brazilian style first.

    "1.200,00" -> 1200.0, "1.200" -> 1200.0, "1200.50" -> 1200.5, "R$ 780" -> 780.0.
    Anything unparseable is 0.0.
    """
    if isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        return float(raw) if math.isfinite(raw) else 0.0
    if not raw or not isinstance(raw, str):
        return 0.0

    clean_value = CURRENCY_PATTERN.sub('', raw).strip()
    clean_value = re.sub(r'\s', '', clean_value)
    if not clean_value or clean_value in ('-', '--'):
        return 0.0

    if ',' in clean_value and clean_value.rfind(',') > clean_value.rfind('.'):
        # Brazilian: 1.200,50 / 1.200.500,75
        clean_value = clean_value.replace('.', '').replace(',', '.')
    elif '.' in clean_value and ',' not in clean_value:
        parts = clean_value.split('.')
        if len(parts) > 2 or len(parts[1]) > 2:
            # Brazilian thousands: 1.200 / 1.200.500
            clean_value = clean_value.replace('.', '')
    elif ',' in clean_value:
        # International with decimals: 1,200.50
        clean_value = clean_value.replace(',', '')

    try:
        result = float(clean_value)
    except ValueError:
        logger.warning(f"Could not parse budget value {raw!r}, using 0.0")
        return 0.0

    return result if math.isfinite(result) else 0.0
