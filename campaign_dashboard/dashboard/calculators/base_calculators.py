"""
Base Calculator Classes and Utilities

This module provides the foundation for all campaign metric calculations:
- CampaignInput: Read-only, zero-defaulting view over one stored campaign record
- BaseCalculator: Guarded arithmetic shared by every metric formula
"""

import math
from dataclasses import dataclass
from typing import Dict, Any, Mapping, Optional, Union
import logging

from ...utils.number_parser import parse_number, parse_budget_brl

logger = logging.getLogger(__name__)

Number = Union[int, float]

SUPPORTED_CURRENCIES = ('BRL', 'USD')
DEFAULT_CURRENCY = 'USD'

# Raw numeric fields read from storage; every one defaults to 0.0 when absent
COUNT_FIELDS = (
    'impressoes',
    'cliques',
    'cliquesInvalidos',
    'conversoes',
    'visitors',
    'checkouts',
    'visualizacoes',
    'parcelaImpressaoRedeSearch',
    'isParteSuperiorPesquisa',
    'isPrimeiraPosicaoPesquisa',
    'parcelaImpressaoPerdidaOrcamento',
    'parcelaImpressaoPerdidaClassificacao',
)

# Denominated in the campaign's native currency
MONETARY_FIELDS = (
    'orcamento',
    'custo',
    'cpcMedio',
    'cpcMaximo',
    'comissao',
    'faturamento',
)

RAW_NUMERIC_FIELDS = COUNT_FIELDS + MONETARY_FIELDS

INACTIVE_MARKERS = {'false', '0', 'no', 'paused', 'pausada', 'inactive', 'disabled'}


class UnsupportedCurrency(ValueError):
    """Raised for a currency code other than BRL or USD."""

    def __init__(self, currency: Any):
        self.currency = currency
        super().__init__(f"Unsupported currency {currency!r}; expected one of {', '.join(SUPPORTED_CURRENCIES)}")


def validate_currency(currency: Any) -> str:
    """Normalize a currency code and check that it is supported."""
    code = str(currency).strip().upper() if currency is not None else ''
    if code not in SUPPORTED_CURRENCIES:
        raise UnsupportedCurrency(currency)
    return code


@dataclass(frozen=True)
class CampaignInput:
    """
    Standardized input structure for all metric formulas.

    Wraps the campaign record exactly as storage returns it. The record is
    never modified; every accessor returns a coerced copy of the value.
    """
    raw_record: Mapping[str, Any]

    def _number(self, field: str) -> float:
        raw = self.raw_record.get(field)
        if field == 'orcamento':
            return parse_budget_brl(raw)
        value = parse_number(raw)
        if value is None:
            if raw not in (None, ''):
                logger.warning(f"Campaign {self.campaign_id}: non-numeric {field}={raw!r}, using 0")
            return 0.0
        return value

    # === IDENTITY ===

    @property
    def campaign_id(self) -> Optional[str]:
        """Opaque campaign id"""
        value = self.raw_record.get('id')
        return None if value is None else str(value)

    @property
    def name(self) -> str:
        return str(self.raw_record.get('campanha') or '')

    @property
    def currency(self) -> str:
        """Native currency of every monetary field on the record"""
        raw = self.raw_record.get('currency')
        if raw in (None, ''):
            return DEFAULT_CURRENCY
        return validate_currency(raw)

    @property
    def is_active(self) -> bool:
        """Active/paused flag, active when absent"""
        raw = self.raw_record.get('isActive')
        if raw is None:
            return True
        if isinstance(raw, str):
            return raw.strip().lower() not in INACTIVE_MARKERS
        return bool(raw)

    @property
    def exchange_rate(self) -> Optional[float]:
        """USD->BRL rate cached on the record by storage, if it is usable"""
        value = parse_number(self.raw_record.get('exchangeRate'))
        if value is None or value <= 0:
            return None
        return value

    # === QUICK ACCESS PROPERTIES ===

    @property
    def impressoes(self) -> float:
        return self._number('impressoes')

    @property
    def cliques(self) -> float:
        return self._number('cliques')

    @property
    def conversoes(self) -> float:
        return self._number('conversoes')

    @property
    def custo(self) -> float:
        """Total cost in native currency"""
        return self._number('custo')

    @property
    def comissao(self) -> float:
        """Commission per conversion in native currency"""
        return self._number('comissao')

    @property
    def faturamento(self) -> float:
        """Revenue as recorded by storage (not the derived figure)"""
        return self._number('faturamento')

    @property
    def orcamento(self) -> float:
        """Budget, parsed Brazilian style when stored as text"""
        return self._number('orcamento')

    def raw_values(self) -> Dict[str, float]:
        """Every raw numeric field, coerced, zero when missing"""
        return {field: self._number(field) for field in RAW_NUMERIC_FIELDS}


def as_campaign_input(campaign: Union[CampaignInput, Mapping[str, Any]]) -> CampaignInput:
    """Accept either a stored record or an existing CampaignInput."""
    if isinstance(campaign, CampaignInput):
        return campaign
    if not isinstance(campaign, Mapping):
        raise TypeError(f"Campaign must be a mapping, got {type(campaign).__name__}")
    return CampaignInput(raw_record=campaign)


class BaseCalculator:
    """
    Base class providing guarded arithmetic.

    safe_divide is the only division the engine performs. Nothing here rounds:
    rounding happens once, in the formatter.
    """

    @staticmethod
    def finite_or_zero(value: Number) -> float:
        """Collapse NaN and +/-Infinity to 0.0"""
        try:
            result = float(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"finite_or_zero error: {e}, returning 0.0")
            return 0.0
        return result if math.isfinite(result) else 0.0

    @staticmethod
    def safe_divide(numerator: Number, denominator: Number) -> float:
        """
        Divide, resolving a zero divisor to 0.0.

        Args:
            numerator: The number to divide
            denominator: The number to divide by

        Returns:
            numerator / denominator, or 0.0 if the denominator is 0 or the
            result is not finite
        """
        try:
            if denominator == 0:
                return 0.0
            result = float(numerator) / float(denominator)
        except (TypeError, ValueError, OverflowError, ZeroDivisionError) as e:
            logger.warning(f"safe_divide error: {e}, returning 0.0")
            return 0.0
        return result if math.isfinite(result) else 0.0

    @staticmethod
    def safe_percentage(numerator: Number, denominator: Number) -> float:
        """
        Calculate percentage with safe division.

        Returns:
            Percentage (0-100 for proportions), 0.0 if denominator is 0
        """
        return BaseCalculator.finite_or_zero(BaseCalculator.safe_divide(numerator, denominator) * 100)

    @staticmethod
    def safe_multiply(left: Number, right: Number) -> float:
        try:
            return BaseCalculator.finite_or_zero(float(left) * float(right))
        except (TypeError, ValueError) as e:
            logger.warning(f"safe_multiply error: {e}, returning 0.0")
            return 0.0

    @staticmethod
    def safe_subtract(minuend: Number, subtrahend: Number) -> float:
        try:
            return BaseCalculator.finite_or_zero(float(minuend) - float(subtrahend))
        except (TypeError, ValueError) as e:
            logger.warning(f"safe_subtract error: {e}, returning 0.0")
            return 0.0
