"""
Campaign Calculators Module

This module contains every formula used to derive campaign metrics, organized
into logical categories. The metric registry wires them to metric keys.

=== CALCULATOR ORGANIZATION ===

BASE_CALCULATORS.PY
- CampaignInput: Zero-defaulting, read-only view over a stored campaign
- BaseCalculator: Guarded arithmetic (safe_divide, safe_percentage, ...)

STORAGE_CALCULATORS.PY
- passthrough: Raw fields (impressoes, cliques, custo, orcamento, ...)

RATE_CALCULATORS.PY
- calculate_ctr: cliques / impressoes * 100
- calculate_taxa_conversao: conversoes / cliques * 100
- calculate_vtr: visualizacoes / impressoes * 100

COST_CALCULATORS.PY
- calculate_cpc: custo / cliques
- calculate_cpm: custo / impressoes * 1000
- calculate_custo_conversao: custo / conversoes
- calculate_cpv_medio: custo / visualizacoes

REVENUE_CALCULATORS.PY
- calculate_faturamento: comissao * conversoes
- calculate_lucro: faturamento - custo
- calculate_valor_conversao: faturamento / conversoes

ROAS_CALCULATORS.PY
- calculate_roas: faturamento / custo
- calculate_roi: (faturamento - custo) / custo * 100

=== USAGE ===

from campaign_dashboard.dashboard.calculators import RateCalculators

ctr = RateCalculators.calculate_ctr({'cliques': 50, 'impressoes': 1000})

Formulas take a mapping of already-coerced values and never raise: a zero
divisor resolves to 0.0 and nothing returns NaN or Infinity.
"""

from .base_calculators import (
    CampaignInput,
    BaseCalculator,
    UnsupportedCurrency,
    SUPPORTED_CURRENCIES,
    MONETARY_FIELDS,
    RAW_NUMERIC_FIELDS,
    as_campaign_input,
    validate_currency
)
from .storage_calculators import StorageCalculators
from .rate_calculators import RateCalculators
from .cost_calculators import CostCalculators
from .revenue_calculators import RevenueCalculators
from .roas_calculators import ROASCalculators

__all__ = [
    'CampaignInput',
    'BaseCalculator',
    'UnsupportedCurrency',
    'SUPPORTED_CURRENCIES',
    'MONETARY_FIELDS',
    'RAW_NUMERIC_FIELDS',
    'as_campaign_input',
    'validate_currency',
    'StorageCalculators',
    'RateCalculators',
    'CostCalculators',
    'RevenueCalculators',
    'ROASCalculators'
]
