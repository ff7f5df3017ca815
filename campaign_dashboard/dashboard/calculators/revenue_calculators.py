"""
Revenue Calculators

This module handles revenue and profit:
- Revenue ("faturamento"): commission per conversion times conversions
- Profit ("lucro"): revenue minus cost
- Value per conversion

Commission follows the campaign's native currency like every other
monetary field, so revenue and profit are in that currency too.
"""

from typing import Mapping

from .base_calculators import BaseCalculator
import logging

logger = logging.getLogger(__name__)


class RevenueCalculators(BaseCalculator):
    """Revenue calculation functions for campaign metrics"""
    
    @staticmethod
    def calculate_faturamento(values: Mapping[str, float]) -> float:
        """
        Calculate campaign revenue.
        
        Formula: comissao * conversoes
        
        Campaigns without a commission (imported with revenue already
        totalled) keep the revenue recorded on the campaign, which is what
        values['faturamento'] holds before this metric is derived.
        
        Returns:
            float: Revenue in native currency
        """
        comissao = values.get('comissao', 0.0)
        if comissao:
            return RevenueCalculators.safe_multiply(comissao, values.get('conversoes', 0.0))
        return RevenueCalculators.finite_or_zero(values.get('faturamento', 0.0))
    
    @staticmethod
    def calculate_lucro(values: Mapping[str, float]) -> float:
        """
        Calculate profit (faturamento - custo).
        
        Returns:
            float: Profit in native currency (negative when cost exceeds revenue)
        """
        return RevenueCalculators.safe_subtract(
            values.get('faturamento', 0.0),
            values.get('custo', 0.0)
        )
    
    @staticmethod
    def calculate_valor_conversao(values: Mapping[str, float]) -> float:
        """Revenue per conversion: faturamento / conversoes"""
        return RevenueCalculators.safe_divide(
            numerator=values.get('faturamento', 0.0),
            denominator=values.get('conversoes', 0.0)
        )
