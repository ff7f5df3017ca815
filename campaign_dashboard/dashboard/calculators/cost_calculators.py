"""
Cost Calculators

This module handles cost per action calculations:
- Cost per click (CPC)
- Cost per thousand impressions (CPM)
- Cost per conversion (CPA)
- Cost per view (CPV)

All results are in the campaign's native currency.
"""

from typing import Mapping

from .base_calculators import BaseCalculator
import logging

logger = logging.getLogger(__name__)


class CostCalculators(BaseCalculator):
    """Cost per action calculation functions for campaign metrics"""
    
    @staticmethod
    def calculate_cpc(values: Mapping[str, float]) -> float:
        """
        Calculate average cost per click.
        
        Formula: custo / cliques
        
        Returns:
            float: Cost per click, 0.0 without clicks
        """
        return CostCalculators.safe_divide(
            numerator=values.get('custo', 0.0),
            denominator=values.get('cliques', 0.0)
        )
    
    @staticmethod
    def calculate_cpm(values: Mapping[str, float]) -> float:
        """
        Calculate cost per thousand impressions.
        
        Formula: custo / impressoes * 1000
        
        Returns:
            float: CPM, 0.0 without impressions
        """
        per_impression = CostCalculators.safe_divide(
            numerator=values.get('custo', 0.0),
            denominator=values.get('impressoes', 0.0)
        )
        return CostCalculators.safe_multiply(per_impression, 1000)
    
    @staticmethod
    def calculate_custo_conversao(values: Mapping[str, float]) -> float:
        """
        Calculate cost per conversion (CPA).
        
        Formula: custo / conversoes
        
        Returns:
            float: CPA, 0.0 without conversions
        """
        return CostCalculators.safe_divide(
            numerator=values.get('custo', 0.0),
            denominator=values.get('conversoes', 0.0)
        )
    
    @staticmethod
    def calculate_cpv_medio(values: Mapping[str, float]) -> float:
        """Average cost per view: custo / visualizacoes"""
        return CostCalculators.safe_divide(
            numerator=values.get('custo', 0.0),
            denominator=values.get('visualizacoes', 0.0)
        )
