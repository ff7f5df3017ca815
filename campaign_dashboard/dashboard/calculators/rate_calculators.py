"""
Rate Calculators

This module handles percentage rates:
- CTR (cliques / impressoes)
- Conversion rate (conversoes / cliques)
- View-through rate (visualizacoes / impressoes)
"""

from typing import Mapping

from .base_calculators import BaseCalculator
import logging

logger = logging.getLogger(__name__)


class RateCalculators(BaseCalculator):
    """Rate calculation functions for campaign metrics"""
    
    @staticmethod
    def calculate_ctr(values: Mapping[str, float]) -> float:
        """
        Calculate click-through rate.
        
        Formula: cliques / impressoes * 100
        
        Returns:
            float: CTR as percentage, 0.0 without impressions
        """
        return RateCalculators.safe_percentage(
            numerator=values.get('cliques', 0.0),
            denominator=values.get('impressoes', 0.0)
        )
    
    @staticmethod
    def calculate_taxa_conversao(values: Mapping[str, float]) -> float:
        """
        Calculate conversion rate (conversoes / cliques * 100).
        
        Returns:
            float: Conversion rate as percentage, 0.0 without clicks
        """
        return RateCalculators.safe_percentage(
            numerator=values.get('conversoes', 0.0),
            denominator=values.get('cliques', 0.0)
        )
    
    @staticmethod
    def calculate_vtr(values: Mapping[str, float]) -> float:
        """View-through rate: visualizacoes / impressoes * 100"""
        return RateCalculators.safe_percentage(
            numerator=values.get('visualizacoes', 0.0),
            denominator=values.get('impressoes', 0.0)
        )
