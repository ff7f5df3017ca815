"""
Return Calculators

This module handles return-on-spend metrics:
- ROAS: revenue / cost, shown as a multiplier
- ROI: profit / cost, as a percentage
"""

from typing import Mapping

from .base_calculators import BaseCalculator
import logging

logger = logging.getLogger(__name__)


class ROASCalculators(BaseCalculator):
    """ROAS and ROI calculation functions for campaign metrics"""
    
    @staticmethod
    def calculate_roas(values: Mapping[str, float]) -> float:
        """
        Calculate return on ad spend.
        
        Formula: faturamento / custo
        
        Returns:
            float: ROAS multiplier, 0.0 without cost
        """
        return ROASCalculators.safe_divide(
            numerator=values.get('faturamento', 0.0),
            denominator=values.get('custo', 0.0)
        )
    
    @staticmethod
    def calculate_roi(values: Mapping[str, float]) -> float:
        """
        Calculate return on investment.
        
        Formula: (faturamento - custo) / custo * 100, i.e. lucro / custo * 100
        
        Returns:
            float: ROI as percentage (negative for a loss), 0.0 without cost
        """
        return ROASCalculators.safe_percentage(
            numerator=values.get('lucro', 0.0),
            denominator=values.get('custo', 0.0)
        )
