"""
Storage Calculators

Pass-through metrics for values recorded on the campaign itself
(impressions, clicks, cost, budget, ...). They read the coerced raw field so
raw and derived metrics can be requested through the same registry.
"""

from typing import Callable, Mapping

from .base_calculators import BaseCalculator
import logging

logger = logging.getLogger(__name__)

Formula = Callable[[Mapping[str, float]], float]


class StorageCalculators(BaseCalculator):
    """Pass-through formulas for raw campaign fields"""
    
    @staticmethod
    def passthrough(field: str) -> Formula:
        """
        Build a formula that returns the raw field unchanged.
        
        Args:
            field: Storage field name, e.g. 'custo'
            
        Returns:
            Callable returning the field's value (0.0 when absent)
        """
        def formula(values: Mapping[str, float]) -> float:
            return StorageCalculators.finite_or_zero(values.get(field, 0.0))
        
        formula.__name__ = f"passthrough_{field}"
        return formula
