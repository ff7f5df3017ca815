"""
Aggregator

Combines one metric across a set of campaigns. The set must already be in a
single currency: normalize with currency.normalizer first. The aggregator
never converts.

Modes:
- sum:            sum of derive_all(c)[key]; empty set -> 0
- simple_average: sum / count via safe_divide; empty set -> 0

Weighted figures (overall CTR, ROAS, ...) are not a mode; use weighted_ratio,
which divides two sums.
"""

from enum import Enum
from typing import Iterable, List, Union
import logging

from ..calculators import BaseCalculator, UnsupportedCurrency, as_campaign_input
from .derivation import CampaignLike, derive_metric
from .registry import lookup

logger = logging.getLogger(__name__)


class AggregationMode(str, Enum):
    SUM = "sum"
    SIMPLE_AVERAGE = "simple_average"

    @classmethod
    def _missing_(cls, value):
        # The dashboard front end sends camelCase ("simpleAverage")
        if isinstance(value, str):
            normalized = value.strip().replace('-', '_')
            if normalized.lower() == 'simpleaverage':
                return cls.SIMPLE_AVERAGE
            for member in cls:
                if member.value == normalized.lower():
                    return member
        return None


def _warn_on_mixed_currencies(campaigns: List[CampaignLike], metric_key: str) -> None:
    currencies = set()
    for campaign in campaigns:
        try:
            currencies.add(as_campaign_input(campaign).currency)
        except UnsupportedCurrency as e:
            # Advisory only: an odd code must not change the aggregate
            logger.warning(f"Aggregating '{metric_key}' over a campaign with {e}")
            currencies.add(str(e.currency))
    if len(currencies) > 1:
        logger.warning(
            f"Aggregating monetary metric '{metric_key}' across mixed currencies "
            f"{sorted(currencies)}; normalize campaigns to one currency first"
        )


def _metric_values(campaigns: List[CampaignLike], metric_key: str) -> List[float]:
    definition = lookup(metric_key)
    if definition.is_monetary and campaigns:
        _warn_on_mixed_currencies(campaigns, metric_key)
    return [derive_metric(campaign, metric_key) for campaign in campaigns]


def aggregate(campaigns: Iterable[CampaignLike], metric_key: str,
              mode: Union[AggregationMode, str] = AggregationMode.SUM) -> float:
    """
    Aggregate one metric across campaigns.
    
    Args:
        campaigns: Campaigns already expressed in one common currency
        metric_key: Registry key, e.g. 'custo'
        mode: AggregationMode or its string value
        
    Returns:
        float: The aggregate, 0.0 for an empty set
        
    Raises:
        UnknownMetric: if the key is not registered (even for an empty set)
        ValueError: if mode is not a known aggregation mode
    """
    mode = AggregationMode(mode)
    campaign_list = list(campaigns)
    values = _metric_values(campaign_list, metric_key)
    
    total = BaseCalculator.finite_or_zero(sum(values))
    if mode == AggregationMode.SUM:
        return total
    return BaseCalculator.safe_divide(total, len(values))


def weighted_ratio(campaigns: Iterable[CampaignLike], numerator_key: str, denominator_key: str,
                   scale: float = 1.0) -> float:
    """
    Ratio of two sums, e.g. overall ROAS = sum(faturamento) / sum(custo).
    
    Args:
        scale: Multiplier applied to the ratio (100 for percentages)
    """
    campaign_list = list(campaigns)
    numerator = aggregate(campaign_list, numerator_key, AggregationMode.SUM)
    denominator = aggregate(campaign_list, denominator_key, AggregationMode.SUM)
    return BaseCalculator.safe_multiply(BaseCalculator.safe_divide(numerator, denominator), scale)
