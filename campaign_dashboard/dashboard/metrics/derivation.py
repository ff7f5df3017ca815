"""
Metrics Derivation Engine

Turns one stored campaign into the full set of metric values. Raw fields are
coerced (missing -> 0), then every registered formula runs in dependency
order so multi-hop metrics (lucro, roi, roas) see the single-hop values
(faturamento, ...) computed from the same snapshot.

derive_all is pure: same campaign snapshot in, identical values out. It never
raises for missing or zero-valued data.
"""

from typing import Any, Dict, Iterable, List, Mapping, Union
import logging

from ..calculators import BaseCalculator, CampaignInput, as_campaign_input
from .registry import EVALUATION_ORDER, dependency_closure, lookup

logger = logging.getLogger(__name__)

CampaignLike = Union[CampaignInput, Mapping[str, Any]]


def _evaluate(campaign_input: CampaignInput, keys: Iterable[str]) -> Dict[str, float]:
    values: Dict[str, float] = campaign_input.raw_values()
    for key in keys:
        definition = lookup(key)
        values[key] = BaseCalculator.finite_or_zero(definition.formula(values))
    return values


def derive_all(campaign: CampaignLike) -> Dict[str, float]:
    """
    Compute every registered metric for one campaign.
    
    Args:
        campaign: Stored campaign record (mapping) or CampaignInput
        
    Returns:
        Dict of metric key -> finite float, in evaluation order
    """
    campaign_input = as_campaign_input(campaign)
    values = _evaluate(campaign_input, EVALUATION_ORDER)
    return {key: values[key] for key in EVALUATION_ORDER}


def derive_metric(campaign: CampaignLike, key: str) -> float:
    """
    Compute a single metric (and only what it depends on).
    
    Raises:
        UnknownMetric: if the key is not registered
    """
    keys = dependency_closure(key)
    values = _evaluate(as_campaign_input(campaign), keys)
    return values[key]


def derive_campaigns(campaigns: Iterable[CampaignLike]) -> List[Dict[str, float]]:
    """derive_all for each campaign, preserving order"""
    return [derive_all(campaign) for campaign in campaigns]
