"""
Currency Normalizer

The only place where BRL/USD conversion happens.

- Same currency:  returned unchanged (exactly, no round trip)
- USD -> BRL:     amount * rate
- BRL -> USD:     amount / rate (safe_divide, so a zero rate yields 0)

Nothing here rounds; the formatter rounds once for display. Campaign records
are never modified: normalize_campaign returns a new record.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union
import logging

from ..calculators import BaseCalculator, MONETARY_FIELDS, as_campaign_input, validate_currency
from ..calculators.base_calculators import CampaignInput
from ..metrics.registry import lookup
from .exchange_rate_service import ExchangeRate

logger = logging.getLogger(__name__)

RateLike = Union[ExchangeRate, float]
RateResolver = Callable[[Mapping[str, Any]], RateLike]


def _rate_value(rate: RateLike) -> float:
    if isinstance(rate, ExchangeRate):
        return rate.rate
    return float(rate)


def convert(amount: float, from_currency: str, to_currency: str, rate: RateLike) -> float:
    """
    Convert an amount between BRL and USD.

    Args:
        amount: Value in from_currency
        from_currency: 'BRL' or 'USD'
        to_currency: 'BRL' or 'USD'
        rate: ExchangeRate (or bare USD->BRL multiplier)

    Returns:
        float: The amount in to_currency

    Raises:
        UnsupportedCurrency: for any other currency code
    """
    source = validate_currency(from_currency)
    target = validate_currency(to_currency)

    if source == target:
        return amount

    multiplier = _rate_value(rate)
    if source == 'USD':
        return BaseCalculator.safe_multiply(amount, multiplier)
    return BaseCalculator.safe_divide(amount, multiplier)


def normalize_campaign(campaign: Union[CampaignInput, Mapping[str, Any]], target_currency: str,
                       rate: Optional[RateLike]) -> Dict[str, Any]:
    """
    Copy of a campaign with every monetary field expressed in target_currency.

    Monetary fields are coerced first (so "1.200,00" budgets convert
    correctly); counts and other fields are copied as stored.

    Args:
        rate: Conversion rate; may be None when the campaign is already in
            target_currency

    Returns:
        dict: New record whose 'currency' is target_currency
    """
    campaign_input = as_campaign_input(campaign)
    target = validate_currency(target_currency)
    source = campaign_input.currency
    raw_values = campaign_input.raw_values()

    normalized = dict(campaign_input.raw_record)
    for field in MONETARY_FIELDS:
        if field in campaign_input.raw_record:
            normalized[field] = convert(raw_values[field], source, target, rate)
    normalized['currency'] = target

    if source != target:
        logger.debug(f"Normalized campaign {campaign_input.campaign_id} {source}->{target} at {_rate_value(rate)}")
    return normalized


def normalize_campaigns(campaigns: Iterable[Union[CampaignInput, Mapping[str, Any]]], target_currency: str,
                        rate_resolver: Union[RateResolver, RateLike]) -> List[Dict[str, Any]]:
    """
    Normalize a collection to one currency.

    Args:
        rate_resolver: A rate used for every campaign, or a callable returning
            the rate for a given campaign record. The callable is only asked
            for campaigns that actually need converting.
    """
    target = validate_currency(target_currency)
    normalized = []
    for campaign in campaigns:
        campaign_input = as_campaign_input(campaign)
        if campaign_input.currency == target:
            rate = None
        elif callable(rate_resolver):
            rate = rate_resolver(campaign_input.raw_record)
        else:
            rate = rate_resolver
        normalized.append(normalize_campaign(campaign_input, target_currency, rate))
    return normalized


def convert_metrics(values: Mapping[str, float], from_currency: str, to_currency: str,
                    rate: RateLike) -> Dict[str, float]:
    """
    Convert the currency-unit entries of a derived metric mapping.

    Percentages, counts and multipliers are copied unchanged. Keys that are
    not registered metrics are copied unchanged too.
    """
    converted = {}
    for key, value in values.items():
        try:
            is_monetary = lookup(key).is_monetary
        except KeyError:
            is_monetary = False
        converted[key] = convert(value, from_currency, to_currency, rate) if is_monetary else value
    return converted
