# Currency Module
#
# USD -> BRL exchange rate provider and the BRL/USD normalizer.

from .exchange_rate_service import (
    ExchangeRate,
    ExchangeRateProvider,
    RateFetchFailed,
    exchange_rate_provider,
    format_exchange_rate
)
from .normalizer import convert, normalize_campaign, normalize_campaigns, convert_metrics

__all__ = [
    'ExchangeRate',
    'ExchangeRateProvider',
    'RateFetchFailed',
    'exchange_rate_provider',
    'format_exchange_rate',
    'convert',
    'normalize_campaign',
    'normalize_campaigns',
    'convert_metrics'
]
