# Campaign Metrics Service
#
# Entry point the dashboard UI uses for campaign figures. Wires the pieces in
# the order the numbers flow:
#
#   stored campaign -> normalize to display currency -> derive metrics
#                   -> aggregate across the selection -> format for display

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ...config import config
from ..calculators import BaseCalculator, as_campaign_input, validate_currency
from ..currency.exchange_rate_service import (
    CAMPAIGN_SOURCE,
    ExchangeRate,
    ExchangeRateProvider,
    exchange_rate_provider,
    format_exchange_rate
)
from ..currency.normalizer import normalize_campaign, normalize_campaigns
from ..formatting.formatter import format_value, format_last_updated
from ..metrics.aggregator import AggregationMode, aggregate, weighted_ratio
from ..metrics.derivation import derive_all
from ..metrics.registry import MetricUnit, lookup

logger = logging.getLogger(__name__)

# Headline KPI cards show one decimal on percentages
SUMMARY_PERCENTAGE_PRECISION = 1

# Summary figure -> unit
SUMMARY_UNITS = {
    'totalInvestido': MetricUnit.CURRENCY,
    'totalFaturado': MetricUnit.CURRENCY,
    'lucroTotal': MetricUnit.CURRENCY,
    'roiMedio': MetricUnit.PERCENTAGE,
    'roasMedia': MetricUnit.MULTIPLIER,
    'campanhasAtivas': MetricUnit.COUNT,
    'impressoesTotais': MetricUnit.COUNT,
    'cliquesTotais': MetricUnit.COUNT,
    'ctrMedio': MetricUnit.PERCENTAGE,
    'cpcMedio': MetricUnit.CURRENCY,
    'conversoes': MetricUnit.COUNT,
    'taxaConversaoMedia': MetricUnit.PERCENTAGE,
}


class CampaignMetricsService:
    """Derives, converts, aggregates and formats campaign metrics"""

    def __init__(self, rate_provider: Optional[ExchangeRateProvider] = None,
                 display_currency: Optional[str] = None, lazy_refresh: Optional[bool] = None):
        self.rate_provider = rate_provider or exchange_rate_provider
        self.display_currency = validate_currency(display_currency or config.DISPLAY_CURRENCY)
        self.lazy_refresh = config.LAZY_RATE_REFRESH if lazy_refresh is None else lazy_refresh

    # === EXCHANGE RATE ===

    def get_exchange_rate(self) -> ExchangeRate:
        """Rate currently cached by the provider"""
        return self.rate_provider.get_rate()

    def refresh_exchange_rate(self) -> Tuple[ExchangeRate, Optional[str]]:
        """Manual refresh; returns (rate now cached, error or None)"""
        return self.rate_provider.try_refresh()

    def resolve_rate(self, campaign: Mapping[str, Any], target_currency: Optional[str] = None) -> ExchangeRate:
        """
        Rate used to convert one campaign.

        A positive rate cached on the campaign record wins. Otherwise the
        provider's rate, fetching it first if nothing has been fetched yet
        and lazy refresh is enabled. A campaign already in target_currency
        needs no conversion, so it never triggers a fetch.
        """
        campaign_input = as_campaign_input(campaign)
        campaign_rate = campaign_input.exchange_rate
        if campaign_rate is not None:
            return ExchangeRate(rate=campaign_rate, source=CAMPAIGN_SOURCE)
        if target_currency is not None and campaign_input.currency == validate_currency(target_currency):
            return self.rate_provider.get_rate()
        if self.lazy_refresh:
            return self.rate_provider.ensure_rate()
        return self.rate_provider.get_rate()

    def exchange_rate_info(self) -> Dict[str, Any]:
        """Provider rate plus the strings the stale-rate badge shows"""
        rate = self.get_exchange_rate()
        info = rate.to_dict()
        info['formatted'] = format_exchange_rate(rate.rate)
        info['last_updated_display'] = format_last_updated(rate)
        info['last_error'] = self.rate_provider.last_error
        return info

    # === PER CAMPAIGN ===

    def _currency(self, display_currency: Optional[str]) -> str:
        return validate_currency(display_currency) if display_currency else self.display_currency

    def normalize(self, campaigns: Iterable[Mapping[str, Any]],
                  display_currency: Optional[str] = None) -> List[Dict[str, Any]]:
        """Copies of the campaigns with monetary fields in the display currency"""
        return normalize_campaigns(campaigns, self._currency(display_currency), self.resolve_rate)

    def campaign_metrics(self, campaign: Mapping[str, Any], display_currency: Optional[str] = None,
                         precision: Optional[int] = None) -> Dict[str, Any]:
        """
        Every metric for one campaign, in the display currency.

        Returns:
            Dict with raw 'values' and display 'formatted' strings per metric key
        """
        currency = self._currency(display_currency)
        campaign_input = as_campaign_input(campaign)
        rate = self.resolve_rate(campaign_input.raw_record, currency)
        normalized = normalize_campaign(campaign_input, currency, rate)
        values = derive_all(normalized)

        return {
            'id': campaign_input.campaign_id,
            'name': campaign_input.name,
            'native_currency': campaign_input.currency,
            'currency': currency,
            'is_active': campaign_input.is_active,
            'values': values,
            'formatted': self._format_metrics(values, currency, precision),
            'exchange_rate': rate.to_dict()
        }

    def _format_metrics(self, values: Mapping[str, float], currency: str,
                        precision: Optional[int]) -> Dict[str, str]:
        return {
            key: format_value(value, lookup(key).unit, currency, precision)
            for key, value in values.items()
        }

    # === ACROSS CAMPAIGNS ===

    def _selection(self, campaigns: Iterable[Mapping[str, Any]], currency: str,
                   active_only: bool) -> List[Dict[str, Any]]:
        selected = [
            campaign for campaign in campaigns
            if not active_only or as_campaign_input(campaign).is_active
        ]
        return normalize_campaigns(selected, currency, self.resolve_rate)

    def aggregate(self, campaigns: Iterable[Mapping[str, Any]], metric_key: str,
                  mode: Union[AggregationMode, str] = AggregationMode.SUM,
                  display_currency: Optional[str] = None, active_only: bool = False,
                  precision: Optional[int] = None) -> Dict[str, Any]:
        """
        Aggregate one metric across campaigns after normalizing them.

        Raises:
            UnknownMetric: if metric_key is not registered
        """
        definition = lookup(metric_key)
        mode = AggregationMode(mode)
        currency = self._currency(display_currency)
        selection = self._selection(campaigns, currency, active_only)
        value = aggregate(selection, metric_key, mode)

        return {
            'metric': metric_key,
            'mode': mode.value,
            'currency': currency,
            'campaign_count': len(selection),
            'value': value,
            'formatted': format_value(value, definition.unit, currency, precision)
        }

    def dashboard_summary(self, campaigns: Iterable[Mapping[str, Any]], display_currency: Optional[str] = None,
                          active_only: bool = False,
                          precision: int = SUMMARY_PERCENTAGE_PRECISION) -> Dict[str, Any]:
        """
        Headline KPI figures for the dashboard cards.

        Totals are sums; rates and returns are weighted across the selection
        (sum of numerator / sum of denominator), so one small campaign with an
        extreme ROAS does not dominate the card.
        """
        currency = self._currency(display_currency)
        selection = self._selection(campaigns, currency, active_only)

        total_cost = aggregate(selection, 'custo')
        total_revenue = aggregate(selection, 'faturamento')

        values = {
            'totalInvestido': total_cost,
            'totalFaturado': total_revenue,
            'lucroTotal': aggregate(selection, 'lucro'),
            'roiMedio': weighted_ratio(selection, 'lucro', 'custo', scale=100),
            'roasMedia': BaseCalculator.safe_divide(total_revenue, total_cost),
            'campanhasAtivas': float(sum(1 for campaign in selection if as_campaign_input(campaign).is_active)),
            'impressoesTotais': aggregate(selection, 'impressoes'),
            'cliquesTotais': aggregate(selection, 'cliques'),
            'ctrMedio': weighted_ratio(selection, 'cliques', 'impressoes', scale=100),
            'cpcMedio': weighted_ratio(selection, 'custo', 'cliques'),
            'conversoes': aggregate(selection, 'conversoes'),
            'taxaConversaoMedia': weighted_ratio(selection, 'conversoes', 'cliques', scale=100),
        }

        formatted = {
            key: format_value(value, SUMMARY_UNITS[key], currency, precision)
            for key, value in values.items()
        }

        logger.info(f"Dashboard summary for {len(selection)} campaigns in {currency}")

        return {
            'currency': currency,
            'campaign_count': len(selection),
            'values': values,
            'formatted': formatted,
            'exchange_rate': self.exchange_rate_info()
        }
