#!/usr/bin/env python3
"""
Test Suite for CampaignMetricsService

Runs the full pipeline (normalize -> derive -> aggregate -> format) against a
provider whose HTTP session is mocked.
"""

import unittest
from unittest.mock import MagicMock

import requests

from campaign_dashboard.dashboard.calculators import UnsupportedCurrency
from campaign_dashboard.dashboard.currency.exchange_rate_service import (
    AWESOMEAPI_SOURCE,
    CAMPAIGN_SOURCE,
    ExchangeRateProvider
)
from campaign_dashboard.dashboard.metrics.registry import UnknownMetric, all_keys
from campaign_dashboard.dashboard.services.campaign_metrics_service import CampaignMetricsService


USD_CAMPAIGN = {
    'id': '1',
    'campanha': 'Search - Brand',
    'currency': 'USD',
    'isActive': True,
    'impressoes': 1000,
    'cliques': 50,
    'custo': 100,
    'comissao': 20,
    'conversoes': 3,
}

BRL_CAMPAIGN = {
    'id': '2',
    'campanha': 'Display - Remarketing',
    'currency': 'BRL',
    'isActive': False,
    'impressoes': 2000,
    'cliques': 100,
    'custo': 550,
    'comissao': 110,
    'conversoes': 2,
}


def _quote_response(bid):
    response = MagicMock()
    response.json.return_value = {'USDBRL': {'bid': bid, 'timestamp': '1721650000'}}
    return response


class TestCampaignMetricsService(unittest.TestCase):

    def setUp(self):
        self.session = MagicMock()
        self.provider = ExchangeRateProvider(fallback_rate=5.5, session=self.session)
        self.service = CampaignMetricsService(rate_provider=self.provider, display_currency='USD',
                                              lazy_refresh=False)

    def test_campaign_metrics_in_display_currency(self):
        result = self.service.campaign_metrics(BRL_CAMPAIGN)

        self.assertEqual(result['native_currency'], 'BRL')
        self.assertEqual(result['currency'], 'USD')
        self.assertFalse(result['is_active'])
        self.assertEqual(set(result['values']), set(all_keys()))
        self.assertAlmostEqual(result['values']['custo'], 100.0)
        self.assertAlmostEqual(result['values']['faturamento'], 40.0)
        self.assertAlmostEqual(result['values']['lucro'], -60.0)
        self.assertAlmostEqual(result['values']['roi'], -60.0)
        self.assertAlmostEqual(result['values']['roas'], 0.4)
        self.assertEqual(result['formatted']['custo'], '$100.00')
        self.assertEqual(result['formatted']['ctr'], '5.00%')
        self.assertEqual(result['formatted']['impressoes'], '2,000')
        self.assertTrue(result['exchange_rate']['is_fallback'])
        self.session.get.assert_not_called()

    def test_campaign_metrics_native_brl(self):
        result = self.service.campaign_metrics(BRL_CAMPAIGN, display_currency='brl', precision=1)
        self.assertEqual(result['values']['custo'], 550.0)
        self.assertEqual(result['formatted']['custo'], 'R$ 550,00')
        self.assertEqual(result['formatted']['ctr'], '5,0%')

    def test_campaign_rate_wins_over_provider(self):
        campaign = dict(BRL_CAMPAIGN, exchangeRate=5.0)
        result = self.service.campaign_metrics(campaign)
        self.assertAlmostEqual(result['values']['custo'], 110.0)
        self.assertEqual(result['exchange_rate']['source'], CAMPAIGN_SOURCE)

    def test_lazy_refresh_fetches_once(self):
        self.session.get.return_value = _quote_response('5.0')
        service = CampaignMetricsService(rate_provider=self.provider, display_currency='USD', lazy_refresh=True)

        service.campaign_metrics(BRL_CAMPAIGN)
        result = service.campaign_metrics(BRL_CAMPAIGN)

        self.assertAlmostEqual(result['values']['custo'], 110.0)
        self.assertEqual(result['exchange_rate']['source'], AWESOMEAPI_SOURCE)
        self.assertEqual(self.session.get.call_count, 1)

    def test_failed_lazy_fetch_is_not_retried_per_campaign(self):
        self.session.get.side_effect = requests.exceptions.Timeout('timed out')
        service = CampaignMetricsService(rate_provider=self.provider, display_currency='USD', lazy_refresh=True)
        campaigns = [dict(BRL_CAMPAIGN, id=str(index)) for index in range(20)]

        summary = service.dashboard_summary(campaigns)
        service.dashboard_summary(campaigns)

        self.assertEqual(self.session.get.call_count, 1)
        self.assertAlmostEqual(summary['values']['totalInvestido'], 2000.0)
        self.assertTrue(summary['exchange_rate']['is_fallback'])

    def test_explicit_refresh_after_failed_lazy_fetch(self):
        self.session.get.side_effect = requests.exceptions.Timeout('timed out')
        service = CampaignMetricsService(rate_provider=self.provider, display_currency='USD', lazy_refresh=True)
        service.campaign_metrics(BRL_CAMPAIGN)

        self.session.get.side_effect = None
        self.session.get.return_value = _quote_response('5.0')
        rate, error = service.refresh_exchange_rate()

        self.assertIsNone(error)
        self.assertAlmostEqual(service.campaign_metrics(BRL_CAMPAIGN)['values']['custo'], 110.0)
        self.assertEqual(self.session.get.call_count, 2)

    def test_same_currency_selection_never_fetches(self):
        service = CampaignMetricsService(rate_provider=self.provider, display_currency='USD', lazy_refresh=True)
        campaigns = [dict(USD_CAMPAIGN, id=str(index)) for index in range(20)]

        summary = service.dashboard_summary(campaigns)
        result = service.campaign_metrics(USD_CAMPAIGN)
        service.aggregate(campaigns, 'custo')

        self.session.get.assert_not_called()
        self.assertAlmostEqual(summary['values']['totalInvestido'], 2000.0)
        self.assertEqual(result['values']['custo'], 100.0)

    def test_unsupported_display_currency(self):
        with self.assertRaises(UnsupportedCurrency):
            self.service.campaign_metrics(USD_CAMPAIGN, display_currency='EUR')
        with self.assertRaises(UnsupportedCurrency):
            CampaignMetricsService(rate_provider=self.provider, display_currency='JPY')

    def test_aggregate(self):
        result = self.service.aggregate([USD_CAMPAIGN, BRL_CAMPAIGN], 'custo')
        self.assertEqual(result['mode'], 'sum')
        self.assertEqual(result['campaign_count'], 2)
        self.assertAlmostEqual(result['value'], 200.0)
        self.assertEqual(result['formatted'], '$200.00')

    def test_aggregate_simple_average_in_brl(self):
        result = self.service.aggregate([USD_CAMPAIGN, BRL_CAMPAIGN], 'custo', mode='simpleAverage',
                                        display_currency='BRL')
        self.assertEqual(result['mode'], 'simple_average')
        self.assertAlmostEqual(result['value'], 550.0)
        self.assertEqual(result['formatted'], 'R$ 550,00')

    def test_aggregate_active_only(self):
        result = self.service.aggregate([USD_CAMPAIGN, BRL_CAMPAIGN], 'cliques', active_only=True)
        self.assertEqual(result['campaign_count'], 1)
        self.assertEqual(result['value'], 50.0)

    def test_aggregate_unknown_metric(self):
        with self.assertRaises(UnknownMetric):
            self.service.aggregate([USD_CAMPAIGN], 'ctrr')

    def test_dashboard_summary(self):
        summary = self.service.dashboard_summary([USD_CAMPAIGN, BRL_CAMPAIGN])
        values = summary['values']

        self.assertEqual(summary['campaign_count'], 2)
        self.assertAlmostEqual(values['totalInvestido'], 200.0)
        self.assertAlmostEqual(values['totalFaturado'], 100.0)
        self.assertAlmostEqual(values['lucroTotal'], -100.0)
        self.assertAlmostEqual(values['roiMedio'], -50.0)
        self.assertAlmostEqual(values['roasMedia'], 0.5)
        self.assertEqual(values['campanhasAtivas'], 1.0)
        self.assertEqual(values['impressoesTotais'], 3000.0)
        self.assertEqual(values['cliquesTotais'], 150.0)
        self.assertAlmostEqual(values['ctrMedio'], 5.0)
        self.assertAlmostEqual(values['cpcMedio'], 200 / 150)
        self.assertEqual(values['conversoes'], 5.0)

        formatted = summary['formatted']
        self.assertEqual(formatted['totalInvestido'], '$200.00')
        self.assertEqual(formatted['roiMedio'], '-50.0%')
        self.assertEqual(formatted['roasMedia'], '0.50x')
        self.assertEqual(formatted['cliquesTotais'], '150')
        self.assertEqual(summary['exchange_rate']['last_updated_display'], 'never')

    def test_dashboard_summary_empty(self):
        summary = self.service.dashboard_summary([])
        self.assertEqual(summary['campaign_count'], 0)
        self.assertTrue(all(value == 0.0 for value in summary['values'].values()))

    def test_exchange_rate_info(self):
        info = self.service.exchange_rate_info()
        self.assertEqual(info['rate'], 5.5)
        self.assertEqual(info['formatted'], 'R$ 5.5000')
        self.assertIsNone(info['last_error'])

    def test_refresh_exchange_rate_failure(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError('refused')
        rate, error = self.service.refresh_exchange_rate()
        self.assertEqual(rate.rate, 5.5)
        self.assertIsNotNone(error)
        self.assertEqual(self.service.exchange_rate_info()['last_error'], error)


if __name__ == '__main__':
    unittest.main()
