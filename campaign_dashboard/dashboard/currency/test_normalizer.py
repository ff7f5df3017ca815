#!/usr/bin/env python3
"""
Tests for normalizer.py (BRL/USD conversion)
"""

import unittest
from unittest.mock import MagicMock

from campaign_dashboard.dashboard.calculators import UnsupportedCurrency
from campaign_dashboard.dashboard.currency.exchange_rate_service import ExchangeRate
from campaign_dashboard.dashboard.currency.normalizer import (
    convert,
    convert_metrics,
    normalize_campaign,
    normalize_campaigns
)
from campaign_dashboard.dashboard.metrics.derivation import derive_all


class TestConvert(unittest.TestCase):

    def test_identity_is_exact(self):
        for amount in (0.1, 123.456789, -40.0, 1e-12):
            with self.subTest(amount=amount):
                self.assertEqual(convert(amount, 'BRL', 'BRL', 5.5), amount)
                self.assertEqual(convert(amount, 'USD', 'USD', 5.5), amount)

    def test_brl_to_usd(self):
        self.assertAlmostEqual(convert(550, 'BRL', 'USD', 5.5), 100.0)

    def test_usd_to_brl(self):
        self.assertAlmostEqual(convert(100, 'USD', 'BRL', ExchangeRate(rate=5.5)), 550.0)

    def test_round_trip(self):
        for amount in (519.55, 0.01, 1234567.89):
            with self.subTest(amount=amount):
                there = convert(amount, 'USD', 'BRL', 5.4321)
                back = convert(there, 'BRL', 'USD', 5.4321)
                self.assertLessEqual(abs(back - amount), 1e-9 * max(1.0, abs(amount)))

    def test_zero_rate_yields_zero(self):
        self.assertEqual(convert(550, 'BRL', 'USD', 0), 0.0)

    def test_currency_codes_are_case_insensitive(self):
        self.assertAlmostEqual(convert(550, 'brl', 'usd', 5.5), 100.0)

    def test_unsupported_currency(self):
        with self.assertRaises(UnsupportedCurrency):
            convert(10, 'EUR', 'USD', 5.5)
        with self.assertRaises(UnsupportedCurrency):
            convert(10, 'USD', 'GBP', 5.5)


class TestNormalizeCampaign(unittest.TestCase):

    def setUp(self):
        self.campaign = {
            'id': '2',
            'campanha': 'Display - Remarketing',
            'currency': 'BRL',
            'custo': 550,
            'comissao': 110,
            'conversoes': 2,
            'cliques': 100,
            'orcamento': '1.100,00',
        }

    def test_monetary_fields_are_converted(self):
        normalized = normalize_campaign(self.campaign, 'USD', 5.5)

        self.assertEqual(normalized['currency'], 'USD')
        self.assertAlmostEqual(normalized['custo'], 100.0)
        self.assertAlmostEqual(normalized['comissao'], 20.0)
        self.assertAlmostEqual(normalized['orcamento'], 200.0)
        # Counts untouched
        self.assertEqual(normalized['cliques'], 100)
        self.assertEqual(normalized['conversoes'], 2)
        self.assertNotIn('faturamento', normalized)

    def test_original_is_not_modified(self):
        original = dict(self.campaign)
        normalize_campaign(self.campaign, 'USD', 5.5)
        self.assertEqual(self.campaign, original)

    def test_same_currency_keeps_values(self):
        normalized = normalize_campaign(self.campaign, 'BRL', 5.5)
        self.assertEqual(normalized['custo'], 550.0)

    def test_mixed_campaigns_in_one_currency(self):
        campaigns = [
            {'currency': 'USD', 'custo': 100, 'comissao': 20, 'conversoes': 3},
            self.campaign,
        ]
        normalized = normalize_campaigns(campaigns, 'USD', ExchangeRate(rate=5.5))

        self.assertEqual([c['currency'] for c in normalized], ['USD', 'USD'])
        self.assertAlmostEqual(sum(c['custo'] for c in normalized), 200.0)
        # Derived revenue follows: 20 * 3 + 20 * 2
        self.assertAlmostEqual(sum(derive_all(c)['faturamento'] for c in normalized), 100.0)

    def test_rate_resolver_per_campaign(self):
        campaigns = [dict(self.campaign, exchangeRate=5.0), self.campaign]

        def resolver(record):
            return record.get('exchangeRate', 5.5)

        normalized = normalize_campaigns(campaigns, 'USD', resolver)
        self.assertAlmostEqual(normalized[0]['custo'], 110.0)
        self.assertAlmostEqual(normalized[1]['custo'], 100.0)

    def test_resolver_skipped_for_same_currency(self):
        resolver = MagicMock(return_value=5.5)
        campaigns = [{'currency': 'USD', 'custo': 100}, self.campaign]

        normalized = normalize_campaigns(campaigns, 'USD', resolver)

        resolver.assert_called_once_with(self.campaign)
        self.assertEqual(normalized[0]['custo'], 100.0)
        self.assertAlmostEqual(normalized[1]['custo'], 100.0)


class TestConvertMetrics(unittest.TestCase):

    def test_only_monetary_metrics_convert(self):
        values = {'custo': 550.0, 'ctr': 5.0, 'roas': 0.6, 'cliques': 50.0, 'extra': 7}
        converted = convert_metrics(values, 'BRL', 'USD', 5.5)

        self.assertAlmostEqual(converted['custo'], 100.0)
        self.assertEqual(converted['ctr'], 5.0)
        self.assertEqual(converted['roas'], 0.6)
        self.assertEqual(converted['cliques'], 50.0)
        self.assertEqual(converted['extra'], 7)


if __name__ == '__main__':
    unittest.main()
