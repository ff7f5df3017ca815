#!/usr/bin/env python3
"""
Tests for the metric registry: lookups, display order, and the dependency
checks run when the catalog is built.
"""

import unittest

from campaign_dashboard.dashboard.calculators import StorageCalculators
from campaign_dashboard.dashboard.metrics.registry import (
    EVALUATION_ORDER,
    MetricCategory,
    MetricDefinition,
    MetricUnit,
    RegistryConfigurationError,
    UnknownMetric,
    _build_registry,
    all_definitions,
    all_keys,
    dependency_closure,
    lookup,
    metrics_by_unit,
    monetary_keys
)


def _definition(key, depends_on=()):
    return MetricDefinition(
        key=key,
        label=key,
        unit=MetricUnit.COUNT,
        category=MetricCategory.VOLUME,
        formula=StorageCalculators.passthrough(key),
        depends_on=depends_on
    )


class TestRegistryLookup(unittest.TestCase):

    def test_lookup_known_metrics(self):
        self.assertEqual(lookup('ctr').unit, MetricUnit.PERCENTAGE)
        self.assertEqual(lookup('roas').unit, MetricUnit.MULTIPLIER)
        self.assertEqual(lookup('custo').unit, MetricUnit.CURRENCY)
        self.assertEqual(lookup('impressoes').unit, MetricUnit.COUNT)
        self.assertEqual(lookup('faturamento').depends_on, ('comissao', 'conversoes'))

    def test_lookup_unknown_metric(self):
        with self.assertRaises(UnknownMetric) as ctx:
            lookup('ctrr')
        self.assertEqual(ctx.exception.key, 'ctrr')
        self.assertIn('ctrr', str(ctx.exception))
        # Still a KeyError for callers that catch that
        self.assertIsInstance(ctx.exception, KeyError)

    def test_lookup_unhashable_key(self):
        with self.assertRaises(UnknownMetric):
            lookup(['ctr'])

    def test_all_keys_in_display_order(self):
        keys = all_keys()
        self.assertEqual(keys[0], 'impressoes')
        self.assertEqual(keys[-1], 'roas')
        self.assertEqual(len(keys), len(set(keys)))
        self.assertEqual([d.key for d in all_definitions()], keys)

    def test_all_keys_returns_a_copy(self):
        keys = all_keys()
        keys.clear()
        self.assertTrue(all_keys())

    def test_metrics_by_unit(self):
        percentages = {d.key for d in metrics_by_unit(MetricUnit.PERCENTAGE)}
        self.assertEqual(percentages, {'ctr', 'taxaConversao', 'vtr', 'roi'})
        self.assertIn('lucro', monetary_keys())
        self.assertNotIn('ctr', monetary_keys())

    def test_to_dict(self):
        data = lookup('roi').to_dict()
        self.assertEqual(data['key'], 'roi')
        self.assertEqual(data['unit'], 'percentage')
        self.assertEqual(data['depends_on'], ['lucro', 'custo'])


class TestEvaluationOrder(unittest.TestCase):

    def test_dependencies_come_first(self):
        position = {key: index for index, key in enumerate(EVALUATION_ORDER)}
        for definition in all_definitions():
            for dependency in definition.depends_on:
                self.assertLess(position[dependency], position[definition.key],
                                f"{dependency} must be evaluated before {definition.key}")

    def test_every_metric_is_evaluated(self):
        self.assertEqual(set(EVALUATION_ORDER), set(all_keys()))

    def test_dependency_closure(self):
        closure = dependency_closure('roi')
        self.assertEqual(set(closure), {'roi', 'lucro', 'faturamento', 'custo', 'comissao', 'conversoes'})
        self.assertEqual(closure[-1], 'roi')
        self.assertLess(closure.index('faturamento'), closure.index('lucro'))

    def test_dependency_closure_unknown(self):
        with self.assertRaises(UnknownMetric):
            dependency_closure('nope')


class TestRegistryConfiguration(unittest.TestCase):
    """Bad catalogs are rejected when built"""

    def test_cycle_is_rejected(self):
        definitions = (
            _definition('a', ('b',)),
            _definition('b', ('a',)),
        )
        with self.assertRaises(RegistryConfigurationError):
            _build_registry(definitions)

    def test_unknown_dependency_is_rejected(self):
        with self.assertRaises(RegistryConfigurationError):
            _build_registry((_definition('a', ('missing',)),))

    def test_duplicate_key_is_rejected(self):
        with self.assertRaises(RegistryConfigurationError):
            _build_registry((_definition('a'), _definition('a')))

    def test_valid_catalog(self):
        registry, order = _build_registry((_definition('c', ('a', 'b')), _definition('a'), _definition('b')))
        self.assertEqual(set(registry), {'a', 'b', 'c'})
        self.assertEqual(order[-1], 'c')


if __name__ == '__main__':
    unittest.main()
