# Metrics Module
#
# Metric registry, per-campaign derivation and cross-campaign aggregation.

from .registry import (
    MetricDefinition,
    MetricUnit,
    MetricCategory,
    UnknownMetric,
    RegistryConfigurationError,
    lookup,
    all_keys,
    all_definitions,
    metrics_by_unit,
    monetary_keys
)
from .derivation import derive_all, derive_metric, derive_campaigns
from .aggregator import AggregationMode, aggregate, weighted_ratio

__all__ = [
    'MetricDefinition',
    'MetricUnit',
    'MetricCategory',
    'UnknownMetric',
    'RegistryConfigurationError',
    'lookup',
    'all_keys',
    'all_definitions',
    'metrics_by_unit',
    'monetary_keys',
    'derive_all',
    'derive_metric',
    'derive_campaigns',
    'AggregationMode',
    'aggregate',
    'weighted_ratio'
]
