"""
Metric Registry

Canonical catalog of every metric the dashboard shows: raw campaign fields and
the metrics derived from them. Each definition names its unit, the metrics it
depends on and the formula that produces it. Every call site (cards, tables,
charts, summaries) goes through this registry instead of inlining arithmetic.

The catalog is fixed at import time. Dependencies are checked once, when the
module is loaded: an unknown dependency or a cycle raises
RegistryConfigurationError.
"""

from dataclasses import dataclass, field
from enum import Enum
from graphlib import CycleError, TopologicalSorter
from typing import Callable, Dict, List, Mapping, Tuple
import logging

from ..calculators import (
    StorageCalculators,
    RateCalculators,
    CostCalculators,
    RevenueCalculators,
    ROASCalculators
)

logger = logging.getLogger(__name__)


class MetricUnit(str, Enum):
    """How a metric value is rendered."""

    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    COUNT = "count"
    MULTIPLIER = "multiplier"
    TEXT = "text"


class MetricCategory(str, Enum):
    """Display grouping used by cards and column pickers."""

    VOLUME = "volume"
    COST = "cost"
    REVENUE = "revenue"
    RATE = "rate"
    RETURN = "return"


class UnknownMetric(KeyError):
    """Raised when a metric key is not in the registry."""

    def __init__(self, key):
        self.key = key
        super().__init__(key)

    def __str__(self):
        return f"Unknown metric '{self.key}'"


class RegistryConfigurationError(Exception):
    """Raised at startup when metric definitions reference each other badly."""
    pass


@dataclass(frozen=True)
class MetricDefinition:
    """Describes a single metric."""

    key: str
    label: str
    unit: MetricUnit
    category: MetricCategory
    formula: Callable[[Mapping[str, float]], float] = field(repr=False, compare=False)
    depends_on: Tuple[str, ...] = ()
    description: str = ""

    @property
    def is_monetary(self) -> bool:
        return self.unit == MetricUnit.CURRENCY

    def to_dict(self) -> Dict:
        return {
            'key': self.key,
            'label': self.label,
            'unit': self.unit.value,
            'category': self.category.value,
            'depends_on': list(self.depends_on),
            'description': self.description
        }


def _raw(key: str, label: str, unit: MetricUnit, category: MetricCategory, description: str) -> MetricDefinition:
    return MetricDefinition(
        key=key,
        label=label,
        unit=unit,
        category=category,
        formula=StorageCalculators.passthrough(key),
        description=description
    )


# Display order. Raw fields first, then single-hop, then multi-hop metrics.
_DEFINITIONS: Tuple[MetricDefinition, ...] = (
    # Volume
    _raw('impressoes', 'Impressões', MetricUnit.COUNT, MetricCategory.VOLUME,
         'Número de vezes que o anúncio foi exibido'),
    _raw('cliques', 'Cliques', MetricUnit.COUNT, MetricCategory.VOLUME,
         'Número de cliques no anúncio'),
    _raw('cliquesInvalidos', 'Cliques inválidos', MetricUnit.COUNT, MetricCategory.VOLUME,
         'Cliques descartados pela plataforma'),
    _raw('conversoes', 'Conversões', MetricUnit.COUNT, MetricCategory.VOLUME,
         'Número de conversões'),
    _raw('visitors', 'Visitantes', MetricUnit.COUNT, MetricCategory.VOLUME,
         'Visitantes na página de destino'),
    _raw('checkouts', 'Checkouts', MetricUnit.COUNT, MetricCategory.VOLUME,
         'Checkouts iniciados'),
    _raw('visualizacoes', 'Visualizações', MetricUnit.COUNT, MetricCategory.VOLUME,
         'Visualizações de vídeo'),

    # Cost
    _raw('orcamento', 'Orçamento', MetricUnit.CURRENCY, MetricCategory.COST,
         'Orçamento definido para a campanha'),
    _raw('custo', 'Custo', MetricUnit.CURRENCY, MetricCategory.COST,
         'Valor investido na campanha'),
    _raw('comissao', 'Comissão', MetricUnit.CURRENCY, MetricCategory.REVENUE,
         'Comissão por conversão'),

    # Single-hop derived
    MetricDefinition(
        key='ctr', label='CTR', unit=MetricUnit.PERCENTAGE, category=MetricCategory.RATE,
        formula=RateCalculators.calculate_ctr, depends_on=('cliques', 'impressoes'),
        description='Taxa de cliques = Cliques / Impressões'
    ),
    MetricDefinition(
        key='cpc', label='CPC', unit=MetricUnit.CURRENCY, category=MetricCategory.COST,
        formula=CostCalculators.calculate_cpc, depends_on=('custo', 'cliques'),
        description='Custo por clique = Custo / Cliques'
    ),
    MetricDefinition(
        key='cpcMedio', label='CPC médio', unit=MetricUnit.CURRENCY, category=MetricCategory.COST,
        formula=CostCalculators.calculate_cpc, depends_on=('custo', 'cliques'),
        description='Custo por clique = Custo / Cliques'
    ),
    MetricDefinition(
        key='cpm', label='CPM', unit=MetricUnit.CURRENCY, category=MetricCategory.COST,
        formula=CostCalculators.calculate_cpm, depends_on=('custo', 'impressoes'),
        description='Custo por mil impressões'
    ),
    MetricDefinition(
        key='taxaConversao', label='Taxa de conversão', unit=MetricUnit.PERCENTAGE,
        category=MetricCategory.RATE,
        formula=RateCalculators.calculate_taxa_conversao, depends_on=('conversoes', 'cliques'),
        description='Conversões / Cliques'
    ),
    MetricDefinition(
        key='custoConversao', label='Custo por conversão', unit=MetricUnit.CURRENCY,
        category=MetricCategory.COST,
        formula=CostCalculators.calculate_custo_conversao, depends_on=('custo', 'conversoes'),
        description='CPA = Custo / Conversões'
    ),
    MetricDefinition(
        key='cpvMedio', label='CPV médio', unit=MetricUnit.CURRENCY, category=MetricCategory.COST,
        formula=CostCalculators.calculate_cpv_medio, depends_on=('custo', 'visualizacoes'),
        description='Custo por visualização'
    ),
    MetricDefinition(
        key='vtr', label='VTR', unit=MetricUnit.PERCENTAGE, category=MetricCategory.RATE,
        formula=RateCalculators.calculate_vtr, depends_on=('visualizacoes', 'impressoes'),
        description='Visualizações / Impressões'
    ),
    MetricDefinition(
        key='faturamento', label='Faturamento', unit=MetricUnit.CURRENCY,
        category=MetricCategory.REVENUE,
        formula=RevenueCalculators.calculate_faturamento, depends_on=('comissao', 'conversoes'),
        description='Receita gerada = Comissão × Conversões'
    ),

    # Multi-hop derived
    MetricDefinition(
        key='valorConversao', label='Valor por conversão', unit=MetricUnit.CURRENCY,
        category=MetricCategory.REVENUE,
        formula=RevenueCalculators.calculate_valor_conversao, depends_on=('faturamento', 'conversoes'),
        description='Faturamento / Conversões'
    ),
    MetricDefinition(
        key='lucro', label='Lucro', unit=MetricUnit.CURRENCY, category=MetricCategory.RETURN,
        formula=RevenueCalculators.calculate_lucro, depends_on=('faturamento', 'custo'),
        description='Lucro = Faturamento - Custo'
    ),
    MetricDefinition(
        key='roi', label='ROI', unit=MetricUnit.PERCENTAGE, category=MetricCategory.RETURN,
        formula=ROASCalculators.calculate_roi, depends_on=('lucro', 'custo'),
        description='Retorno sobre investimento = Lucro / Custo'
    ),
    MetricDefinition(
        key='roas', label='ROAS', unit=MetricUnit.MULTIPLIER, category=MetricCategory.RETURN,
        formula=ROASCalculators.calculate_roas, depends_on=('faturamento', 'custo'),
        description='Retorno sobre gasto em anúncios = Faturamento / Custo'
    ),
)


def _build_registry(definitions) -> Tuple[Dict[str, MetricDefinition], Tuple[str, ...]]:
    """
    Index definitions by key and compute the evaluation order.

    Raises:
        RegistryConfigurationError: duplicate key, unknown dependency or a cycle
    """
    registry: Dict[str, MetricDefinition] = {}
    for definition in definitions:
        if definition.key in registry:
            raise RegistryConfigurationError(f"Duplicate metric key '{definition.key}'")
        registry[definition.key] = definition

    sorter = TopologicalSorter()
    for definition in definitions:
        for dependency in definition.depends_on:
            if dependency not in registry:
                raise RegistryConfigurationError(
                    f"Metric '{definition.key}' depends on unknown metric '{dependency}'"
                )
        sorter.add(definition.key, *definition.depends_on)

    try:
        evaluation_order = tuple(sorter.static_order())
    except CycleError as e:
        raise RegistryConfigurationError(f"Circular metric dependencies: {e.args[1]}") from e

    return registry, evaluation_order


_REGISTRY, EVALUATION_ORDER = _build_registry(_DEFINITIONS)

logger.debug(f"Metric registry loaded with {len(_REGISTRY)} metrics")


def lookup(key: str) -> MetricDefinition:
    """
    Look up a metric by key.

    Raises:
        UnknownMetric: if the key is not registered
    """
    try:
        return _REGISTRY[key]
    except (KeyError, TypeError):
        raise UnknownMetric(key) from None


def all_keys() -> List[str]:
    """All metric keys in display order (a fresh list on every call)."""
    return [definition.key for definition in _DEFINITIONS]


def all_definitions() -> List[MetricDefinition]:
    return list(_DEFINITIONS)


def metrics_by_unit(unit: MetricUnit) -> List[MetricDefinition]:
    """Return all metrics rendered with a given unit."""
    unit = MetricUnit(unit)
    return [definition for definition in _DEFINITIONS if definition.unit == unit]


def monetary_keys() -> List[str]:
    """Keys of every metric expressed in a currency."""
    return [definition.key for definition in metrics_by_unit(MetricUnit.CURRENCY)]


def dependency_closure(key: str) -> List[str]:
    """
    The metric and everything it depends on, in evaluation order.

    Raises:
        UnknownMetric: if the key is not registered
    """
    needed = set()
    pending = [lookup(key).key]
    while pending:
        current = pending.pop()
        if current in needed:
            continue
        needed.add(current)
        pending.extend(_REGISTRY[current].depends_on)
    return [metric_key for metric_key in EVALUATION_ORDER if metric_key in needed]
