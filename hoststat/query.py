"""
Read-only query facade over one domain's latest pass.

Entities are addressed by key or by the index at which they were first
seen. An entity that exists but has not produced a rate yet is returned
normally with ``ready=False``; only keys and indexes that were never
observed raise.
"""

from typing import Dict, List, Optional

from hoststat.collector import DomainCollector
from hoststat.errors import UnknownMetricError
from hoststat.models import AggregateResult, DerivedMetrics


class MetricQuery:
    """
    Typed accessors for one DomainCollector.

    Args:
        collector: The domain collector to read from.
    """

    def __init__(self, collector: DomainCollector):
        self.collector = collector

    @property
    def domain(self) -> str:
        return self.collector.domain

    @property
    def store(self):
        return self.collector.store

    def keys(self) -> List[str]:
        """Known entity keys in first-seen order."""
        return self.store.keys()

    def __len__(self) -> int:
        return len(self.store)

    def by_key(self, key: str) -> DerivedMetrics:
        """Latest metrics of an entity; raises UnknownEntityError for unseen keys."""
        return self.store.require(key).metrics

    def by_index(self, index) -> DerivedMetrics:
        """Latest metrics of the entity first seen at ``index``; raises EntityIndexError."""
        return self.by_key(self.store.key_at(index))

    def metric(self, key: str, name: str) -> float:
        metrics = self.by_key(key)
        if name not in metrics.values:
            raise UnknownMetricError(name, available=metrics.values.keys())
        return metrics.values[name]

    def as_mapping(self) -> Dict[str, DerivedMetrics]:
        """Every known entity's latest metrics, in first-seen order."""
        return {key: self.store.require(key).metrics for key in self.store.keys()}

    def is_stale(self, key: str) -> bool:
        """True if the entity was not seen in the latest pass."""
        return self.store.is_stale(key, self.collector.pass_id)

    @property
    def aggregate(self) -> Optional[AggregateResult]:
        result = self.collector.last_result
        return result.aggregate if result else None
