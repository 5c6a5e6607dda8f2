"""
Cross-entity aggregation for one collection pass.

Every call folds the current pass's per-entity metrics into a fresh
AggregateResult; no accumulator outlives a pass.

Busiest-entity ranking uses a single linear scan starting at 0 with a
greater-or-equal comparison, so the last entity holding the maximum wins.
When every value is 0 (startup) the last entity in iteration order is
reported as owner. ``strict_owner`` switches this off and only reports an
owner once some entity has a positive value.
"""

from typing import TYPE_CHECKING, Iterable, List, Sequence, Tuple

from hoststat.models import AggregateResult, DerivedMetrics, MaxEntry

if TYPE_CHECKING:
    from hoststat.domains.base import DomainAdapter

EntityMetrics = Tuple[str, DerivedMetrics]


def track_max(entities: Iterable[EntityMetrics], metric: str,
              inclusive: bool = True, require_positive: bool = False) -> MaxEntry:
    """
    Find the largest value of ``metric`` and the entity holding it.

    Args:
        entities: (entity key, metrics) pairs in iteration order.
        metric: Metric to rank on.
        inclusive: Use ">=" (last equal value wins) instead of ">".
        require_positive: Ignore values that are not strictly positive.

    Returns:
        MaxEntry with owner None when no entity qualified.
    """
    max_value = 0.0
    owner = None
    for key, metrics in entities:
        value = metrics.get(metric)
        if require_positive and value <= 0:
            continue
        if value > max_value or (inclusive and value == max_value):
            max_value = value
            owner = key
    return MaxEntry(metric=metric, value=max_value, owner=owner)


class Aggregator:
    """
    Folds one domain's per-entity metrics into an AggregateResult.

    Args:
        adapter: Domain adapter supplying metric names, the busiest metric,
            peak metrics and partition classes.
        strict_owner: Require a positive value before reporting a busiest owner.
    """

    def __init__(self, adapter: "DomainAdapter", strict_owner: bool = False):
        self.adapter = adapter
        self.strict_owner = strict_owner

    def aggregate(self, entities: Sequence[EntityMetrics]) -> AggregateResult:
        entities = list(entities)
        names = self._metric_names(entities)
        count = len(entities)

        sums = {name: 0.0 for name in names}
        class_sums = {cls: {name: 0.0 for name in names} for cls in self.adapter.classes}

        for _, metrics in entities:
            bucket = class_sums.get(metrics.entity_class) if metrics.entity_class else None
            for name in names:
                value = metrics.get(name)
                sums[name] += value
                if bucket is not None:
                    bucket[name] += value

        averages = {name: (total / count if count else 0.0) for name, total in sums.items()}

        busiest = None
        if self.adapter.busiest_metric:
            busiest = track_max(entities, self.adapter.busiest_metric,
                                inclusive=True, require_positive=self.strict_owner)

        peaks = {metric: track_max(entities, metric, inclusive=False)
                 for metric in self.adapter.peak_metrics}

        return AggregateResult(
            domain=self.adapter.name,
            entity_count=count,
            sums=sums,
            averages=averages,
            class_sums=class_sums,
            busiest=busiest,
            peaks=peaks,
        )

    def _metric_names(self, entities: List[EntityMetrics]) -> List[str]:
        names = self.adapter.all_metric_names()
        seen = set(names)
        for _, metrics in entities:
            for name in metrics.values:
                if name not in seen:
                    seen.add(name)
                    names.append(name)
        return names


def aggregate(entities: Sequence[EntityMetrics], adapter: "DomainAdapter",
              strict_owner: bool = False) -> AggregateResult:
    """Convenience wrapper around Aggregator(adapter, strict_owner).aggregate(entities)."""
    return Aggregator(adapter, strict_owner=strict_owner).aggregate(entities)
