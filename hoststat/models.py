"""
Data classes shared by the rate engine.

Snapshot
    One timestamped reading of every counter of one entity.
DerivedMetrics
    Rates, percentages and composite values computed for one entity over
    the interval between two snapshots.
HistoryEntry
    What the history store keeps per entity: the latest snapshot and the
    metrics computed when it was folded in.
AggregateResult
    Sums, averages, class sums and maxima across one pass's entities.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable reading of one entity at one instant.

    Attributes:
        entity_key: Stable entity name (partition name, interface name, 'cpu').
        timestamp: Acquisition time in seconds.
        fields: Monotonic counters keyed by counter name.
        gauges: Instantaneous values reported as-is (no delta).
        attributes: Non-counter context such as bound address or link speed.
    """
    entity_key: str
    timestamp: float
    fields: Dict[str, int] = field(default_factory=dict)
    gauges: Dict[str, float] = field(default_factory=dict)
    attributes: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Snapshot':
        """Create instance from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class DerivedMetrics:
    """
    Values computed for one entity in one pass.

    Attributes:
        entity_key: Entity the values belong to.
        values: Metric name to value. Every metric is 0.0 when there is not
            enough data (first sample, zero elapsed time, zero denominator).
        ready: False on passes that could not produce rates (bootstrap or
            non-positive elapsed time).
        interval: Seconds between the two snapshots, 0.0 when not ready.
        resets: Counter fields that went backwards this pass.
        entity_class: Partition class assigned by the domain, if any.
    """
    entity_key: str
    values: Dict[str, float] = field(default_factory=dict)
    ready: bool = False
    interval: float = 0.0
    resets: Tuple[str, ...] = ()
    entity_class: Optional[str] = None

    def get(self, metric: str, default: float = 0.0) -> float:
        return self.values.get(metric, default)

    def __getitem__(self, metric: str) -> float:
        return self.values[metric]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = asdict(self)
        result['resets'] = list(self.resets)
        return result


@dataclass(frozen=True)
class HistoryEntry:
    """
    Latest known state of one entity.

    Attributes:
        snapshot: Baseline for the next pass.
        metrics: Metrics computed when the snapshot was folded in.
        pass_id: Collection pass that wrote this entry.
        samples: Number of snapshots folded in for this entity so far.
    """
    snapshot: Snapshot
    metrics: DerivedMetrics
    pass_id: int = 0
    samples: int = 1

    @property
    def entity_key(self) -> str:
        return self.snapshot.entity_key


@dataclass(frozen=True)
class MaxEntry:
    """Largest value of one metric in a pass and the entity that holds it."""
    metric: str
    value: float = 0.0
    owner: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class AggregateResult:
    """
    Cross-entity rollup for one domain and one pass.

    Attributes:
        domain: Domain name ('cpu', 'disk', 'network', 'filesystem', 'memory').
        entity_count: Entities observed in this pass.
        sums: Metric name to sum over this pass's entities.
        averages: Metric name to arithmetic mean over this pass's entities.
        class_sums: Class name to per-metric sums for partitioned domains.
        busiest: Max-with-owner for the domain's metric of interest.
        peaks: Additional tracked maxima keyed by metric name.
        totals: Domain-specific derived totals.
    """
    domain: str
    entity_count: int = 0
    sums: Dict[str, float] = field(default_factory=dict)
    averages: Dict[str, float] = field(default_factory=dict)
    class_sums: Dict[str, Dict[str, float]] = field(default_factory=dict)
    busiest: Optional[MaxEntry] = None
    peaks: Dict[str, MaxEntry] = field(default_factory=dict)
    totals: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
