"""
Domain adapter interface and guarded arithmetic helpers.

A domain adapter tells the generic rate engine which counters a snapshot
must carry, how to turn one pass's counter deltas into named metrics, and
how its entities are ranked and partitioned during aggregation.

Deltas handed to ``derive`` are ``None`` for counters that went backwards
(reset or wrap). Every helper here propagates ``None`` and turns it, or a
non-positive denominator, into 0.0 so no derived metric is ever negative
or a division fault.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from hoststat.errors import ErrorCode, SnapshotError
from hoststat.models import Snapshot

Deltas = Dict[str, Optional[int]]


def delta_sum(*deltas: Optional[int]) -> Optional[int]:
    """Sum deltas, or None if any of them is unusable."""
    if any(d is None for d in deltas):
        return None
    return sum(deltas)


def delta_diff(minuend: Optional[int], subtrahend: Optional[int]) -> Optional[int]:
    """Difference of two deltas, or None if either is unusable or the result is negative."""
    if minuend is None or subtrahend is None:
        return None
    diff = minuend - subtrahend
    return diff if diff >= 0 else None


def ratio(numerator: Optional[float], denominator: Optional[float], scale: float = 1.0) -> float:
    """Return numerator / denominator * scale, 0.0 for unusable or non-positive denominators."""
    if numerator is None or denominator is None or denominator <= 0:
        return 0.0
    return float(numerator) / float(denominator) * scale


def per_second(delta: Optional[int], elapsed: float, scale: float = 1.0) -> float:
    """Average rate of a counter over ``elapsed`` seconds."""
    return ratio(delta, elapsed, scale)


class DomainAdapter(ABC):
    """
    Maps one domain's raw counters onto the generic rate engine.

    Class attributes:
        name: Domain name used in results and logs.
        counter_fields: Monotonic counters every snapshot must carry.
        gauge_fields: Instantaneous values copied into the metrics unchanged.
        metric_names: Names ``derive`` returns, in display order.
        busiest_metric: Metric ranked with the ">=" last-wins scan, if any.
        peak_metrics: Metrics tracked with a strict ">" scan.
        classes: Partition class names (empty for unpartitioned domains).
    """

    name: str = ""
    counter_fields: Tuple[str, ...] = ()
    gauge_fields: Tuple[str, ...] = ()
    metric_names: Tuple[str, ...] = ()
    busiest_metric: Optional[str] = None
    peak_metrics: Tuple[str, ...] = ()
    classes: Tuple[str, ...] = ()

    def validate(self, snapshot: Snapshot) -> None:
        """Raise SnapshotError if the snapshot lacks a counter or holds a non-integer."""
        missing = [f for f in self.counter_fields if f not in snapshot.fields]
        if missing:
            raise SnapshotError(
                f"{self.name} snapshot for '{snapshot.entity_key}' is incomplete",
                entity_key=snapshot.entity_key,
                missing_fields=missing,
            )
        for name in self.counter_fields:
            value = snapshot.fields[name]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise SnapshotError(
                    f"{self.name} counter '{name}' of '{snapshot.entity_key}' is not a "
                    f"non-negative integer: {value!r}",
                    entity_key=snapshot.entity_key,
                    code=ErrorCode.SNAPSHOT_INVALID,
                )

    def zero_metrics(self) -> Dict[str, float]:
        return {name: 0.0 for name in self.metric_names}

    def gauge_values(self, snapshot: Snapshot) -> Dict[str, float]:
        return {name: float(snapshot.gauges.get(name, 0.0)) for name in self.gauge_fields}

    def all_metric_names(self) -> List[str]:
        return list(self.metric_names) + list(self.gauge_fields)

    def classify(self, snapshot: Snapshot) -> Optional[str]:
        """Partition class of an entity; unpartitioned domains return None."""
        return None

    @abstractmethod
    def derive(self, deltas: Deltas, elapsed: float, snapshot: Snapshot) -> Dict[str, float]:
        """
        Compute this domain's metrics from one pass's deltas.

        Args:
            deltas: Counter name to non-negative delta, or None after a reset.
            elapsed: Seconds between the previous and current snapshot (> 0).
            snapshot: Current snapshot, for attributes such as link speed.

        Returns:
            Mapping containing every name in ``metric_names``.
        """
        pass
