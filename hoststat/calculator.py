"""
Delta-rate calculator.

``DeltaRateCalculator.compute`` is a pure function of the previous history
entry and the current snapshot: it never mutates either and returns the new
HistoryEntry to store. The rules, in order:

1. No previous entry (first sighting): the snapshot becomes the baseline and
   every metric is 0 with ``ready=False``.
2. Elapsed time <= 0 (clock went backwards, or two samples inside the
   timestamp resolution): nothing is divided, every metric is 0 with
   ``ready=False``.
3. Otherwise each counter's delta is taken; a negative delta marks a counter
   reset and the field is passed to the adapter as ``None`` so every metric
   built from it is 0 for this pass.

In every case the current snapshot replaces the previous one as baseline.
"""

from typing import Dict, List, Optional, Tuple

from hoststat.domains.base import DomainAdapter
from hoststat.models import DerivedMetrics, HistoryEntry, Snapshot


def counter_deltas(previous: Snapshot, current: Snapshot,
                   field_names) -> Tuple[Dict[str, Optional[int]], List[str]]:
    """
    Compute per-field deltas between two snapshots.

    Args:
        previous: Earlier snapshot of the entity.
        current: Later snapshot of the entity.
        field_names: Counter fields to compare.

    Returns:
        Tuple of (deltas, resets). A field whose value decreased maps to
        None in ``deltas`` and is listed in ``resets``. A field missing from
        ``previous`` is treated as a reset as well.
    """
    deltas = {}
    resets = []
    for name in field_names:
        if name not in previous.fields:
            deltas[name] = None
            resets.append(name)
            continue
        delta = current.fields[name] - previous.fields[name]
        if delta < 0:
            deltas[name] = None
            resets.append(name)
        else:
            deltas[name] = delta
    return deltas, resets


class DeltaRateCalculator:
    """
    Turns (previous entry, current snapshot) into a new history entry.

    Args:
        adapter: Domain adapter defining the counters and derived metrics.
        logger: Optional logger for reset and clock-skew diagnostics.
    """

    def __init__(self, adapter: DomainAdapter, logger=None):
        self.adapter = adapter
        self.logger = logger

    def compute(self, previous: Optional[HistoryEntry], current: Snapshot,
                pass_id: int = 0) -> HistoryEntry:
        """
        Fold ``current`` into the entity's history.

        Args:
            previous: The entity's last history entry, or None on first sighting.
            current: The entity's snapshot for this pass.
            pass_id: Identifier of the collection pass doing the fold.

        Returns:
            New HistoryEntry holding ``current`` as baseline and the metrics
            for the interval [previous.timestamp, current.timestamp].

        Raises:
            SnapshotError: If ``current`` lacks a counter the domain needs.
        """
        adapter = self.adapter
        adapter.validate(current)

        key = current.entity_key
        gauges = adapter.gauge_values(current)
        entity_class = adapter.classify(current)

        if previous is None:
            self._log('ridiculous', f'{adapter.name}: baseline for {key} at {current.timestamp}')
            metrics = DerivedMetrics(
                entity_key=key,
                values={**adapter.zero_metrics(), **gauges},
                ready=False,
                entity_class=entity_class,
            )
            return HistoryEntry(snapshot=current, metrics=metrics, pass_id=pass_id, samples=1)

        elapsed = current.timestamp - previous.snapshot.timestamp
        if elapsed <= 0:
            self._log('debug', f'{adapter.name}: non-positive elapsed time ({elapsed:.3f}s) for {key}, '
                               f'rates zeroed for this pass')
            metrics = DerivedMetrics(
                entity_key=key,
                values={**adapter.zero_metrics(), **gauges},
                ready=False,
                entity_class=entity_class,
            )
        else:
            deltas, resets = counter_deltas(previous.snapshot, current, adapter.counter_fields)
            if resets:
                self._log('verbose', f'{adapter.name}: counter reset on {key} '
                                     f'({", ".join(resets)}), affected rates zeroed for this pass')
            values = adapter.zero_metrics()
            values.update(adapter.derive(deltas, elapsed, current))
            values.update(gauges)
            metrics = DerivedMetrics(
                entity_key=key,
                values=values,
                ready=True,
                interval=elapsed,
                resets=tuple(resets),
                entity_class=entity_class,
            )

        return HistoryEntry(
            snapshot=current,
            metrics=metrics,
            pass_id=pass_id,
            samples=previous.samples + 1,
        )

    def _log(self, level: str, message: str) -> None:
        if self.logger is None:
            return
        log_func = getattr(self.logger, level, None) or self.logger.debug
        log_func(message)
