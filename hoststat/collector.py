"""
Collection passes.

A pass over one domain reads each entity's previous entry from the
domain's history store, folds the new snapshot in with the calculator,
writes the new entry back, then aggregates the pass's metrics. The result
of the pass is held as a PassResult until the next pass replaces it.

``HostCollector`` owns one DomainCollector per configured counter domain and
reads the gauge-only domains (filesystem, memory) directly; domains
never share history, so a failing source only costs that domain its pass.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from hoststat.aggregator import Aggregator
from hoststat.calculator import DeltaRateCalculator
from hoststat.config import DOMAINS, GAUGE_DOMAINS, HostStatConfig
from hoststat.domains import (
    DomainAdapter,
    FilesystemUsage,
    get_adapter,
    summarize_filesystems,
    summarize_memory,
)
from hoststat.domains.memory import MEMORY_ENTITY_KEY
from hoststat.errors import AcquisitionError, SnapshotError
from hoststat.history import EntityHistoryStore
from hoststat.models import AggregateResult, DerivedMetrics, Snapshot


@dataclass
class PassResult:
    """
    Outcome of one collection pass over one domain.

    Attributes:
        domain: Domain name.
        pass_id: Sequence number of the pass within its DomainCollector.
        metrics: Entity key to metrics, in the order entities were read.
        aggregate: Rollup across ``metrics``.
        skipped: Entity keys dropped this pass because their snapshot was malformed.
        attributes: Entity key to snapshot attributes (address, link speed).
        filesystems: Per-mount usage (filesystem domain only).
    """
    domain: str
    pass_id: int
    metrics: Dict[str, DerivedMetrics] = field(default_factory=dict)
    aggregate: Optional[AggregateResult] = None
    skipped: List[str] = field(default_factory=list)
    attributes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    filesystems: List[FilesystemUsage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'domain': self.domain,
            'pass_id': self.pass_id,
            'metrics': {key: m.to_dict() for key, m in self.metrics.items()},
            'aggregate': self.aggregate.to_dict() if self.aggregate else None,
            'skipped': list(self.skipped),
            'attributes': dict(self.attributes),
            'filesystems': [u.to_dict() for u in self.filesystems],
        }


class DomainCollector:
    """
    Runs collection passes for one counter domain.

    Args:
        adapter: Domain adapter.
        store: History store to use; a new one is created when omitted.
        strict_owner: Only report a busiest entity once its value is positive.
        logger: Optional logger.
    """

    def __init__(self, adapter: DomainAdapter, store: Optional[EntityHistoryStore] = None,
                 strict_owner: bool = False, logger=None):
        self.adapter = adapter
        self.store = store if store is not None else EntityHistoryStore(adapter.name)
        self.calculator = DeltaRateCalculator(adapter, logger=logger)
        self.aggregator = Aggregator(adapter, strict_owner=strict_owner)
        self.logger = logger
        self.pass_id = 0
        self.last_result: Optional[PassResult] = None

    @property
    def domain(self) -> str:
        return self.adapter.name

    def collect(self, snapshots: Iterable[Snapshot]) -> PassResult:
        """
        Fold one pass's snapshots into history and aggregate them.

        Entities whose snapshot is malformed are logged and skipped; their
        history entry is left untouched.
        """
        self.pass_id += 1
        metrics: Dict[str, DerivedMetrics] = {}
        attributes: Dict[str, Dict[str, Any]] = {}
        skipped = []

        for snapshot in snapshots:
            key = snapshot.entity_key
            try:
                entry = self.calculator.compute(self.store.get(key), snapshot, pass_id=self.pass_id)
            except SnapshotError as e:
                if self.logger:
                    self.logger.warning(f'Skipping {self.domain} entity {key}: {e}')
                skipped.append(key)
                continue
            self.store.put(key, entry)
            metrics[key] = entry.metrics
            if snapshot.attributes:
                attributes[key] = dict(snapshot.attributes)

        result = PassResult(
            domain=self.domain,
            pass_id=self.pass_id,
            metrics=metrics,
            aggregate=self.aggregator.aggregate(list(metrics.items())),
            skipped=skipped,
            attributes=attributes,
        )
        self.last_result = result

        if self.logger:
            self.logger.debug(f'{self.domain} pass {self.pass_id}: {len(metrics)} entities, '
                              f'{len(skipped)} skipped')
        return result


class HostCollector:
    """
    Collects every configured domain from one snapshot source.

    Args:
        config: Session settings (domains, per_cpu, strict_owner, ...).
        source: Object with read_cpu/read_disk/read_network/read_filesystems/read_memory.
        logger: Optional logger.
    """

    def __init__(self, config: HostStatConfig, source, logger=None):
        self.config = config
        self.source = source
        self.logger = logger
        self.collectors: Dict[str, DomainCollector] = {}
        self.filesystem_result: Optional[PassResult] = None
        self._filesystem_passes = 0
        self.memory_result: Optional[PassResult] = None
        self._memory_passes = 0

        for domain in config.domains:
            if domain in GAUGE_DOMAINS:
                continue
            self.collectors[domain] = DomainCollector(
                get_adapter(domain),
                strict_owner=config.strict_owner,
                logger=logger,
            )

    def _read(self, domain: str) -> List[Snapshot]:
        if domain == DOMAINS.cpu.value:
            return self.source.read_cpu(per_cpu=self.config.per_cpu)
        if domain == DOMAINS.disk.value:
            return self.source.read_disk()
        if domain == DOMAINS.network.value:
            return self.source.read_network()
        raise ValueError(f'No snapshot source for domain {domain}')

    def collect_pass(self) -> Dict[str, PassResult]:
        """
        Run one pass over every configured domain.

        Returns:
            Domain name to PassResult. A domain whose source raised
            AcquisitionError is logged and absent from the result.
        """
        results: Dict[str, PassResult] = {}

        for domain, collector in self.collectors.items():
            try:
                snapshots = self._read(domain)
            except AcquisitionError as e:
                if self.logger:
                    self.logger.warning(f'No {domain} pass this cycle: {e}')
                continue
            results[domain] = collector.collect(snapshots)

        if DOMAINS.filesystem.value in self.config.domains:
            result = self._collect_filesystems()
            if result is not None:
                results[DOMAINS.filesystem.value] = result

        if DOMAINS.memory.value in self.config.domains:
            result = self._collect_memory()
            if result is not None:
                results[DOMAINS.memory.value] = result

        return results

    def _collect_filesystems(self) -> Optional[PassResult]:
        try:
            usages = self.source.read_filesystems()
        except AcquisitionError as e:
            if self.logger:
                self.logger.warning(f'No filesystem pass this cycle: {e}')
            return None

        self._filesystem_passes += 1
        self.filesystem_result = PassResult(
            domain=DOMAINS.filesystem.value,
            pass_id=self._filesystem_passes,
            metrics={
                u.mount: DerivedMetrics(entity_key=u.mount, values={'used_pct': u.used_pct}, ready=True)
                for u in usages
            },
            aggregate=summarize_filesystems(usages),
            filesystems=usages,
        )
        return self.filesystem_result

    def _collect_memory(self) -> Optional[PassResult]:
        try:
            usage = self.source.read_memory()
        except AcquisitionError as e:
            if self.logger:
                self.logger.warning(f'No memory pass this cycle: {e}')
            return None

        self._memory_passes += 1
        self.memory_result = PassResult(
            domain=DOMAINS.memory.value,
            pass_id=self._memory_passes,
            metrics={
                MEMORY_ENTITY_KEY: DerivedMetrics(entity_key=MEMORY_ENTITY_KEY, values=usage.values(),
                                                  ready=True),
            },
            aggregate=summarize_memory(usage),
        )
        return self.memory_result
