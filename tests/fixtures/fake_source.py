"""
Fake snapshot source for testing.

Replays scripted per-pass snapshot lists instead of reading /proc, and can
be told to fail a domain to exercise acquisition error handling.
"""

from typing import Dict, List, Optional

from hoststat.domains.memory import MemoryUsage
from hoststat.errors import AcquisitionError


class FakeSource:
    """
    A scripted snapshot source.

    Attributes:
        passes: Domain name to a list of per-pass snapshot lists (one
            MemoryUsage per pass for the memory domain).
        failing: Domains whose reads raise AcquisitionError.
        calls: Domain name to number of reads.

    Example:
        source = FakeSource({'disk': [[snap_t0], [snap_t10]]})
        collector = HostCollector(config, source)
        collector.collect_pass()
    """

    def __init__(self, passes: Optional[Dict[str, List[list]]] = None, failing=()):
        self.passes = passes or {}
        self.failing = set(failing)
        self.calls: Dict[str, int] = {}
        self.per_cpu_requests: List[bool] = []

    def _next(self, domain: str, default=()):
        if domain in self.failing:
            raise AcquisitionError(f"{domain} source unavailable", source=domain)
        index = self.calls.get(domain, 0)
        self.calls[domain] = index + 1
        scripted = self.passes.get(domain) or [default]
        return scripted[min(index, len(scripted) - 1)]

    def read_cpu(self, per_cpu: bool = False):
        self.per_cpu_requests.append(per_cpu)
        return list(self._next('cpu'))

    def read_disk(self):
        return list(self._next('disk'))

    def read_network(self):
        return list(self._next('network'))

    def read_filesystems(self):
        return list(self._next('filesystem'))

    def read_memory(self):
        return self._next('memory', default=MemoryUsage())
