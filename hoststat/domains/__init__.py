"""
Domain adapters for the rate engine.

    - CpuAdapter: /proc/stat CPU time buckets
    - DiskAdapter: /proc/diskstats partitions
    - NetworkAdapter: /proc/net/dev interfaces
    - summarize_filesystems: mounted filesystem usage (gauges only)
    - summarize_memory: physical and swap memory (gauges only)
"""

from hoststat.domains.base import DomainAdapter
from hoststat.domains.cpu import CpuAdapter
from hoststat.domains.disk import DiskAdapter
from hoststat.domains.network import NetworkAdapter
from hoststat.domains.filesystem import FilesystemUsage, summarize_filesystems
from hoststat.domains.memory import MemoryUsage, summarize_memory

ADAPTERS = {
    'cpu': CpuAdapter,
    'disk': DiskAdapter,
    'network': NetworkAdapter,
}


def get_adapter(domain: str) -> DomainAdapter:
    """Return a new adapter instance for a counter domain."""
    return ADAPTERS[domain]()


__all__ = [
    'DomainAdapter',
    'CpuAdapter',
    'DiskAdapter',
    'NetworkAdapter',
    'FilesystemUsage',
    'summarize_filesystems',
    'MemoryUsage',
    'summarize_memory',
    'ADAPTERS',
    'get_adapter',
]
