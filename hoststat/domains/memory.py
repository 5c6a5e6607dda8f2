"""
Physical and swap memory summary.

/proc/meminfo values are gauges in KB, so like filesystem usage they skip
the delta engine. Buffers and page cache count as available memory:

    mem_free_kb = MemFree + Buffers + Cached
    mem_used_kb = MemTotal - mem_free_kb
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict

from hoststat.models import AggregateResult

MEMORY_ENTITY_KEY = "memory"

MEMINFO_KEYS = ("MemTotal", "MemFree", "Buffers", "Cached", "SwapTotal", "SwapFree")


@dataclass
class MemoryUsage:
    """Host memory in KB."""
    mem_total_kb: int = 0
    mem_free_kb: int = 0
    mem_used_kb: int = 0
    mem_used_pct: float = 0.0
    buffers_kb: int = 0
    cached_kb: int = 0
    swap_total_kb: int = 0
    swap_free_kb: int = 0
    swap_used_kb: int = 0
    swap_used_pct: float = 0.0

    @classmethod
    def from_meminfo(cls, meminfo: Dict[str, int]) -> 'MemoryUsage':
        """Build usage from parsed /proc/meminfo values; missing keys count as 0."""
        total = meminfo.get("MemTotal", 0)
        buffers = meminfo.get("Buffers", 0)
        cached = meminfo.get("Cached", 0)
        free = meminfo.get("MemFree", 0) + buffers + cached
        used = max(total - free, 0)

        swap_total = meminfo.get("SwapTotal", 0)
        swap_free = meminfo.get("SwapFree", 0)
        swap_used = max(swap_total - swap_free, 0)

        return cls(
            mem_total_kb=total,
            mem_free_kb=free,
            mem_used_kb=used,
            mem_used_pct=used / total * 100.0 if total > 0 else 0.0,
            buffers_kb=buffers,
            cached_kb=cached,
            swap_total_kb=swap_total,
            swap_free_kb=swap_free,
            swap_used_kb=swap_used,
            swap_used_pct=swap_used / swap_total * 100.0 if swap_total > 0 else 0.0,
        )

    def values(self) -> Dict[str, float]:
        return {name: float(value) for name, value in asdict(self).items()}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def summarize_memory(usage: MemoryUsage) -> AggregateResult:
    """Wrap one host's memory usage as a single-entity AggregateResult."""
    values = usage.values()
    return AggregateResult(
        domain="memory",
        entity_count=1,
        sums=dict(values),
        averages=dict(values),
        totals=dict(values),
    )
