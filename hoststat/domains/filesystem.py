"""
Mounted filesystem usage summary.

Filesystem usage is a gauge, not a counter, so it bypasses the delta engine
and only goes through aggregation: totals across mounts, the overall used
rate, and the fullest mount.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List

from hoststat.aggregator import track_max
from hoststat.config import IGNORED_FS_NAMES
from hoststat.models import AggregateResult, DerivedMetrics


@dataclass
class FilesystemUsage:
    """Usage of one mounted filesystem, sizes in KB."""
    fs_name: str
    mount: str
    total_kb: int = 0
    used_kb: int = 0
    free_kb: int = 0
    used_pct: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FilesystemUsage':
        """Create instance from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def summarize_filesystems(usages: Iterable[FilesystemUsage]) -> AggregateResult:
    """
    Summarize filesystem usage across mounts.

    Totals are summed over every mount. The overall used rate is
    used / (used + free) * 100, which ignores space reserved for root. The
    fullest mount is picked with a strict ">" scan and skips pseudo
    filesystems listed in IGNORED_FS_NAMES.

    Args:
        usages: One FilesystemUsage per mount point.

    Returns:
        AggregateResult keyed by mount point.
    """
    usages: List[FilesystemUsage] = list(usages)
    total_kb = sum(u.total_kb for u in usages)
    used_kb = sum(u.used_kb for u in usages)
    free_kb = sum(u.free_kb for u in usages)

    ranked = [
        (u.mount, DerivedMetrics(entity_key=u.mount, values={"used_pct": u.used_pct}, ready=True))
        for u in usages
        if u.fs_name not in IGNORED_FS_NAMES
    ]

    used_pct_sum = sum(u.used_pct for u in usages)
    count = len(usages)

    return AggregateResult(
        domain="filesystem",
        entity_count=count,
        sums={"used_pct": used_pct_sum},
        averages={"used_pct": used_pct_sum / count if count else 0.0},
        busiest=track_max(ranked, "used_pct", inclusive=False),
        totals={
            "total_kb": float(total_kb),
            "used_kb": float(used_kb),
            "free_kb": float(free_kb),
            "used_pct": used_kb / (used_kb + free_kb) * 100.0 if used_kb + free_kb > 0 else 0.0,
        },
    )
