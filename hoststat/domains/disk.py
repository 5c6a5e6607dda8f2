"""
Disk partition adapter.

Counters come from /proc/diskstats (see the kernel's iostats documentation).
Time counters are in milliseconds, sectors are 512 bytes.
"""

from typing import Dict

from hoststat.config import MS_PER_SECOND, SECTORS_PER_KB
from hoststat.domains.base import DomainAdapter, Deltas, delta_sum, per_second, ratio
from hoststat.models import Snapshot

DISK_FIELDS = (
    "read_ops",
    "read_merges",
    "read_sectors",
    "read_time_ms",
    "write_ops",
    "write_merges",
    "write_sectors",
    "write_time_ms",
    "io_time_ms",
    "weighted_io_time_ms",
)


class DiskAdapter(DomainAdapter):
    name = "disk"
    counter_fields = DISK_FIELDS
    gauge_fields = ("ios_in_progress",)
    metric_names = (
        "read_ops_per_sec",
        "write_ops_per_sec",
        "read_merges_per_sec",
        "write_merges_per_sec",
        "read_sectors_per_sec",
        "write_sectors_per_sec",
        "read_kb_per_sec",
        "write_kb_per_sec",
        "avg_request_size",
        "avg_service_ms",
        "avg_wait_ms",
        "queue_depth",
        "utilization_pct",
    )
    busiest_metric = "utilization_pct"

    def derive(self, deltas: Deltas, elapsed: float, snapshot: Snapshot) -> Dict[str, float]:
        read_sectors_per_sec = per_second(deltas["read_sectors"], elapsed)
        write_sectors_per_sec = per_second(deltas["write_sectors"], elapsed)

        # Per-request composites share one denominator: completed reads + writes
        io_count = delta_sum(deltas["read_ops"], deltas["write_ops"])
        sectors = delta_sum(deltas["read_sectors"], deltas["write_sectors"])
        wait_ms = delta_sum(deltas["read_time_ms"], deltas["write_time_ms"])

        return {
            "read_ops_per_sec": per_second(deltas["read_ops"], elapsed),
            "write_ops_per_sec": per_second(deltas["write_ops"], elapsed),
            "read_merges_per_sec": per_second(deltas["read_merges"], elapsed),
            "write_merges_per_sec": per_second(deltas["write_merges"], elapsed),
            "read_sectors_per_sec": read_sectors_per_sec,
            "write_sectors_per_sec": write_sectors_per_sec,
            "read_kb_per_sec": read_sectors_per_sec / SECTORS_PER_KB,
            "write_kb_per_sec": write_sectors_per_sec / SECTORS_PER_KB,
            "avg_request_size": ratio(sectors, io_count),
            "avg_service_ms": ratio(deltas["io_time_ms"], io_count),
            "avg_wait_ms": ratio(wait_ms, io_count),
            "queue_depth": per_second(deltas["weighted_io_time_ms"], elapsed) / MS_PER_SECOND,
            "utilization_pct": per_second(deltas["io_time_ms"], elapsed, 100.0) / MS_PER_SECOND,
        }
