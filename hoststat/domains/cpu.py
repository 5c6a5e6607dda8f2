"""
CPU time-bucket adapter.

Counters come from the ``cpu`` lines of /proc/stat, in jiffies. Shares are
ratios of one pass's deltas, so they do not depend on the elapsed time:

    total = user + nice + system + idle + iowait
    <bucket>_pct = <bucket> delta / total delta * 100

irq and softirq are carried in the snapshot but left out of ``total``, which
matches the usual utilization accounting.

The aggregate ``cpu`` entity also carries gauges: runnable and blocked
process counts from /proc/stat and the 1-minute load average from
/proc/loadavg.
"""

from typing import Dict

from hoststat.domains.base import DomainAdapter, Deltas, delta_diff, delta_sum, ratio
from hoststat.models import Snapshot

CPU_TOTAL_KEY = "cpu"

CPU_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq")
CPU_TOTAL_FIELDS = ("user", "nice", "system", "idle", "iowait")


class CpuAdapter(DomainAdapter):
    name = "cpu"
    counter_fields = CPU_FIELDS
    gauge_fields = ("procs_running", "procs_blocked", "load_1m")
    metric_names = ("user_pct", "system_pct", "idle_pct", "iowait_pct", "busy_pct")
    busiest_metric = "busy_pct"

    def derive(self, deltas: Deltas, elapsed: float, snapshot: Snapshot) -> Dict[str, float]:
        total = delta_sum(*(deltas[f] for f in CPU_TOTAL_FIELDS))
        return {
            "user_pct": ratio(deltas["user"], total, 100.0),
            "system_pct": ratio(deltas["system"], total, 100.0),
            "idle_pct": ratio(deltas["idle"], total, 100.0),
            "iowait_pct": ratio(deltas["iowait"], total, 100.0),
            "busy_pct": ratio(delta_diff(total, deltas["idle"]), total, 100.0),
        }
