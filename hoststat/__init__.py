"""
hoststat - kernel counter delta/rate engine.

Turns periodic snapshots of monotonically increasing kernel counters (CPU
jiffies, disk I/O counters, network byte/packet counters) into per-second
rates, percentage shares and cross-entity aggregates.
"""

VERSION = "0.3.0"
__version__ = VERSION
