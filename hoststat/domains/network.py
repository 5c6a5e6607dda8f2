"""
Network interface adapter.

Counters come from /proc/net/dev. The link speed (Mb/s) and bound address
are snapshot attributes supplied by the source; they are not counters.

Link utilization is reported as a percentage of the link speed::

    bytes_per_sec * 8 * 100 / (speed_mbps * 1024 * 1024)

Error ratios are fractions (error delta / packet delta), not percentages.
"""

import ipaddress
from typing import Dict, Optional

from hoststat.config import BITS_PER_BYTE, BYTES_PER_MEGABIT, EXTERNAL_CLASS, INTERNAL_CLASS
from hoststat.domains.base import DomainAdapter, Deltas, delta_sum, per_second, ratio
from hoststat.models import Snapshot

NETWORK_FIELDS = ("rx_bytes", "rx_packets", "rx_errors", "tx_bytes", "tx_packets", "tx_errors")

ADDRESS_ATTRIBUTE = "address"
SPEED_ATTRIBUTE = "speed_mbps"


def link_utilization(bytes_per_sec: float, speed_mbps: Optional[float]) -> float:
    """Percentage of a link's capacity used by ``bytes_per_sec``; 0.0 when the speed is unknown."""
    if not speed_mbps or speed_mbps <= 0:
        return 0.0
    return bytes_per_sec * BITS_PER_BYTE * 100.0 / (speed_mbps * BYTES_PER_MEGABIT)


def is_internal_address(address: Optional[str]) -> bool:
    """
    Check whether an address belongs to a private, loopback or link-local range.

    Accepts plain addresses and CIDR notation ("10.0.0.5/24"). Anything that
    does not parse is treated as external.
    """
    if not address:
        return False
    try:
        ip = ipaddress.ip_interface(address.strip()).ip
    except ValueError:
        return False
    return ip.is_private or ip.is_loopback or ip.is_link_local


class NetworkAdapter(DomainAdapter):
    name = "network"
    counter_fields = NETWORK_FIELDS
    metric_names = (
        "rx_bytes_per_sec",
        "tx_bytes_per_sec",
        "rx_packets_per_sec",
        "tx_packets_per_sec",
        "rx_error_ratio",
        "tx_error_ratio",
        "error_ratio",
        "rx_utilization_pct",
        "tx_utilization_pct",
    )
    busiest_metric = "error_ratio"
    peak_metrics = ("rx_utilization_pct", "tx_utilization_pct")
    classes = (INTERNAL_CLASS, EXTERNAL_CLASS)

    def classify(self, snapshot: Snapshot) -> str:
        if is_internal_address(snapshot.attributes.get(ADDRESS_ATTRIBUTE)):
            return INTERNAL_CLASS
        return EXTERNAL_CLASS

    def derive(self, deltas: Deltas, elapsed: float, snapshot: Snapshot) -> Dict[str, float]:
        speed = snapshot.attributes.get(SPEED_ATTRIBUTE)
        rx_bytes_per_sec = per_second(deltas["rx_bytes"], elapsed)
        tx_bytes_per_sec = per_second(deltas["tx_bytes"], elapsed)

        return {
            "rx_bytes_per_sec": rx_bytes_per_sec,
            "tx_bytes_per_sec": tx_bytes_per_sec,
            "rx_packets_per_sec": per_second(deltas["rx_packets"], elapsed),
            "tx_packets_per_sec": per_second(deltas["tx_packets"], elapsed),
            "rx_error_ratio": ratio(deltas["rx_errors"], deltas["rx_packets"]),
            "tx_error_ratio": ratio(deltas["tx_errors"], deltas["tx_packets"]),
            "error_ratio": ratio(
                delta_sum(deltas["rx_errors"], deltas["tx_errors"]),
                delta_sum(deltas["rx_packets"], deltas["tx_packets"]),
            ),
            "rx_utilization_pct": link_utilization(rx_bytes_per_sec, speed),
            "tx_utilization_pct": link_utilization(tx_bytes_per_sec, speed),
        }
