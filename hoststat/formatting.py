"""
Rendering of pass results.

Text output follows the compact line format downstream consumers parse:

    format_value     0 -> "0", anything else with two decimals
    format_set       name|value$name|value$...
    format_max       value,owner
    format_traffic_detail   address=name=(rx|tx)$...
    format_link_detail      name|address|speed$...
    format_usage_set        fs=mount=rate$...

Terminal output uses rich tables; JSON goes through HostStatJsonEncoder.
"""

import dataclasses
import enum
import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

from rich.console import Console
from rich.table import Table

from hoststat.domains.network import ADDRESS_ATTRIBUTE, SPEED_ATTRIBUTE
from hoststat.models import MaxEntry

# Columns shown per domain in table output
TABLE_COLUMNS = {
    'cpu': ('user_pct', 'system_pct', 'iowait_pct', 'idle_pct', 'busy_pct', 'procs_running', 'load_1m'),
    'disk': ('read_kb_per_sec', 'write_kb_per_sec', 'avg_wait_ms', 'queue_depth', 'utilization_pct'),
    'network': ('rx_bytes_per_sec', 'tx_bytes_per_sec', 'error_ratio',
                'rx_utilization_pct', 'tx_utilization_pct'),
    'filesystem': ('used_pct',),
    'memory': ('mem_used_pct', 'mem_used_kb', 'mem_total_kb', 'swap_used_pct'),
}

# Per-class sums printed for partitioned domains
CLASS_SUM_METRICS = (
    'rx_bytes_per_sec', 'tx_bytes_per_sec',
    'rx_packets_per_sec', 'tx_packets_per_sec',
    'rx_error_ratio', 'tx_error_ratio',
)


class HostStatJsonEncoder(json.JSONEncoder):
    """JSON encoder for hoststat types.

    Handles serialization of types the standard encoder cannot process:
    - Objects with a to_dict() method use it
    - Other dataclasses are converted with dataclasses.asdict
    - Sets and tuples are converted to lists
    - Enums are converted to their values
    - Logger objects are converted to placeholder strings

    Example:
        >>> json.dumps({'domains': {'cpu'}}, cls=HostStatJsonEncoder)
        '{"domains": ["cpu"]}'
    """

    def default(self, obj: Any) -> Any:
        if hasattr(obj, 'to_dict'):
            return obj.to_dict()
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        if isinstance(obj, enum.Enum):
            return obj.value
        if "Logger" in str(type(obj)):
            return "Logger object"
        if hasattr(obj, '__dict__'):
            return obj.__dict__
        return super().default(obj)


def format_value(value: float) -> str:
    """Render a metric value: exactly 0 as "0", everything else with two decimals."""
    if value == 0:
        return "0"
    return "%.2f" % value


def format_set(pairs: Iterable[Tuple[str, float]]) -> str:
    return "".join(f"{name}|{format_value(value)}$" for name, value in pairs)


def format_max(entry: Optional[MaxEntry]) -> str:
    """Render a max-with-owner as "value,owner" (owner empty when none)."""
    if entry is None:
        return "0,"
    return f"{format_value(entry.value)},{entry.owner or ''}"


def format_traffic_detail(rows: Iterable[Tuple[str, str, float, float]]) -> str:
    """Render (address, name, rx, tx) rows as "address=name=(rx|tx)$"."""
    return "".join(f"{address}={name}=({format_value(rx)}|{format_value(tx)})$"
                   for address, name, rx, tx in rows)


def format_link_detail(rows: Iterable[Tuple[str, str, float]]) -> str:
    """Render (name, address, speed) rows as "name|address|speed$"."""
    return "".join(f"{name}|{address}|{format_value(speed)}$" for name, address, speed in rows)


def format_usage_set(usages) -> str:
    """Render FilesystemUsage entries as "fs=mount=rate$"."""
    return "".join(f"{u.fs_name}={u.mount}={format_value(u.used_pct)}$" for u in usages)


def render_pass_text(results: Dict[str, Any]) -> str:
    """
    Render a pass as key=value lines in the compact text format.

    For every domain: each displayed metric's per-entity set and average,
    the busiest entity and any peaks. Partitioned domains add per-class sums
    of bytes, packets and error ratios. Network adds traffic and link detail,
    filesystem adds the usage set and totals.
    """
    lines: List[str] = []
    for domain, result in results.items():
        aggregate = result.aggregate
        lines.append(f"{domain}.pass={result.pass_id}")
        lines.append(f"{domain}.count={aggregate.entity_count if aggregate else 0}")

        for metric in TABLE_COLUMNS.get(domain, ()):
            pairs = [(key, m.get(metric)) for key, m in result.metrics.items()]
            lines.append(f"{domain}.{metric}.set={format_set(pairs)}")
            if aggregate:
                lines.append(f"{domain}.{metric}.avg={format_value(aggregate.averages.get(metric, 0.0))}")

        if aggregate and aggregate.busiest is not None:
            lines.append(f"{domain}.{aggregate.busiest.metric}.max={format_max(aggregate.busiest)}")
        if aggregate:
            for metric, peak in aggregate.peaks.items():
                lines.append(f"{domain}.{metric}.max={format_max(peak)}")
            for cls, sums in aggregate.class_sums.items():
                for metric in CLASS_SUM_METRICS:
                    lines.append(f"{domain}.{cls}.{metric}={format_value(sums.get(metric, 0.0))}")
            for name, value in aggregate.totals.items():
                lines.append(f"{domain}.total.{name}={format_value(value)}")

        if result.attributes:
            traffic = []
            links = []
            for key, m in result.metrics.items():
                attrs = result.attributes.get(key, {})
                address = attrs.get(ADDRESS_ATTRIBUTE, '')
                traffic.append((address, key, m.get('rx_bytes_per_sec'), m.get('tx_bytes_per_sec')))
                links.append((key, address, attrs.get(SPEED_ATTRIBUTE, 0.0)))
            lines.append(f"{domain}.traffic={format_traffic_detail(traffic)}")
            lines.append(f"{domain}.links={format_link_detail(links)}")

        if result.filesystems:
            lines.append(f"{domain}.usage={format_usage_set(result.filesystems)}")

    return "\n".join(lines)


def render_pass_json(results: Dict[str, Any], indent: int = 2) -> str:
    return json.dumps(results, cls=HostStatJsonEncoder, indent=indent)


def build_domain_table(result) -> Table:
    """Build a rich Table for one domain's PassResult."""
    columns = TABLE_COLUMNS.get(result.domain, ())
    table = Table(title=f"{result.domain} (pass {result.pass_id})")
    table.add_column("entity", style="bold")
    for column in columns:
        table.add_column(column, justify="right")

    for key, metrics in result.metrics.items():
        label = key if metrics.ready else f"{key} *"
        table.add_row(label, *(format_value(metrics.get(c)) for c in columns))

    aggregate = result.aggregate
    if aggregate is not None and aggregate.entity_count:
        table.add_row("average", *(format_value(aggregate.averages.get(c, 0.0)) for c in columns),
                      style="dim")
        if aggregate.busiest is not None:
            table.caption = f"busiest {aggregate.busiest.metric}: {format_max(aggregate.busiest)}"
    return table


def render_pass_table(results: Dict[str, Any], console: Optional[Console] = None) -> None:
    """Print one rich table per domain. Entities marked * have no rate yet."""
    console = console or Console()
    for result in results.values():
        console.print(build_domain_table(result))
