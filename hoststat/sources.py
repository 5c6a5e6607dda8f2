"""
Snapshot sources for the kernel counter domains.

The parse_* functions turn raw /proc text into Snapshots and are pure so
they can be fed captured file content. ``ProcSource`` reads the files under
a configurable proc root, stamps every entity of one read with the same
acquisition time, and adds the attributes /proc does not carry: interface
addresses and link speeds (psutil), and mounted filesystem usage (psutil).
Memory and the load average are read from meminfo and loadavg.

A source either returns the complete snapshot list for its domain or raises
AcquisitionError; malformed lines are skipped the same way the kernel
tooling skips them.
"""

import os
import socket
import time
from typing import Callable, Dict, List, Optional, Tuple

import psutil

from hoststat.config import DEFAULT_PROC_ROOT, UNMONITORED_ADDRESSES
from hoststat.domains.cpu import CPU_FIELDS, CPU_TOTAL_KEY
from hoststat.domains.disk import DISK_FIELDS
from hoststat.domains.filesystem import FilesystemUsage
from hoststat.domains.memory import MEMINFO_KEYS, MemoryUsage
from hoststat.domains.network import ADDRESS_ATTRIBUTE, SPEED_ATTRIBUTE
from hoststat.errors import AcquisitionError, ErrorCode
from hoststat.models import Snapshot


# =============================================================================
# /proc parsers
# =============================================================================

def parse_proc_stat(content: str, timestamp: float, per_cpu: bool = False,
                    extra_gauges: Optional[Dict[str, float]] = None) -> List[Snapshot]:
    """
    Parse /proc/stat content into CPU snapshots.

    Args:
        content: Raw content of /proc/stat.
        timestamp: Acquisition time stamped on every snapshot.
        per_cpu: Also return one snapshot per ``cpuN`` line.
        extra_gauges: Gauges read elsewhere (load average) for the aggregate entity.

    Returns:
        List of Snapshots, the aggregate ``cpu`` entity first. The
        procs_running / procs_blocked gauges are attached to the aggregate
        entity only.
    """
    counters: Dict[str, Dict[str, int]] = {}
    gauges: Dict[str, float] = dict(extra_gauges or {})

    for line in content.strip().split('\n'):
        parts = line.split()
        if not parts:
            continue

        name = parts[0]
        if name.startswith('cpu'):
            if name != CPU_TOTAL_KEY and not per_cpu:
                continue
            # cpu user nice system idle iowait irq softirq [steal guest guest_nice]
            if len(parts) < len(CPU_FIELDS) + 1:
                continue
            try:
                counters[name] = {f: int(v) for f, v in zip(CPU_FIELDS, parts[1:])}
            except ValueError:
                continue
        elif name in ('procs_running', 'procs_blocked') and len(parts) >= 2:
            try:
                gauges[name] = float(parts[1])
            except ValueError:
                continue

    snapshots = []
    for key, fields in counters.items():
        snapshots.append(Snapshot(
            entity_key=key,
            timestamp=timestamp,
            fields=fields,
            gauges=dict(gauges) if key == CPU_TOTAL_KEY else {},
        ))
    snapshots.sort(key=lambda s: (s.entity_key != CPU_TOTAL_KEY,
                                  int(s.entity_key[3:]) if s.entity_key[3:].isdigit() else 0))
    return snapshots


def parse_proc_partitions(content: str) -> List[str]:
    """
    Parse /proc/partitions content into the list of partition names.

    The first line is a header (major minor #blocks name) followed by a
    blank line.
    """
    names = []
    for line in content.strip().split('\n'):
        parts = line.split()
        if len(parts) < 4 or not parts[0].isdigit():
            continue
        names.append(parts[3])
    return names


def parse_proc_diskstats(content: str, timestamp: float,
                         partitions: Optional[List[str]] = None) -> List[Snapshot]:
    """
    Parse /proc/diskstats content into disk snapshots.

    Args:
        content: Raw content of /proc/diskstats.
        timestamp: Acquisition time stamped on every snapshot.
        partitions: When given, only devices named here are returned.

    Returns:
        List of Snapshots in file order.
    """
    allowed = set(partitions) if partitions is not None else None
    snapshots = []

    for line in content.strip().split('\n'):
        if not line.strip():
            continue

        parts = line.split()
        if len(parts) < 14:
            continue

        # Fields: major minor name reads_completed reads_merged sectors_read
        #         time_reading writes_completed writes_merged sectors_written
        #         time_writing ios_in_progress time_doing_ios weighted_time
        #         [discard and flush fields on newer kernels, ignored]
        device_name = parts[2]
        if allowed is not None and device_name not in allowed:
            continue

        try:
            values = [int(v) for v in parts[3:14]]
        except ValueError:
            continue

        read_write = values[:8]
        ios_in_progress = values[8]
        io_time, weighted_io_time = values[9], values[10]

        fields = dict(zip(DISK_FIELDS[:8], read_write))
        fields['io_time_ms'] = io_time
        fields['weighted_io_time_ms'] = weighted_io_time

        snapshots.append(Snapshot(
            entity_key=device_name,
            timestamp=timestamp,
            fields=fields,
            gauges={'ios_in_progress': float(ios_in_progress)},
        ))

    return snapshots


def parse_proc_net_dev(content: str, timestamp: float) -> List[Snapshot]:
    """
    Parse /proc/net/dev content into network snapshots without attributes.

    Args:
        content: Raw content of /proc/net/dev.
        timestamp: Acquisition time stamped on every snapshot.

    Returns:
        List of Snapshots, one per interface, in file order.
    """
    snapshots = []
    lines = content.strip().split('\n')

    # Skip header lines (first two lines)
    for line in lines[2:]:
        if not line.strip() or ':' not in line:
            continue

        # Format: "interface: rx_bytes rx_packets rx_errs ... tx_bytes tx_packets tx_errs ..."
        name, _, data = line.partition(':')
        stats = data.split()
        if len(stats) < 16:
            continue

        try:
            fields = {
                'rx_bytes': int(stats[0]),
                'rx_packets': int(stats[1]),
                'rx_errors': int(stats[2]),
                'tx_bytes': int(stats[8]),
                'tx_packets': int(stats[9]),
                'tx_errors': int(stats[10]),
            }
        except ValueError:
            continue

        snapshots.append(Snapshot(entity_key=name.strip(), timestamp=timestamp, fields=fields))

    return snapshots


def parse_proc_loadavg(content: str) -> Optional[float]:
    """Return the 1-minute load average from /proc/loadavg, None if unparsable."""
    parts = content.split()
    if not parts:
        return None
    try:
        return float(parts[0])
    except ValueError:
        return None


def parse_proc_meminfo(content: str) -> MemoryUsage:
    """
    Parse /proc/meminfo content into a MemoryUsage.

    Only "Name: value kB" lines for MEMINFO_KEYS are used; anything else,
    including unparsable values, is skipped.
    """
    meminfo: Dict[str, int] = {}
    for line in content.strip().split('\n'):
        parts = line.split()
        if len(parts) != 3 or not parts[0].endswith(':'):
            continue
        key = parts[0][:-1]
        if key not in MEMINFO_KEYS:
            continue
        try:
            meminfo[key] = int(parts[1])
        except ValueError:
            continue
    return MemoryUsage.from_meminfo(meminfo)


# =============================================================================
# psutil helpers
# =============================================================================

def interface_addresses() -> Dict[str, str]:
    """
    Return one address per interface: the first IPv4 address, or the first
    IPv6 address (without its %scope suffix) for IPv6-only interfaces.
    """
    addresses = {}
    for name, addrs in psutil.net_if_addrs().items():
        ipv4 = [a.address for a in addrs if a.family == socket.AF_INET]
        ipv6 = [a.address.split('%')[0] for a in addrs if a.family == socket.AF_INET6]
        if ipv4:
            addresses[name] = ipv4[0]
        elif ipv6:
            addresses[name] = ipv6[0]
    return addresses


def interface_speeds() -> Dict[str, float]:
    """Return the link speed of each interface in Mb/s (0 when unknown)."""
    return {name: float(stats.speed or 0) for name, stats in psutil.net_if_stats().items()}


def filesystem_usage(logger=None) -> List[FilesystemUsage]:
    """Return usage for every mounted physical filesystem."""
    usages = []
    for part in psutil.disk_partitions(all=False):
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except OSError as e:
            if logger:
                logger.debug(f'Skipping filesystem {part.mountpoint}: {e}')
            continue
        usages.append(FilesystemUsage(
            fs_name=part.device,
            mount=part.mountpoint,
            total_kb=usage.total // 1024,
            used_kb=usage.used // 1024,
            free_kb=usage.free // 1024,
            used_pct=float(usage.percent),
        ))
    return usages


# =============================================================================
# Proc source
# =============================================================================

class ProcSource:
    """
    Reads snapshots for every domain from a /proc tree.

    Args:
        proc_root: Directory that holds stat, loadavg, meminfo, diskstats,
            partitions and net/dev.
        link_speeds: Link speed overrides in Mb/s keyed by interface name.
        logger: Optional logger.
        clock: Callable returning the acquisition time in seconds.
    """

    def __init__(self, proc_root: str = DEFAULT_PROC_ROOT,
                 link_speeds: Optional[Dict[str, float]] = None,
                 logger=None, clock: Callable[[], float] = time.time):
        self.proc_root = proc_root
        self.link_speeds = dict(link_speeds or {})
        self.logger = logger
        self.clock = clock

    def _read(self, relative_path: str) -> Tuple[str, float]:
        path = os.path.join(self.proc_root, relative_path)
        try:
            with open(path, 'r') as f:
                content = f.read()
        except FileNotFoundError as e:
            raise AcquisitionError(
                f"Counter source {path} does not exist",
                source=path,
                reason=str(e),
                code=ErrorCode.SOURCE_UNAVAILABLE,
            )
        except OSError as e:
            raise AcquisitionError(
                f"Counter source {path} could not be read",
                source=path,
                reason=str(e),
                code=ErrorCode.SOURCE_UNREADABLE,
            )
        return content, self.clock()

    def read_cpu(self, per_cpu: bool = False) -> List[Snapshot]:
        """
        Read CPU counters plus the 1-minute load average of the aggregate
        entity. A missing or unparsable loadavg file only drops that gauge.
        """
        extra_gauges = {}
        try:
            loadavg, _ = self._read('loadavg')
        except AcquisitionError as e:
            if self.logger:
                self.logger.debug(f'No load average this pass: {e.error.message}')
        else:
            load_1m = parse_proc_loadavg(loadavg)
            if load_1m is not None:
                extra_gauges['load_1m'] = load_1m

        content, timestamp = self._read('stat')
        return parse_proc_stat(content, timestamp, per_cpu=per_cpu, extra_gauges=extra_gauges)

    def read_memory(self) -> MemoryUsage:
        content, _ = self._read('meminfo')
        return parse_proc_meminfo(content)

    def read_disk(self) -> List[Snapshot]:
        partitions, _ = self._read('partitions')
        content, timestamp = self._read('diskstats')
        return parse_proc_diskstats(content, timestamp, parse_proc_partitions(partitions))

    def read_network(self) -> List[Snapshot]:
        """
        Read interface counters and attach address and link speed.

        Interfaces without an address, or bound to an unmonitored address
        (IPv4 or IPv6 loopback, unspecified), are left out.
        """
        content, timestamp = self._read('net/dev')
        try:
            addresses = interface_addresses()
            speeds = interface_speeds()
        except (OSError, psutil.Error) as e:
            raise AcquisitionError(
                "Could not query network interface attributes",
                source="psutil",
                reason=str(e),
            )
        speeds.update(self.link_speeds)

        snapshots = []
        for snapshot in parse_proc_net_dev(content, timestamp):
            address = addresses.get(snapshot.entity_key)
            if not address or address in UNMONITORED_ADDRESSES:
                if self.logger:
                    self.logger.debug(f'Skipping unmonitored interface {snapshot.entity_key}')
                continue
            snapshots.append(Snapshot(
                entity_key=snapshot.entity_key,
                timestamp=snapshot.timestamp,
                fields=snapshot.fields,
                attributes={
                    ADDRESS_ATTRIBUTE: address,
                    SPEED_ATTRIBUTE: speeds.get(snapshot.entity_key, 0.0),
                },
            ))
        return snapshots

    def read_filesystems(self) -> List[FilesystemUsage]:
        try:
            return filesystem_usage(logger=self.logger)
        except (OSError, psutil.Error) as e:
            raise AcquisitionError(
                "Could not query mounted filesystems",
                source="psutil",
                reason=str(e),
            )
