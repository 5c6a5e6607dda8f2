"""
Tests for hoststat.formatting.

Tests cover:
- Value rendering ("0" shortcut, two decimals)
- Set, max and detail strings
- Text, JSON and rich table rendering of pass results
"""

import enum
import io
import json

import pytest
from rich.console import Console

from hoststat.collector import DomainCollector, PassResult
from hoststat.domains import (
    DiskAdapter,
    FilesystemUsage,
    MemoryUsage,
    NetworkAdapter,
    summarize_filesystems,
    summarize_memory,
)
from hoststat.formatting import (
    HostStatJsonEncoder,
    build_domain_table,
    format_link_detail,
    format_max,
    format_set,
    format_traffic_detail,
    format_usage_set,
    format_value,
    render_pass_json,
    render_pass_table,
    render_pass_text,
)
from hoststat.models import DerivedMetrics, MaxEntry
from tests.fixtures.sample_data import disk_snapshot, network_snapshot


@pytest.fixture
def disk_results():
    collector = DomainCollector(DiskAdapter())
    collector.collect([disk_snapshot(0.0, key="sda"), disk_snapshot(0.0, key="sdb")])
    result = collector.collect([
        disk_snapshot(10.0, key="sda", read_ops=100, read_sectors=2000, io_time_ms=100),
        disk_snapshot(10.0, key="sdb"),
    ])
    return {"disk": result}


@pytest.fixture
def network_results():
    domain = DomainCollector(NetworkAdapter())
    domain.collect([network_snapshot(0.0, key="eth0", address="10.0.0.5", speed_mbps=1000)])
    result = domain.collect([network_snapshot(10.0, key="eth0", address="10.0.0.5", speed_mbps=1000,
                                              rx_bytes=1250000, tx_bytes=250000)])
    return {"network": result}


class TestFormatValue:
    """Tests for format_value function."""

    @pytest.mark.parametrize("value,expected", [
        (0, "0"),
        (0.0, "0"),
        (-0.0, "0"),
        (1, "1.00"),
        (1.234, "1.23"),
        (1.235001, "1.24"),
        (0.001, "0.00"),
        (125000.0, "125000.00"),
    ])
    def test_format(self, value, expected):
        assert format_value(value) == expected


class TestDetailStrings:
    """Tests for the compact set and detail strings."""

    def test_format_set(self):
        assert format_set([("sda", 1.0), ("sdb", 0.0)]) == "sda|1.00$sdb|0$"

    def test_format_set_empty(self):
        assert format_set([]) == ""

    def test_format_max(self):
        assert format_max(MaxEntry("utilization_pct", 12.5, "sda")) == "12.50,sda"

    def test_format_max_without_owner(self):
        assert format_max(MaxEntry("utilization_pct")) == "0,"
        assert format_max(None) == "0,"

    def test_format_traffic_detail(self):
        rows = [("10.0.0.5", "eth0", 125000.0, 0.0), ("10.0.0.6", "eth1", 1.5, 2.5)]
        assert format_traffic_detail(rows) == "10.0.0.5=eth0=(125000.00|0)$10.0.0.6=eth1=(1.50|2.50)$"

    def test_format_link_detail(self):
        assert format_link_detail([("eth0", "10.0.0.5", 1000.0)]) == "eth0|10.0.0.5|1000.00$"

    def test_format_usage_set(self):
        usages = [FilesystemUsage("/dev/sda1", "/", 100, 25, 75, 25.0)]
        assert format_usage_set(usages) == "/dev/sda1=/=25.00$"


class TestHostStatJsonEncoder:
    """Tests for HostStatJsonEncoder."""

    def test_to_dict_objects(self):
        entry = MaxEntry("busy_pct", 5.0, "cpu")
        data = json.loads(json.dumps({"max": entry}, cls=HostStatJsonEncoder))
        assert data == {"max": {"metric": "busy_pct", "value": 5.0, "owner": "cpu"}}

    def test_sets_and_enums(self):
        class Color(enum.Enum):
            red = "red"

        data = json.loads(json.dumps({"s": {"b", "a"}, "c": Color.red}, cls=HostStatJsonEncoder))
        assert data == {"s": ["a", "b"], "c": "red"}

    def test_unserializable_raises(self):
        with pytest.raises(TypeError):
            json.dumps({"x": object()}, cls=HostStatJsonEncoder)


class TestRenderPass:
    """Tests for whole-pass rendering."""

    def test_text_disk(self, disk_results):
        lines = render_pass_text(disk_results).splitlines()
        assert "disk.pass=2" in lines
        assert "disk.count=2" in lines
        assert "disk.utilization_pct.set=sda|1.00$sdb|0$" in lines
        assert "disk.utilization_pct.avg=0.50" in lines
        assert "disk.utilization_pct.max=1.00,sda" in lines
        assert "disk.read_kb_per_sec.set=sda|100.00$sdb|0$" in lines

    def test_text_network_detail(self, network_results):
        lines = render_pass_text(network_results).splitlines()
        assert "network.traffic=10.0.0.5=eth0=(125000.00|25000.00)$" in lines
        assert "network.links=eth0|10.0.0.5|1000.00$" in lines
        assert "network.internal.rx_bytes_per_sec=125000.00" in lines
        assert "network.external.rx_bytes_per_sec=0" in lines

    def test_text_network_class_sums(self):
        """Every class line carries packet rates and error ratios as well as bytes."""
        domain = DomainCollector(NetworkAdapter())
        domain.collect([
            network_snapshot(0.0, key="eth0", address="10.0.0.5"),
            network_snapshot(0.0, key="eth1", address="93.184.216.34"),
        ])
        result = domain.collect([
            network_snapshot(10.0, key="eth0", address="10.0.0.5", rx_packets=1000, rx_errors=10,
                             tx_packets=500),
            network_snapshot(10.0, key="eth1", address="93.184.216.34", tx_packets=200, tx_errors=50),
        ])
        lines = render_pass_text({"network": result}).splitlines()

        assert "network.internal.rx_packets_per_sec=100.00" in lines
        assert "network.internal.tx_packets_per_sec=50.00" in lines
        assert "network.internal.rx_error_ratio=0.01" in lines
        assert "network.internal.tx_error_ratio=0" in lines
        assert "network.external.tx_packets_per_sec=20.00" in lines
        assert "network.external.tx_error_ratio=0.25" in lines

    def test_text_memory(self):
        usage = MemoryUsage.from_meminfo({"MemTotal": 1000, "MemFree": 250})
        result = PassResult(domain="memory", pass_id=1, aggregate=summarize_memory(usage),
                            metrics={"memory": DerivedMetrics(entity_key="memory", values=usage.values(),
                                                              ready=True)})
        lines = render_pass_text({"memory": result}).splitlines()
        assert "memory.mem_used_pct.set=memory|75.00$" in lines
        assert "memory.total.mem_used_kb=750.00" in lines

    def test_text_filesystem(self):
        usages = [FilesystemUsage("/dev/sda1", "/", 1000, 250, 750, 25.0)]
        result = PassResult(domain="filesystem", pass_id=1, aggregate=summarize_filesystems(usages),
                            filesystems=usages)
        lines = render_pass_text({"filesystem": result}).splitlines()
        assert "filesystem.usage=/dev/sda1=/=25.00$" in lines
        assert "filesystem.total.used_pct=25.00" in lines
        assert "filesystem.used_pct.max=25.00,/" in lines

    def test_json(self, disk_results):
        data = json.loads(render_pass_json(disk_results))
        assert data["disk"]["pass_id"] == 2
        assert data["disk"]["metrics"]["sda"]["values"]["read_ops_per_sec"] == pytest.approx(10.0)
        assert data["disk"]["aggregate"]["busiest"]["owner"] == "sda"

    def test_table(self, disk_results):
        buffer = io.StringIO()
        render_pass_table(disk_results, console=Console(file=buffer, width=250, color_system=None))
        output = buffer.getvalue()
        assert "disk (pass 2)" in output
        assert "sda" in output
        assert "utilization_pct" in output
        assert "average" in output

    def test_table_marks_entities_without_rates(self):
        collector = DomainCollector(DiskAdapter())
        result = collector.collect([disk_snapshot(0.0)])
        table = build_domain_table(result)
        assert table.row_count == 2
        assert list(table.columns[0].cells)[0] == "sda *"
