"""
Test fixtures package for hoststat tests.

This package provides reusable mock classes and sample data
for testing sources, adapters and collectors.
"""

from tests.fixtures.mock_logger import MockLogger, create_mock_logger
from tests.fixtures.fake_source import FakeSource
from tests.fixtures.sample_data import (
    SAMPLE_PROC_STAT,
    SAMPLE_PARTITIONS,
    SAMPLE_DISKSTATS,
    SAMPLE_NET_DEV,
    SAMPLE_LOADAVG,
    SAMPLE_MEMINFO,
    make_snapshot,
    cpu_snapshot,
    disk_snapshot,
    network_snapshot,
)

__all__ = [
    # Mock classes
    'MockLogger',
    'create_mock_logger',
    'FakeSource',
    # Sample data
    'SAMPLE_PROC_STAT',
    'SAMPLE_PARTITIONS',
    'SAMPLE_DISKSTATS',
    'SAMPLE_NET_DEV',
    'SAMPLE_LOADAVG',
    'SAMPLE_MEMINFO',
    'make_snapshot',
    'cpu_snapshot',
    'disk_snapshot',
    'network_snapshot',
]
