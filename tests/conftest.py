"""
Shared pytest fixtures for hoststat tests.

These fixtures provide mock loggers, sample /proc trees, scripted sources
and configuration objects that can be used across all test modules.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from hoststat.config import HostStatConfig
from tests.fixtures.fake_source import FakeSource
from tests.fixtures.mock_logger import MockLogger
from tests.fixtures.sample_data import (
    SAMPLE_DISKSTATS,
    SAMPLE_LOADAVG,
    SAMPLE_MEMINFO,
    SAMPLE_NET_DEV,
    SAMPLE_PARTITIONS,
    SAMPLE_PROC_STAT,
)


# =============================================================================
# Logger Fixtures
# =============================================================================

@pytest.fixture
def mock_logger():
    """
    Create a mock logger that records all log calls.

    Usage:
        def test_something(mock_logger):
            some_function(logger=mock_logger)
            mock_logger.warning.assert_called_once()
    """
    logger = MagicMock()
    for level in ['debug', 'info', 'warning', 'error', 'critical',
                  'status', 'verbose', 'verboser', 'ridiculous', 'result']:
        setattr(logger, level, MagicMock())
    return logger


@pytest.fixture
def capturing_logger():
    """
    Create a logger that captures messages per level.

    Usage:
        def test_something(capturing_logger):
            some_function(logger=capturing_logger)
            assert capturing_logger.has_message('verbose', 'counter reset')
    """
    return MockLogger()


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture
def clean_env(monkeypatch):
    """
    Remove hoststat-related environment variables.

    Usage:
        def test_check_env_default(clean_env):
            # HOSTSTAT_DEBUG etc. are guaranteed to be unset
            assert check_env('HOSTSTAT_DEBUG', False) is False
    """
    for var in ['HOSTSTAT_DEBUG', 'HOSTSTAT_PROC_ROOT', 'HOSTSTAT_INTERVAL', 'HOSTSTAT_COUNT']:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


# =============================================================================
# /proc Fixtures
# =============================================================================

@pytest.fixture
def proc_root(tmp_path) -> Path:
    """A fake /proc tree holding the sample counter files."""
    root = tmp_path / "proc"
    (root / "net").mkdir(parents=True)
    (root / "stat").write_text(SAMPLE_PROC_STAT)
    (root / "loadavg").write_text(SAMPLE_LOADAVG)
    (root / "meminfo").write_text(SAMPLE_MEMINFO)
    (root / "partitions").write_text(SAMPLE_PARTITIONS)
    (root / "diskstats").write_text(SAMPLE_DISKSTATS)
    (root / "net" / "dev").write_text(SAMPLE_NET_DEV)
    return root


# =============================================================================
# Collector Fixtures
# =============================================================================

@pytest.fixture
def fake_source():
    """Empty scripted source; tests fill ``fake_source.passes``."""
    return FakeSource()


@pytest.fixture
def base_config(tmp_path) -> HostStatConfig:
    """Config collecting every counter domain with a short interval."""
    return HostStatConfig(
        proc_root=str(tmp_path / "proc"),
        interval_seconds=0.01,
        count=2,
        domains=['cpu', 'disk', 'network'],
    )
