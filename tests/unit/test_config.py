"""
Tests for hoststat.config module.

Tests cover:
- Environment variable handling (check_env)
- Datetime string generation
- Enum values and constants
- HostStatConfig validation and load_config layering
"""

import re

import pytest

from hoststat.config import (
    DEFAULT_INTERVAL_SECONDS,
    DOMAINS,
    EXIT_CODE,
    SECTORS_PER_KB,
    HostStatConfig,
    check_env,
    get_datetime_string,
    load_config,
)
from hoststat.errors import ConfigurationError, ErrorCode


class TestCheckEnv:
    """Tests for check_env function."""

    def test_returns_default_when_env_not_set(self, clean_env):
        """check_env returns default value when env var is not set."""
        assert check_env('HOSTSTAT_DEBUG', False) is False

    def test_returns_env_value_when_set(self, clean_env):
        clean_env.setenv('HOSTSTAT_PROC_ROOT', '/host/proc')
        assert check_env('HOSTSTAT_PROC_ROOT', '/proc') == '/host/proc'

    @pytest.mark.parametrize("raw,expected", [("true", True), ("TRUE", True), ("false", False), ("False", False)])
    def test_bool_conversion(self, clean_env, raw, expected):
        clean_env.setenv('HOSTSTAT_DEBUG', raw)
        assert check_env('HOSTSTAT_DEBUG', False) is expected

    def test_int_conversion(self, clean_env):
        clean_env.setenv('HOSTSTAT_COUNT', '5')
        assert check_env('HOSTSTAT_COUNT', 2) == 5

    def test_float_conversion(self, clean_env):
        clean_env.setenv('HOSTSTAT_INTERVAL', '2.5')
        assert check_env('HOSTSTAT_INTERVAL', 10.0) == 2.5

    def test_invalid_number_falls_back_to_default(self, clean_env):
        clean_env.setenv('HOSTSTAT_COUNT', 'lots')
        assert check_env('HOSTSTAT_COUNT', 2) == 2


class TestConstants:
    def test_datetime_string_format(self):
        assert re.fullmatch(r"\d{8}_\d{6}", get_datetime_string())

    def test_exit_codes(self):
        assert EXIT_CODE.SUCCESS == 0
        assert EXIT_CODE.FAILURE == EXIT_CODE.GENERAL_ERROR == 1
        assert EXIT_CODE.INVALID_ARGUMENTS == 2
        assert EXIT_CODE.FILE_NOT_FOUND == 3

    def test_domain_names(self):
        assert DOMAINS.names() == ["cpu", "disk", "network", "filesystem", "memory"]

    def test_sector_conversion(self):
        assert SECTORS_PER_KB == 2


class TestHostStatConfig:
    """Tests for HostStatConfig.validate."""

    def test_defaults_are_valid(self):
        config = HostStatConfig()
        config.validate()
        assert config.domains == DOMAINS.names()
        assert config.strict_owner is False

    @pytest.mark.parametrize("field_name,value", [
        ("interval_seconds", 0),
        ("interval_seconds", -1.0),
        ("count", -1),
        ("domains", ["cpu", "gpu"]),
        ("output_format", "xml"),
        ("link_speeds", {"eth0": -10}),
        ("link_speeds", {"eth0": "fast"}),
    ])
    def test_invalid_values(self, field_name, value):
        config = HostStatConfig()
        setattr(config, field_name, value)
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE

    def test_to_dict(self):
        data = HostStatConfig(count=3).to_dict()
        assert data["count"] == 3
        assert "link_speeds" in data


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults(self):
        config = load_config()
        assert config.interval_seconds == float(DEFAULT_INTERVAL_SECONDS)

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "hoststat.yaml"
        path.write_text("interval_seconds: 5\ncount: 3\ndomains: [disk, network]\n"
                        "link_speeds:\n  eth0: 10000\n")
        config = load_config(str(path))
        assert config.interval_seconds == 5.0
        assert config.count == 3
        assert config.domains == ["disk", "network"]
        assert config.link_speeds == {"eth0": 10000}

    def test_overrides_beat_file(self, tmp_path):
        path = tmp_path / "hoststat.yaml"
        path.write_text("interval_seconds: 5\ncount: 3\n")
        config = load_config(str(path), interval_seconds=1.5, count=None)
        assert config.interval_seconds == 1.5
        assert config.count == 3

    def test_unknown_keys_warned(self, tmp_path, mock_logger):
        path = tmp_path / "hoststat.yaml"
        path.write_text("count: 4\nsample_rate: 9\n")
        config = load_config(str(path), logger=mock_logger)
        assert config.count == 4
        mock_logger.warning.assert_called_once()
        assert "sample_rate" in mock_logger.warning.call_args[0][0]

    def test_null_values_ignored(self, tmp_path):
        path = tmp_path / "hoststat.yaml"
        path.write_text("count: null\n")
        assert load_config(str(path)).count == HostStatConfig().count

    def test_empty_file(self, tmp_path):
        path = tmp_path / "hoststat.yaml"
        path.write_text("")
        assert load_config(str(path)).domains == DOMAINS.names()

    def test_comma_separated_domains(self):
        assert load_config(domains="cpu, disk").domains == ["cpu", "disk"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(tmp_path / "missing.yaml"))
        assert exc_info.value.code == ErrorCode.CONFIG_FILE_NOT_FOUND

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("count: [1, 2\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(path))
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- cpu\n- disk\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(path))
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_non_numeric_interval(self):
        with pytest.raises(ConfigurationError):
            load_config(interval_seconds="soon")

    def test_invalid_domain(self):
        with pytest.raises(ConfigurationError):
            load_config(domains="cpu,gpu")

    def test_link_speeds_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            load_config(link_speeds=["eth0"])
