"""
Configuration constants and settings loading for hoststat.

Settings are layered: built-in defaults, then ``HOSTSTAT_*`` environment
variables, then an optional YAML file, then command line flags.
"""

import datetime
import enum
import os
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, List, Optional

import yaml

from hoststat.errors import ConfigurationError, ErrorCode


def check_env(setting, default_value=None):
    """
    Return the value of an environment variable or a default.

    Strings "true"/"false" (any case) are converted to booleans. When the
    default is an int or float the environment value is converted to match.
    """
    value = os.environ.get(setting)
    if value is None:
        return default_value

    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False

    if isinstance(default_value, bool):
        return default_value
    if isinstance(default_value, int):
        try:
            return int(value)
        except ValueError:
            return default_value
    if isinstance(default_value, float):
        try:
            return float(value)
        except ValueError:
            return default_value
    return value


def get_datetime_string():
    return datetime.datetime.now().strftime("%Y%m%d_%H%M%S")


class EXIT_CODE(enum.IntEnum):
    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_ARGUMENTS = 2
    FILE_NOT_FOUND = 3
    ACQUISITION_FAILED = 4
    INTERRUPTED = 130

    FAILURE = GENERAL_ERROR
    ERROR = GENERAL_ERROR


class DOMAINS(enum.Enum):
    cpu = "cpu"
    disk = "disk"
    network = "network"
    filesystem = "filesystem"
    memory = "memory"

    @classmethod
    def names(cls) -> List[str]:
        return [d.value for d in cls]


# Unit conversions
SECTOR_BYTES = 512
SECTORS_PER_KB = 1024 // SECTOR_BYTES
MS_PER_SECOND = 1000.0
BITS_PER_BYTE = 8
BYTES_PER_MEGABIT = 1024 * 1024

# Names used by the network partition rule
INTERNAL_CLASS = "internal"
EXTERNAL_CLASS = "external"

# Addresses whose interfaces are not monitored
UNMONITORED_ADDRESSES = ("0.0.0.0", "127.0.0.1", "::", "::1")

# Domains reported as gauges only, outside the delta engine
GAUGE_DOMAINS = ("filesystem", "memory")

# Filesystem types excluded from the "fullest filesystem" rollup
IGNORED_FS_NAMES = ("devfs",)

DEFAULT_PROC_ROOT = check_env("HOSTSTAT_PROC_ROOT", "/proc")
DEFAULT_INTERVAL_SECONDS = check_env("HOSTSTAT_INTERVAL", 10.0)
DEFAULT_SAMPLE_COUNT = check_env("HOSTSTAT_COUNT", 2)
DEFAULT_OUTPUT_FORMAT = "table"
OUTPUT_FORMATS = ["table", "json", "text"]

HOSTSTAT_DEBUG = check_env("HOSTSTAT_DEBUG", False)


@dataclass
class HostStatConfig:
    """
    Runtime settings for a collection session.

    Attributes:
        proc_root: Directory holding the kernel counter files.
        interval_seconds: Delay between collection passes.
        count: Number of passes to run (0 = until interrupted).
        domains: Domains collected each pass.
        per_cpu: Track every CPU core as its own entity besides the total.
        strict_owner: Report a busiest entity only once its value is positive.
        link_speeds: Link speed overrides in Mb/s keyed by interface name.
        output_format: One of OUTPUT_FORMATS.
    """
    proc_root: str = DEFAULT_PROC_ROOT
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    count: int = DEFAULT_SAMPLE_COUNT
    domains: List[str] = field(default_factory=DOMAINS.names)
    per_cpu: bool = False
    strict_owner: bool = False
    link_speeds: Dict[str, float] = field(default_factory=dict)
    output_format: str = DEFAULT_OUTPUT_FORMAT

    def validate(self) -> None:
        """Raise ConfigurationError for out-of-range settings."""
        if self.interval_seconds <= 0:
            raise ConfigurationError(
                "Collection interval must be positive",
                parameter="interval_seconds",
                expected="> 0",
                actual=self.interval_seconds,
            )
        if self.count < 0:
            raise ConfigurationError(
                "Pass count must not be negative",
                parameter="count",
                expected=">= 0",
                actual=self.count,
            )
        unknown = [d for d in self.domains if d not in DOMAINS.names()]
        if unknown:
            raise ConfigurationError(
                f"Unknown domain(s): {', '.join(unknown)}",
                parameter="domains",
                expected=DOMAINS.names(),
                actual=self.domains,
            )
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Unknown output format '{self.output_format}'",
                parameter="output_format",
                expected=OUTPUT_FORMATS,
                actual=self.output_format,
            )
        for name, speed in self.link_speeds.items():
            if not isinstance(speed, (int, float)) or speed < 0:
                raise ConfigurationError(
                    f"Invalid link speed for interface '{name}'",
                    parameter=f"link_speeds.{name}",
                    expected="non-negative number of Mb/s",
                    actual=speed,
                )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_file: Optional[str] = None, logger=None, **overrides) -> HostStatConfig:
    """
    Build a HostStatConfig from defaults, an optional YAML file and overrides.

    Args:
        config_file: Path to a YAML mapping of HostStatConfig field names.
        logger: Optional logger used to warn about ignored keys.
        **overrides: Values that take precedence over the file (None is ignored).

    Returns:
        Validated HostStatConfig.

    Raises:
        ConfigurationError: If the file is missing, unparsable or holds invalid values.
    """
    config = HostStatConfig()
    known = {f.name for f in fields(HostStatConfig)}

    if config_file:
        try:
            with open(config_file, "r") as f:
                yaml_config = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigurationError(
                f"Config file {config_file} not found",
                parameter="config_file",
                code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            )
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Error parsing YAML config file: {e}",
                parameter="config_file",
                code=ErrorCode.CONFIG_PARSE_ERROR,
            )

        if yaml_config is None:
            yaml_config = {}
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(
                f"Config file {config_file} must contain a mapping",
                parameter="config_file",
                actual=type(yaml_config).__name__,
                code=ErrorCode.CONFIG_PARSE_ERROR,
            )

        for key, value in yaml_config.items():
            if key not in known:
                if logger:
                    logger.warning(f"Config file contains unknown parameter '{key}', skipping")
                continue
            if value is None:
                continue
            setattr(config, key, value)

    for key, value in overrides.items():
        if key in known and value is not None:
            setattr(config, key, value)

    if isinstance(config.domains, str):
        config.domains = [d.strip() for d in config.domains.split(",") if d.strip()]
    if not isinstance(config.link_speeds, dict):
        raise ConfigurationError(
            "link_speeds must be a mapping of interface name to Mb/s",
            parameter="link_speeds",
            actual=config.link_speeds,
        )
    try:
        config.interval_seconds = float(config.interval_seconds)
        config.count = int(config.count)
    except (TypeError, ValueError):
        raise ConfigurationError(
            "interval_seconds and count must be numeric",
            parameter="interval_seconds/count",
            actual=(config.interval_seconds, config.count),
        )

    config.validate()
    return config
