"""
Exceptions raised by hoststat.

Each exception wraps a HostStatError record (code, message, details,
suggestion) so the CLI can print a uniform report and pick an exit code
from the code alone.

Zero elapsed time, zero denominators and counter resets are not errors.
The calculator turns them into zero-valued metrics.
"""

from dataclasses import dataclass, field
from typing import Optional, Any
from enum import Enum


class ErrorCode(Enum):
    # Config file and settings (1xx)
    CONFIG_MISSING_REQUIRED = "E101"
    CONFIG_INVALID_VALUE = "E102"
    CONFIG_FILE_NOT_FOUND = "E103"
    CONFIG_PARSE_ERROR = "E104"

    # Counter sources and snapshots (2xx)
    SOURCE_UNAVAILABLE = "E201"
    SOURCE_UNREADABLE = "E202"
    SNAPSHOT_INCOMPLETE = "E203"
    SNAPSHOT_INVALID = "E204"

    # Queries against collected state (3xx)
    ENTITY_NOT_FOUND = "E301"
    ENTITY_INDEX_INVALID = "E302"
    METRIC_NOT_FOUND = "E303"

    INTERNAL_ERROR = "E901"


DEFAULT_SUGGESTIONS = {
    ErrorCode.CONFIG_MISSING_REQUIRED: "Set the value with a command line flag or in the config file",
    ErrorCode.CONFIG_INVALID_VALUE: "Check the parameter value and correct it",
    ErrorCode.CONFIG_FILE_NOT_FOUND: "Verify the config file path exists",
    ErrorCode.CONFIG_PARSE_ERROR: "The config file must be a YAML mapping of setting names to values",
    ErrorCode.SOURCE_UNAVAILABLE: "Verify the counter file exists (is /proc mounted? see --proc-root)",
    ErrorCode.SOURCE_UNREADABLE: "Check file permissions for the counter source",
    ErrorCode.SNAPSHOT_INCOMPLETE: "Check the snapshot source for this entity",
    ErrorCode.SNAPSHOT_INVALID: "Check the snapshot source for this entity",
    ErrorCode.ENTITY_NOT_FOUND: "List available entities with MetricQuery.keys()",
    ErrorCode.METRIC_NOT_FOUND: "Check the metric name",
}


def join_details(*labelled) -> str:
    """Render ("Label", value) pairs as "Label: value; ..." skipping empty values."""
    return "; ".join(f"{label}: {value}" for label, value in labelled if value not in (None, ""))


@dataclass
class HostStatError:
    code: ErrorCode
    message: str
    details: str = ""
    suggestion: str = ""
    context: dict = field(default_factory=dict)

    def __str__(self) -> str:
        text = f"[{self.code.value}] {self.message}"
        if self.details:
            text += f"\n  Details: {self.details}"
        if self.suggestion:
            text += f"\n  Suggestion: {self.suggestion}"
        return text


class HostStatException(Exception):
    """
    Root of the hoststat exception tree.

    Extra keyword arguments end up in ``error.context``. When no suggestion
    is given the default for ``code`` is used.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR,
                 details: str = "", suggestion: Optional[str] = None, **context):
        self.error = HostStatError(
            code=code,
            message=message,
            details=details,
            suggestion=suggestion or DEFAULT_SUGGESTIONS.get(code, ""),
            context=context,
        )
        super().__init__(str(self.error))

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def suggestion(self) -> str:
        return self.error.suggestion


class ConfigurationError(HostStatException):
    """A config file or setting that cannot be used (missing file, bad YAML, out-of-range value)."""

    def __init__(self, message: str, parameter: str = None,
                 expected: Any = None, actual: Any = None,
                 suggestion: str = None,
                 code: ErrorCode = ErrorCode.CONFIG_INVALID_VALUE):
        super().__init__(
            message,
            code=code,
            details=join_details(("Parameter", parameter), ("Expected", expected), ("Actual", actual)),
            suggestion=suggestion,
            parameter=parameter,
            expected=expected,
            actual=actual,
        )


class AcquisitionError(HostStatException):
    """
    Raised when a counter source cannot be read.

    The collector never sees a partial snapshot set: either a source
    returns complete snapshots or it raises this error for the whole pass.
    """

    def __init__(self, message: str, source: str = None,
                 reason: str = None, suggestion: str = None,
                 code: ErrorCode = ErrorCode.SOURCE_UNAVAILABLE):
        super().__init__(
            message,
            code=code,
            details=join_details(("Source", source), ("Reason", reason)),
            suggestion=suggestion,
            source=source,
            reason=reason,
        )


class SnapshotError(HostStatException):
    """
    Raised when a single entity's snapshot is malformed.

    Only the offending entity is skipped; the rest of the pass continues.
    """

    def __init__(self, message: str, entity_key: str = None,
                 missing_fields: Any = None,
                 code: ErrorCode = ErrorCode.SNAPSHOT_INCOMPLETE):
        missing = ", ".join(missing_fields) if missing_fields else None
        super().__init__(
            message,
            code=code,
            details=join_details(("Entity", entity_key), ("Missing fields", missing)),
            entity_key=entity_key,
            missing_fields=missing_fields,
        )


class UnknownEntityError(HostStatException, KeyError):
    """
    Raised when an entity key was never observed.

    An entity that exists but has no rate yet is not an error: it is
    returned with ``ready=False``.
    """

    def __init__(self, entity_key: str, domain: str = None):
        super().__init__(
            f"Unknown entity '{entity_key}'",
            code=ErrorCode.ENTITY_NOT_FOUND,
            details=join_details(("Domain", domain)),
            entity_key=entity_key,
            domain=domain,
        )

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.error)


class EntityIndexError(HostStatException, IndexError):
    """Raised when an insertion-order index does not address any entity."""

    def __init__(self, index: Any, size: int, domain: str = None):
        super().__init__(
            f"Invalid entity index {index!r}",
            code=ErrorCode.ENTITY_INDEX_INVALID,
            details=join_details(("Index", index), ("Known entities", size), ("Domain", domain)),
            suggestion=f"Use an index between 0 and {size - 1}" if size else "No entities observed yet",
            index=index,
            size=size,
            domain=domain,
        )


class UnknownMetricError(HostStatException, KeyError):
    """Raised when a metric name is not produced by a domain."""

    def __init__(self, metric: str, available: Any = None):
        super().__init__(
            f"Unknown metric '{metric}'",
            code=ErrorCode.METRIC_NOT_FOUND,
            details=join_details(("Available", ", ".join(sorted(available)) if available else None)),
            metric=metric,
        )

    def __str__(self) -> str:
        return str(self.error)
