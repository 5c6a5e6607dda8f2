"""
Logging for hoststat.

Adds levels between the standard ones so collection detail can be dialed in
without turning on full debug output: RESULT (35), STATUS (25), VERBOSE (19),
VERBOSER (18) and RIDICULOUS (7). Counter resets and the session banner go
out at VERBOSE, per-entity baselines at RIDICULOUS.

Every logger writes to stderr only; stdout carries the pass output.
"""

import datetime
import enum
import logging
import sys

RESULT = 35
STATUS = 25
VERBOSE = 19
VERBOSER = 18
RIDICULOUS = 7

DEFAULT_STREAM_LOG_LEVEL = logging.INFO

custom_levels = {
    'RESULT': RESULT,
    'STATUS': STATUS,
    'VERBOSE': VERBOSE,
    'VERBOSER': VERBOSER,
    'RIDICULOUS': RIDICULOUS,
}


class COLORS(enum.Enum):
    yellow = "\033[0;33m"
    green = "\033[0;32m"
    bred = "\033[1;31m"
    bblue = "\033[1;34m"
    bipurple = "\033[1;95m"
    normal = "\033[0m"


LEVEL_COLORS = {
    logging.CRITICAL: COLORS.bred,
    logging.ERROR: COLORS.bred,
    RESULT: COLORS.green,
    logging.WARNING: COLORS.yellow,
    STATUS: COLORS.bblue,
    RIDICULOUS: COLORS.bipurple,
}


def get_level_color(level):
    return LEVEL_COLORS.get(level, COLORS.normal).value


def log_level_factory(level_num):
    def log_func(self, message, *args, **kwargs):
        if self.isEnabledFor(level_num):
            self._log(level_num, message, args, **kwargs)
    return log_func


class HostStatLogger(logging.Logger):
    """Logger with one method per custom level (``logger.verbose(...)`` etc)."""

    def _log(self, level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=3):
        # The generated level methods add a frame, so look one further up for the caller.
        fn, lno, func, sinfo = self.findCaller(stack_info, stacklevel)
        if exc_info:
            if isinstance(exc_info, BaseException):
                exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
            elif not isinstance(exc_info, tuple):
                exc_info = sys.exc_info()

        record = self.makeRecord(self.name, level, fn, lno, msg, args, exc_info, func, extra, sinfo)
        self.handle(record)


for custom_name, custom_num in custom_levels.items():
    logging.addLevelName(custom_num, custom_name)
    setattr(HostStatLogger, custom_name.lower(), log_level_factory(custom_num))


class _ColoredFormatter(logging.Formatter):
    def __init__(self, use_color=True):
        super().__init__()
        self.use_color = use_color

    def _location(self, record):
        return ""

    def format(self, record):
        timestamp = datetime.datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        line = f"{timestamp}|{record.levelname}{self._location(record)}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        if not self.use_color:
            return line
        return f"{get_level_color(record.levelno)}{line}{COLORS.normal.value}"


class ColoredStandardFormatter(_ColoredFormatter):
    pass


class ColoredDebugFormatter(_ColoredFormatter):
    def _location(self, record):
        return f":{record.module}:{record.lineno}"


def _stream_is_tty(stream):
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def setup_logging(name=__name__, stream_log_level=DEFAULT_STREAM_LOG_LEVEL):
    """Create a HostStatLogger with a single stderr handler at ``stream_log_level``."""
    if isinstance(stream_log_level, str):
        stream_log_level = logging.getLevelName(stream_log_level.upper())

    _logger = HostStatLogger(name)
    _logger.setLevel(logging.DEBUG)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(ColoredStandardFormatter(use_color=_stream_is_tty(sys.stderr)))
    stream_handler.setLevel(stream_log_level)
    _logger.addHandler(stream_handler)

    return _logger


def apply_logging_options(_logger, args):
    """Apply --verbose, --debug and --stream-log-level to the logger's stream handlers."""
    if args is None:
        return

    verbose = getattr(args, "verbose", False)
    debug = getattr(args, "debug", False)
    explicit_level = getattr(args, "stream_log_level", None)

    for handler in _logger.handlers:
        if not isinstance(handler, logging.StreamHandler) or isinstance(handler, logging.FileHandler):
            continue
        use_color = getattr(handler.formatter, "use_color", True)
        if verbose and handler.level > VERBOSE:
            handler.setLevel(VERBOSE)
        if debug:
            handler.setFormatter(ColoredDebugFormatter(use_color=use_color))
            if handler.level > logging.DEBUG:
                handler.setLevel(logging.DEBUG)
        if explicit_level:
            handler.setLevel(explicit_level.upper())
