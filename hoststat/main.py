#!/usr/bin/env python3
"""
hoststat - Main Entry Point

Runs collection passes at the configured cadence and prints every pass.
The loop here is the only scheduler; the collectors never block or sleep.
"""

import signal
import sys
import time
import traceback

import yaml
from rich.console import Console

from hoststat.cli_parser import config_overrides, parse_arguments
from hoststat.collector import HostCollector
from hoststat.config import EXIT_CODE, HOSTSTAT_DEBUG, load_config
from hoststat.errors import (
    AcquisitionError,
    ConfigurationError,
    ErrorCode,
    HostStatException,
)
from hoststat.formatting import render_pass_json, render_pass_table, render_pass_text
from hoststat.hs_logging import apply_logging_options, setup_logging
from hoststat.sources import ProcSource

logger = setup_logging("hoststat")
signal_received = False


def signal_handler(sig, frame):
    """Handle signals like SIGINT (Ctrl+C) and SIGTERM."""
    global signal_received

    signal_name = signal.Signals(sig).name
    logger.warning(f"Received signal {signal_name} ({sig})")
    signal_received = True


def print_pass(results, output_format, console=None):
    if output_format == "json":
        print(render_pass_json(results))
    elif output_format == "text":
        print(render_pass_text(results))
    else:
        render_pass_table(results, console=console or Console())


def run_collection(config, source=None, sleep=time.sleep, console=None):
    """
    Run ``config.count`` collection passes (forever when 0).

    Args:
        config: Effective HostStatConfig.
        source: Snapshot source, defaults to a ProcSource on config.proc_root.
        sleep: Callable used to wait between passes.
        console: rich Console for table output.

    Returns:
        EXIT_CODE.SUCCESS, or ACQUISITION_FAILED if no pass produced any domain.
    """
    if source is None:
        source = ProcSource(config.proc_root, link_speeds=config.link_speeds, logger=logger)
    collector = HostCollector(config, source, logger=logger)

    logger.verbose(f"Collecting {', '.join(config.domains)} every {config.interval_seconds}s "
                   f"({config.count or 'unlimited'} passes)")

    produced = 0
    pass_number = 0
    while config.count == 0 or pass_number < config.count:
        if pass_number:
            sleep(config.interval_seconds)
        # a signal received during the sleep stops the loop before the next pass
        if signal_received:
            logger.warning('Caught signal, exiting...')
            return EXIT_CODE.INTERRUPTED

        pass_number += 1
        results = collector.collect_pass()
        if results:
            produced += 1
            print_pass(results, config.output_format, console=console)
        else:
            logger.error(f"Pass {pass_number} produced no results")

    if not produced:
        return EXIT_CODE.ACQUISITION_FAILED
    return EXIT_CODE.SUCCESS


def _main_impl(argv=None):
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    args = parse_arguments(argv)
    apply_logging_options(logger, args)

    config = load_config(args.config_file, logger=logger, **config_overrides(args))
    logger.debug(f"Effective configuration: {config.to_dict()}")

    if args.command == "show-config":
        print(yaml.safe_dump(config.to_dict(), sort_keys=False), end="")
        return EXIT_CODE.SUCCESS

    if args.command == "run":
        return run_collection(config)

    raise ConfigurationError(
        f"Unsupported command: {args.command}",
        parameter="command",
        expected=["run", "show-config"],
        actual=args.command,
        code=ErrorCode.CONFIG_INVALID_VALUE
    )


def main(argv=None):
    """
    Main entry point with error handling.

    Wraps _main_impl() and maps exceptions to exit codes.
    """
    try:
        return _main_impl(argv)

    except ConfigurationError as e:
        logger.error(str(e))
        if e.code == ErrorCode.CONFIG_FILE_NOT_FOUND:
            return EXIT_CODE.FILE_NOT_FOUND
        return EXIT_CODE.INVALID_ARGUMENTS

    except AcquisitionError as e:
        logger.error(str(e))
        return EXIT_CODE.ACQUISITION_FAILED

    except HostStatException as e:
        logger.error(str(e))
        return EXIT_CODE.FAILURE

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return EXIT_CODE.INTERRUPTED

    except SystemExit:
        raise

    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}")
        if HOSTSTAT_DEBUG:
            logger.debug("Stack trace:")
            traceback.print_exc()
        else:
            logger.info("Run with HOSTSTAT_DEBUG=true for full stack trace")
        return EXIT_CODE.ERROR


if __name__ == "__main__":
    sys.exit(main())
