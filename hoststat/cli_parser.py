"""
CLI argument parsing for hoststat.

Two subcommands:
    run          Collect passes at a fixed interval and print each one.
    show-config  Print the effective configuration and exit.

Command line flags take precedence over the YAML config file, which takes
precedence over HOSTSTAT_* environment variables and built-in defaults.
"""

import argparse
import sys

from hoststat import VERSION
from hoststat.config import DOMAINS, EXIT_CODE, OUTPUT_FORMATS


HELP_MESSAGES = {
    'sub_commands': "Select a subcommand.",
    'run': "Collect counter passes at a fixed interval and print the derived metrics of each pass.",
    'show_config': "Print the effective configuration after applying the config file and flags.",
    'domains': (
        f"Comma-separated list of domains to collect. Choices: {', '.join(DOMAINS.names())}. "
        "Defaults to all domains."
    ),
    'interval': "Seconds between collection passes.",
    'count': (
        "Number of passes to run. The first pass only establishes baselines, so at least 2 "
        "are needed for rates. 0 runs until interrupted."
    ),
    'output_format': "How each pass is printed: a rich table, JSON, or the compact text line format.",
    'per_cpu': "Also report every CPU core as its own entity.",
    'strict_owner': "Only report a busiest entity once some entity has a positive value.",
    'proc_root': "Directory holding the kernel counter files (stat, diskstats, partitions, net/dev).",
    'config_file': "Path to a YAML file with configuration overrides.",
    'link_speed': (
        "Link speed override in Mb/s for an interface, as NAME=SPEED. May be given more than once."
    ),
}


def add_universal_arguments(parser):
    """Add arguments common to all commands.

    Args:
        parser: Argparse parser to add arguments to.
    """
    standard_args = parser.add_argument_group("Standard Arguments")
    standard_args.add_argument(
        '--config-file', '-c',
        type=str,
        help=HELP_MESSAGES['config_file']
    )
    standard_args.add_argument(
        '--proc-root',
        type=str,
        help=HELP_MESSAGES['proc_root']
    )

    output_control = parser.add_argument_group("Output Control")
    output_control.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )
    output_control.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose mode"
    )
    output_control.add_argument(
        "--stream-log-level",
        type=str,
    )


def add_collection_arguments(parser):
    """Add the arguments that shape a collection session.

    Defaults are None so that unset flags do not override the config file.
    """
    collection = parser.add_argument_group("Collection")
    collection.add_argument(
        '--domains', '-d',
        type=str,
        help=HELP_MESSAGES['domains']
    )
    collection.add_argument(
        '--interval', '-i',
        type=float,
        dest="interval_seconds",
        help=HELP_MESSAGES['interval']
    )
    collection.add_argument(
        '--count', '-n',
        type=int,
        help=HELP_MESSAGES['count']
    )
    collection.add_argument(
        '--output-format', '-o',
        choices=OUTPUT_FORMATS,
        help=HELP_MESSAGES['output_format']
    )
    collection.add_argument(
        '--per-cpu',
        action="store_true",
        default=None,
        help=HELP_MESSAGES['per_cpu']
    )
    collection.add_argument(
        '--strict-owner',
        action="store_true",
        default=None,
        help=HELP_MESSAGES['strict_owner']
    )
    collection.add_argument(
        '--link-speed',
        action="append",
        metavar="NAME=SPEED",
        help=HELP_MESSAGES['link_speed']
    )


def parse_link_speeds(values):
    """Convert ["eth0=1000", ...] into {"eth0": 1000.0}."""
    if not values:
        return None
    speeds = {}
    for item in values:
        name, sep, speed = item.partition('=')
        if not sep or not name:
            raise argparse.ArgumentTypeError(f"Invalid link speed '{item}', expected NAME=SPEED")
        try:
            speeds[name] = float(speed)
        except ValueError:
            raise argparse.ArgumentTypeError(f"Invalid link speed '{item}', SPEED must be a number")
    return speeds


def build_parser():
    parser = argparse.ArgumentParser(
        prog="hoststat",
        description="Derive rates and utilization from kernel CPU, disk and network counters",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    sub_commands = parser.add_subparsers(dest="command", help=HELP_MESSAGES['sub_commands'])
    sub_commands.required = True

    run_parser = sub_commands.add_parser("run", description=HELP_MESSAGES['run'], help=HELP_MESSAGES['run'])
    show_parser = sub_commands.add_parser("show-config", description=HELP_MESSAGES['show_config'],
                                          help=HELP_MESSAGES['show_config'])

    for sub_parser in (run_parser, show_parser):
        add_collection_arguments(sub_parser)
        add_universal_arguments(sub_parser)

    return parser


def parse_arguments(argv=None):
    """Parse command-line arguments.

    Args:
        argv: Argument list, defaults to sys.argv[1:].

    Returns:
        argparse.Namespace: Parsed arguments with ``link_speeds`` resolved.
    """
    parser = build_parser()
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        parser.print_help(sys.stderr)
        sys.exit(EXIT_CODE.INVALID_ARGUMENTS)

    args = parser.parse_args(argv)
    try:
        args.link_speeds = parse_link_speeds(args.link_speed)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    return args


def config_overrides(args):
    """Collect the HostStatConfig overrides given on the command line."""
    return dict(
        proc_root=args.proc_root,
        interval_seconds=args.interval_seconds,
        count=args.count,
        domains=args.domains,
        per_cpu=args.per_cpu,
        strict_owner=args.strict_owner,
        link_speeds=args.link_speeds,
        output_format=args.output_format,
    )
