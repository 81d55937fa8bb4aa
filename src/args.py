"""Argument parsing functionality for composer-updates."""

import argparse
from constants import Constants


def _add_common_options(parser):
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)


def _add_check_updates_options(parser):
    parser.add_argument("-d", "--directory",
                        dest="DIRECTORY",
                        help="Project directory containing composer.json (default: current directory)",
                        action="store",
                        type=str,
                        default=".")
    parser.add_argument("--dev",
                        dest="INCLUDE_DEV",
                        help="Also check require-dev dependencies.",
                        action="store_true")
    parser.add_argument("-v", "--verbose",
                        dest="VERBOSE",
                        help="Also report packages that are up to date.",
                        action="store_true")
    parser.add_argument("-s", "--style",
                        dest="STYLE",
                        help="Report style: table or list (default: table)",
                        action="store",
                        type=str.lower,
                        choices=Constants.STYLES)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=['json', 'csv'])
    parser.add_argument("--no-platform",
                        dest="NO_PLATFORM",
                        help="Do not add the PHP platform (php, ext-*) to the package pools.",
                        action="store_true")
    parser.add_argument("--always-report-up-to-date",
                        dest="ALWAYS_REPORT_UP_TO_DATE",
                        help="Report up-to-date packages even without --verbose.",
                        action="store_true")
    parser.add_argument("--hide-anomalies",
                        dest="HIDE_ANOMALIES",
                        help="Do not report installed versions newer than the repositories offer.",
                        action="store_true")
    parser.add_argument("--packagist-url",
                        dest="PACKAGIST_URL",
                        help="Base URL of the Packagist-compatible repository",
                        action="store",
                        type=str)
    color_group = parser.add_mutually_exclusive_group()
    color_group.add_argument("--color",
                             dest="COLOR",
                             help="Force colored output.",
                             action="store_const",
                             const=True)
    color_group.add_argument("--no-color",
                             dest="COLOR",
                             help="Disable colored output.",
                             action="store_const",
                             const=False)
    parser.add_argument("--error-on-updates",
                        dest="ERROR_ON_UPDATES",
                        help="Exit with a non-zero status code if updates or upgrades are available.",
                        action="store_true")
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="composer-updates",
        description=(
            "composer-updates - Report available updates for Composer project dependencies"
        ),
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    check = subparsers.add_parser(
        Constants.COMMAND_CHECK_UPDATES,
        help="Compare installed, constrained-best and latest versions of each requirement",
    )
    _add_check_updates_options(check)
    _add_common_options(check)

    return parser.parse_args(argv)
