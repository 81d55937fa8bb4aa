"""composer-updates - Report available updates for Composer project dependencies.

    Returns:
        int: Exit code
"""
import logging
import sys

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from args import parse_args
from cli_config import setup_logging
from cli_check import run_check_updates

COMMANDS = {
    Constants.COMMAND_CHECK_UPDATES: run_check_updates,
}


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.command)
        )

    handler = COMMANDS[args.command]
    sys.exit(handler(args))


if __name__ == "__main__":
    main()
