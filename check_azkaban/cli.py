"""Command line interface for the Azkaban Nagios check.

This module parses the command line, looks up the latest completed execution
of a flow and reports its outcome as a Nagios status line and exit code.
"""

import argparse
import logging
import sys
from typing import Callable, List, NoReturn, Optional

from check_azkaban import __version__
from check_azkaban.azkaban import Azkaban, AzkabanError
from check_azkaban.classifier import classify
from check_azkaban.config import DEFAULT_SERVICE_NAME, Config, ConfigError
from check_azkaban.finder import NoExecutionFoundError, find_latest_completed
from check_azkaban.nagios import NagiosService, NagiosState, NagiosStatus

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


class CheckArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with the UNKNOWN code on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(NagiosState.UNKNOWN.exit_code, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = CheckArgumentParser(
        prog="check_azkaban", description="Nagios check plugin for Azkaban"
    )
    parser.add_argument(
        "-b",
        "--base-url",
        required=True,
        metavar="url",
        help="The Base-URL of Azkaban",
    )
    parser.add_argument("-u", "--username", required=True, metavar="username")
    parser.add_argument("-p", "--password", required=True, metavar="password")
    parser.add_argument("--project", required=True, metavar="project")
    parser.add_argument("--flow", required=True, metavar="flow")
    parser.add_argument(
        "--timeout", type=float, default=None, help="HTTP request timeout in seconds"
    )
    parser.add_argument(
        "--max-lookback",
        type=int,
        default=None,
        metavar="N",
        help="Inspect at most N executions (default: whole history)",
    )
    parser.add_argument("--config", help="Path to TOML configuration file", default=None)
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr when verbose, discard them otherwise.

    stdout is reserved for the status line.
    """
    if verbose:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        level = logging.DEBUG
    else:
        handler = logging.NullHandler()
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[handler], force=True)


def run_check(
    config: Config, connect: Optional[Callable[..., Azkaban]] = None
) -> NagiosStatus:
    """Look up the latest completed execution and classify it.

    Args:
        config: Check configuration
        connect: Factory returning a logged in Azkaban client,
            Azkaban.authenticated if None

    Returns:
        NagiosStatus for the flow
    """
    connect = connect or Azkaban.authenticated
    try:
        with connect(
            config.base_url,
            config.username,
            config.password,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
        ) as azkaban:
            execution = find_latest_completed(
                azkaban, config.project, config.flow, max_lookback=config.max_lookback
            )
    except (AzkabanError, NoExecutionFoundError) as e:
        logger.info(f"Lookup for {config.project}/{config.flow} failed: {e}")
        return classify(e)

    return classify(execution)


def main(argv: Optional[List[str]] = None) -> NoReturn:
    """Main entry point for the check."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    service = NagiosService(DEFAULT_SERVICE_NAME)
    try:
        config = Config.from_args(args, config_file=args.config)
        service = NagiosService(config.service_name)
        status = run_check(config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        status = NagiosStatus.unknown(f"Configuration error: {e}")
    except KeyboardInterrupt:
        status = NagiosStatus.unknown("Interrupted")
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        status = NagiosStatus.unknown(f"Unexpected error: {e}")

    service.report(status)

