from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Final

from dotenv import load_dotenv

from registry_manager.app import publish_registry_update
from registry_manager.config import ConfigurationError, configure_logging, get_publish_config
from registry_manager.domain.errors import StaleReferenceError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_FAILURE: Final[int] = 1
EXIT_USAGE: Final[int] = 2
# EX_TEMPFAIL from sysexits.h: the registry moved, re-running is safe.
EXIT_STALE_REFERENCE: Final[int] = 75
# 128 + SIGINT, so callers never read an interrupted run as success.
EXIT_INTERRUPTED: Final[int] = 130


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Publish a repository's extensions to the extension registry"
    )
    parser.add_argument(
        "--repository",
        type=str,
        help="Source repository as <owner>/<name> (defaults to $REPOSITORY)",
    )
    parser.add_argument(
        "--branch",
        type=str,
        help="Extension branch as <major>.<minor>/<stable|testing> (defaults to $BRANCH)",
    )
    parser.add_argument(
        "--commit-message",
        type=str,
        help="Commit message for the registry update (defaults to $COMMIT_MESSAGE)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level name (defaults to $LOG_LEVEL, then INFO)",
    )
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        configure_logging(level=parsed_args.log_level)
        config = get_publish_config(
            repository=parsed_args.repository,
            branch=parsed_args.branch,
            commit_message=parsed_args.commit_message,
        )
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(EXIT_USAGE)

    try:
        result = publish_registry_update(config)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(EXIT_USAGE)
    except StaleReferenceError:
        log.exception("The registry changed during the run, re-run to publish")
        sys.exit(EXIT_STALE_REFERENCE)
    except Exception:
        log.exception("Fatal error during publish")
        sys.exit(EXIT_FAILURE)

    if result.snapshot is None:
        log.info("Registry already up to date")
    else:
        log.info(f"Registry updated to commit {result.snapshot.commit_sha}")


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) by aborting the run with a failing exit code."""
    log.warning("Interrupted by user (Ctrl+C)")
    sys.exit(EXIT_INTERRUPTED)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
