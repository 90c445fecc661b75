# thumbnail_ingest/cli.py
"""
Command line entry point.

    thumbnail-ingest run [--csv PATH] [--batch-size N]
    thumbnail-ingest retry [--max-attempts N] [--batch-size N]
    thumbnail-ingest failures [--all] [--max-attempts N]

Exit codes: 0 on success, 1 on a fatal error (configuration, input file or
store connection), 130 when a pass was interrupted by SIGINT/SIGTERM.
"""

import argparse
import signal
import sys
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from .config import Settings, load_settings
from .constants import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_SUCCESS
from .database.exceptions import DatabaseOperationError
from .enums import LogEmoji, LoggerName, LogSource
from .exceptions import IngestError
from .models.image_models import ProcessingResult
from .pipeline_context import PipelineContext
from .services.logger import configure_logging, get_service_logger

logger = get_service_logger(LoggerName.CLI, LogSource.CLI)

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="thumbnail-ingest",
        description="Fetch remote images listed in a CSV and store square thumbnails.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Process every row of the CSV")
    run_parser.add_argument("--csv", dest="csv_path", help="Input CSV path")
    run_parser.add_argument("--batch-size", type=int, help="Rows per chunk")

    retry_parser = subparsers.add_parser(
        "retry", help="Re-process failed rows below the attempt cutoff"
    )
    retry_parser.add_argument(
        "--max-attempts", type=int, dest="max_retry_attempts", help="Attempt cutoff"
    )
    retry_parser.add_argument("--batch-size", type=int, help="Rows per chunk")

    failures_parser = subparsers.add_parser(
        "failures", help="List failure ledger entries"
    )
    failures_parser.add_argument(
        "--all",
        action="store_true",
        dest="show_all",
        help="Include entries past the retry cutoff",
    )
    failures_parser.add_argument(
        "--max-attempts", type=int, dest="max_retry_attempts", help="Attempt cutoff"
    )
    return parser


def settings_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """CLI flags that map onto Settings fields; unset flags are None."""
    return {
        "csv_path": getattr(args, "csv_path", None),
        "batch_size": getattr(args, "batch_size", None),
        "max_retry_attempts": getattr(args, "max_retry_attempts", None),
    }


def install_signal_handlers(ctx: PipelineContext) -> Dict[int, Any]:
    """Route SIGINT/SIGTERM to a between-chunks stop; returns previous handlers."""

    def _signal_handler(signum, frame):
        ctx.request_stop()

    previous = {}
    for signum in STOP_SIGNALS:
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, _signal_handler)
    return previous


def restore_signal_handlers(previous: Dict[int, Any]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def report_result(label: str, result: ProcessingResult) -> int:
    logger.info(
        f"{label}: {result.total} rows, {result.processed} processed, "
        f"{result.failed} failed",
        extra_context=result.model_dump(),
        emoji=LogEmoji.CANCELED if result.cancelled else LogEmoji.SUCCESS,
    )
    return EXIT_INTERRUPTED if result.cancelled else EXIT_SUCCESS


def command_run(ctx: PipelineContext, args: argparse.Namespace) -> int:
    return report_result("Ingestion pass finished", ctx.run_pass())


def command_retry(ctx: PipelineContext, args: argparse.Namespace) -> int:
    return report_result("Retry pass finished", ctx.run_retry())


def command_failures(ctx: PipelineContext, args: argparse.Namespace) -> int:
    cutoff = None if args.show_all else ctx.settings.max_retry_attempts
    failures = ctx.list_failures(cutoff)
    for failure in failures:
        print(
            f"{failure.id}\t{failure.index}\t{failure.attempts}\t"
            f"{failure.last_attempt.isoformat()}\t{failure.url}\t{failure.error}"
        )
    logger.info(f"{len(failures)} failure ledger entries", emoji=LogEmoji.INFO)
    return EXIT_SUCCESS


COMMANDS: Dict[str, Callable[[PipelineContext, argparse.Namespace], int]] = {
    "run": command_run,
    "retry": command_retry,
    "failures": command_failures,
}


def setup_logging(settings: Settings) -> None:
    configure_logging(level=settings.log_level, log_directory=settings.log_directory)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(**settings_overrides(args))
    except ValidationError as e:
        configure_logging(enable_file_logging=False)
        logger.error("Invalid configuration", exception=e)
        return EXIT_FAILURE

    try:
        setup_logging(settings)
        logger.info(f"Starting '{args.command}'", emoji=LogEmoji.STARTUP)
        with PipelineContext(settings) as ctx:
            previous = install_signal_handlers(ctx)
            try:
                return COMMANDS[args.command](ctx, args)
            finally:
                restore_signal_handlers(previous)
    except (IngestError, DatabaseOperationError) as e:
        logger.error(f"'{args.command}' failed", exception=e)
        return EXIT_FAILURE
    except Exception as e:
        logger.error(f"'{args.command}' failed unexpectedly", exception=e)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
