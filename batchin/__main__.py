"""CLI interface for batch runs."""

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from batchin.core.config import Settings
from batchin.core.db import catalog_session
from batchin.core.errors import BatchRunError
from batchin.core.logging import configure_logging, get_logger
from batchin.database.mappers import DefaultPolicy
from batchin.database.models import RecordKind
from batchin.database.repositories import CatalogReader
from batchin.runner.confirmation import (
    ConfirmationSource,
    ScriptedConfirmation,
    StdinConfirmation,
)
from batchin.runner.controller import BatchRunController
from batchin.watchfolder.assembler import MessageAssembler
from batchin.watchfolder.metrics import export_metrics
from batchin.watchfolder.publisher import PublisherGateway, open_transport

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="batchin",
        description="Publish watchfolder messages for the records of a catalog batch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Publish every record of a batch, after confirmation
  python -m batchin start --batch-id QAS-BD-OR-123abc-2022-01-01-00-00-00-000

  # Publish a single record without prompting
  python -m batchin start --batch-id QAS-BD-OR-123abc --local-id abc_123 --yes

  # Check a batch is present and count its records
  python -m batchin check --batch-id QAS-BD-OR-123abc

  # List all batches
  python -m batchin list
""",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    # Also accepted after the subcommand; SUPPRESS keeps a flag given before it
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Commands")

    start_parser = subparsers.add_parser(
        "start", parents=[common], help="Publish a batch"
    )
    start_parser.add_argument(
        "--batch-id",
        "-b",
        required=True,
        help="External batch identifier; exactly one batch must match",
    )
    start_parser.add_argument(
        "--local-id", "-l", help="Only publish the record with this local identifier"
    )
    start_parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Publish without asking for confirmation",
    )

    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Check a batch is present and count its records",
    )
    check_parser.add_argument("--batch-id", "-b", required=True)
    check_parser.add_argument("--local-id", "-l")

    subparsers.add_parser("list", parents=[common], help="List all batches")

    return parser


def build_controller(
    settings: Settings,
    session: Session,
    publisher: PublisherGateway | None = None,
    confirmation: ConfirmationSource | None = None,
) -> BatchRunController:
    """Wire a controller from settings and already acquired connections."""
    reader = CatalogReader(
        session,
        kind=RecordKind(settings.CATALOG_RECORD_KIND),
        policy=DefaultPolicy(placeholder=settings.FIELD_DEFAULT),
    )
    return BatchRunController(
        reader=reader,
        assembler=MessageAssembler.from_settings(settings),
        publisher=publisher,
        confirmation=confirmation or StdinConfirmation(),
        confirmation_token=settings.CONFIRMATION_TOKEN,
    )


def start(args: argparse.Namespace, settings: Settings) -> int:
    """Publish a batch."""
    confirmation: ConfirmationSource
    if args.yes:
        confirmation = ScriptedConfirmation([settings.CONFIRMATION_TOKEN])
    else:
        confirmation = StdinConfirmation()

    with catalog_session(settings) as session, open_transport(settings) as client:
        publisher = PublisherGateway(client, settings.TRANSPORT_QUEUE)
        controller = build_controller(settings, session, publisher, confirmation)
        report = controller.run(args.batch_id, local_id=args.local_id)

    if not report.confirmed and report.record_count:
        print("Aborted, nothing published")
    else:
        print(
            f"Published {report.published} of {report.record_count} record(s) "
            f"for batch {report.batch_id} to queue {settings.TRANSPORT_QUEUE}"
        )
    return 0


def check(args: argparse.Namespace, settings: Settings) -> int:
    """Check a batch is present and count its records."""
    with catalog_session(settings) as session:
        report = build_controller(settings, session).check(
            args.batch_id, local_id=args.local_id
        )
    print(f"Batch {report.batch_id}: {report.record_count} record(s)")
    return 0


def list_batches(args: argparse.Namespace, settings: Settings) -> int:
    """List all batches."""
    with catalog_session(settings) as session:
        summaries = build_controller(settings, session).list_batches()

    if not summaries:
        print("No batches found")
        return 0
    for summary in summaries:
        batch = summary.batch
        print(
            f"{batch.batch_id}\t{batch.status}\t{summary.record_count}\t"
            f"{batch.created_at.isoformat()}"
        )
    return 0


COMMANDS = {
    "start": start,
    "check": check,
    "list": list_batches,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the batch CLI."""
    args = build_parser().parse_args(argv)

    settings = Settings()
    level = "debug" if args.verbose else settings.LOG_LEVEL
    configure_logging(level=level, json_logs=settings.JSON_LOGS)

    try:
        return COMMANDS[args.command](args, settings)
    except KeyboardInterrupt:
        logger.info("Batch run interrupted by user")
        return 130
    except BatchRunError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except SQLAlchemyError as e:
        logger.exception("Catalog query failed")
        print(f"Error: catalog query failed: {e}", file=sys.stderr)
        return 1
    finally:
        if settings.METRICS_TEXTFILE:
            write_metrics(settings.METRICS_TEXTFILE)


def write_metrics(path: str) -> None:
    """Export run metrics, logging rather than failing the run on error."""
    try:
        export_metrics(path)
    except OSError as e:
        logger.warning("Failed to write metrics textfile", path=path, error=str(e))


if __name__ == "__main__":
    sys.exit(main())
