"""Batch run orchestration.

A run moves through these states::

    IDLE -> BATCH_RESOLVED -> RECORDS_ENUMERATED -> AWAITING_CONFIRMATION
         -> PUBLISHING -> COMPLETED

``FAILED`` can be reached from any state. A run with no records, or one the
operator declines, goes straight to ``COMPLETED`` without publishing.
Records already published before a failure stay published.
"""

from enum import Enum

from pydantic import BaseModel

from batchin.core.logging import get_batch_logger, get_logger
from batchin.database.models import Batch, BatchSummary, ContentRecord
from batchin.database.repositories import CatalogReader
from batchin.runner.confirmation import ConfirmationSource
from batchin.watchfolder.assembler import MessageAssembler
from batchin.watchfolder.metrics import BATCH_RUNS
from batchin.watchfolder.publisher import PublisherGateway

logger = get_logger(__name__)


class RunState(str, Enum):
    """Batch run state."""

    IDLE = "idle"
    BATCH_RESOLVED = "batch_resolved"
    RECORDS_ENUMERATED = "records_enumerated"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    PUBLISHING = "publishing"
    COMPLETED = "completed"
    FAILED = "failed"


class RunReport(BaseModel):
    """Outcome of a completed run."""

    batch_id: str
    state: RunState
    record_count: int = 0
    published: int = 0
    confirmed: bool = False


class BatchRunController:
    """Resolves a batch, asks the operator and publishes one message per record."""

    def __init__(
        self,
        reader: CatalogReader,
        assembler: MessageAssembler,
        publisher: PublisherGateway | None,
        confirmation: ConfirmationSource,
        confirmation_token: str = "yes",
    ) -> None:
        """Initialize controller.

        Args:
            reader: Catalog reader
            assembler: Message assembler
            publisher: Publisher gateway, only needed by run()
            confirmation: Source of the operator's answer
            confirmation_token: The exact answer that allows publishing
        """
        self.reader = reader
        self.assembler = assembler
        self.publisher = publisher
        self.confirmation = confirmation
        self.confirmation_token = confirmation_token
        self.state = RunState.IDLE
        self.published = 0

    def _transition(self, state: RunState) -> None:
        logger.debug("Run state changed", previous=self.state.value, state=state.value)
        self.state = state

    def _enumerate(
        self, batch_id: str, local_id: str | None
    ) -> tuple[Batch, list[ContentRecord]]:
        batch = self.reader.get_batch(batch_id)
        self._transition(RunState.BATCH_RESOLVED)
        logger.info(
            "Resolved batch",
            batch_id=batch.batch_id,
            row_id=batch.row_id,
            status=batch.status,
        )

        records = self.reader.list_records(batch, local_id=local_id)
        self._transition(RunState.RECORDS_ENUMERATED)
        logger.info(
            "Enumerated content records",
            batch_id=batch.batch_id,
            local_id=local_id,
            count=len(records),
        )
        return batch, records

    def _complete(self, report: RunReport, outcome: str) -> RunReport:
        self._transition(RunState.COMPLETED)
        report.state = self.state
        BATCH_RUNS.labels(outcome=outcome).inc()
        return report

    def run(self, batch_id: str, local_id: str | None = None) -> RunReport:
        """Run a batch from resolution to the last publish.

        Args:
            batch_id: External batch identifier
            local_id: Optional local identifier limiting the run to one record

        Returns:
            Report of the completed run

        Raises:
            BatchRunError: On any fatal condition; the run is left FAILED
            RuntimeError: If the controller has no publisher
        """
        if self.publisher is None:
            raise RuntimeError("A publisher is required to run a batch")
        publisher = self.publisher

        self.state = RunState.IDLE
        self.published = 0
        try:
            batch, records = self._enumerate(batch_id, local_id)
            report = RunReport(batch_id=batch.batch_id, state=self.state)
            report.record_count = len(records)

            if not records:
                logger.info("Batch has no content records", batch_id=batch.batch_id)
                return self._complete(report, "empty")

            self._transition(RunState.AWAITING_CONFIRMATION)
            answer = self.confirmation.confirm(
                f"Found {len(records)} record(s) in batch {batch.batch_id}. "
                f"Type '{self.confirmation_token}' to publish: "
            )
            if answer != self.confirmation_token:
                logger.info("Run declined by operator", batch_id=batch.batch_id)
                return self._complete(report, "declined")
            report.confirmed = True

            self._transition(RunState.PUBLISHING)
            batch_logger = get_batch_logger(batch.batch_id)
            for record in records:
                message = self.assembler.assemble(batch, record)
                batch_logger.info(
                    "Publishing message",
                    row_id=record.row_id,
                    file_name=record.file_name,
                )
                publisher.publish(message)
                self.published += 1
                report.published = self.published

            logger.info(
                "Batch run completed",
                batch_id=batch.batch_id,
                published=self.published,
            )
            return self._complete(report, "completed")

        except Exception as e:
            failed_in = self.state
            self._transition(RunState.FAILED)
            BATCH_RUNS.labels(outcome="failed").inc()
            logger.error(
                "Batch run failed",
                batch_id=batch_id,
                failed_in=failed_in.value,
                published=self.published,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def check(self, batch_id: str, local_id: str | None = None) -> RunReport:
        """Resolve a batch and count its records without publishing anything."""
        self.state = RunState.IDLE
        self.published = 0
        try:
            batch, records = self._enumerate(batch_id, local_id)
        except Exception:
            self._transition(RunState.FAILED)
            raise
        return RunReport(
            batch_id=batch.batch_id, state=self.state, record_count=len(records)
        )

    def list_batches(self) -> list[BatchSummary]:
        """Get every catalog batch with its record count."""
        return self.reader.list_batches()
