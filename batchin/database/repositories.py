"""Read-only queries against the batch catalog."""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import text
from sqlalchemy.orm import Session

from batchin.core.errors import AmbiguousBatchError, BatchNotFoundError
from batchin.core.logging import get_logger
from batchin.database.mappers import (
    DefaultPolicy,
    map_batch,
    map_batch_summary,
    map_record,
)
from batchin.database.models import Batch, BatchSummary, ContentRecord, RecordKind

logger = get_logger(__name__)

BATCH_BY_ID_QUERY = text(
    """
    SELECT *
    FROM batchin_batches
    WHERE batch_id = :batch_id
    """
)

BATCH_LISTING_QUERY = """
    SELECT
        b.*,
        (
            SELECT COUNT(*)
            FROM {records_table} r
            WHERE r.batch_row_id = b.row_id
        ) AS record_count
    FROM batchin_batches b
    ORDER BY b.created_at, b.row_id
"""

RECORDS_QUERY = """
    SELECT *
    FROM {records_table}
    WHERE batch_row_id = :batch_row_id
    {local_id_filter}
    ORDER BY row_id
"""

RECORD_TABLES: dict[RecordKind, tuple[str, str]] = {
    # kind: (table, local identifier column)
    RecordKind.CHECKSUM: ("batchin_records", "dc_identifier_localid"),
    RecordKind.DROID: ("batchin_droid_records", "local_id"),
}


class CatalogReader:
    """Parameterized lookups of batches and their content records.

    Every call is an independent read; nothing here opens a transaction
    that outlives the query.
    """

    def __init__(
        self,
        session: Session,
        kind: RecordKind = RecordKind.CHECKSUM,
        policy: DefaultPolicy | None = None,
    ) -> None:
        """Initialize reader.

        Args:
            session: Catalog session
            kind: Content record schema to read
            policy: Placeholder policy for optional batch columns
        """
        self.session = session
        self.kind = kind
        self.policy = policy or DefaultPolicy()

    def _query(
        self, statement: Any, params: dict[str, Any] | None = None
    ) -> Sequence[Mapping[str, Any]]:
        try:
            result = self.session.execute(statement, params or {})
            return list(result.mappings().all())
        finally:
            # End the implicit transaction so no read outlives its query
            self.session.rollback()

    def fetch_batch_rows(self, batch_id: str) -> Sequence[Mapping[str, Any]]:
        """Get every catalog row carrying the external batch identifier."""
        return self._query(BATCH_BY_ID_QUERY, {"batch_id": batch_id})

    def get_batch(self, batch_id: str) -> Batch:
        """Resolve exactly one batch by external identifier.

        Args:
            batch_id: External batch identifier

        Returns:
            The matching batch

        Raises:
            BatchNotFoundError: If no row matches
            AmbiguousBatchError: If more than one row matches
        """
        rows = self.fetch_batch_rows(batch_id)
        if not rows:
            raise BatchNotFoundError(batch_id)
        if len(rows) > 1:
            raise AmbiguousBatchError(batch_id, len(rows))

        logger.debug("Found batch row", batch_id=batch_id, row=dict(rows[0]))
        return map_batch(rows[0], self.policy)

    def list_records(
        self, batch: Batch, local_id: str | None = None
    ) -> list[ContentRecord]:
        """Enumerate the content records of a batch in catalog order.

        Args:
            batch: Owning batch
            local_id: Optional local identifier restricting the result

        Returns:
            Content records ordered by row id
        """
        table, local_id_column = RECORD_TABLES[self.kind]
        params: dict[str, Any] = {"batch_row_id": batch.row_id}
        local_id_filter = ""
        if local_id is not None:
            local_id_filter = f"AND {local_id_column} = :local_id"
            params["local_id"] = local_id

        statement = text(
            RECORDS_QUERY.format(records_table=table, local_id_filter=local_id_filter)
        )
        rows = self._query(statement, params)
        logger.debug(
            "Found content record rows",
            batch_id=batch.batch_id,
            table=table,
            count=len(rows),
        )
        return [map_record(row, self.kind) for row in rows]

    def list_batches(self) -> list[BatchSummary]:
        """Get every batch with its content record count."""
        table, _ = RECORD_TABLES[self.kind]
        statement = text(BATCH_LISTING_QUERY.format(records_table=table))
        return [map_batch_summary(row, self.policy) for row in self._query(statement)]
