"""Mapping of raw catalog rows onto typed entities.

Each entity has one explicit column table. A column either maps to a
required field (absent or NULL raises ``MissingFieldError``) or to an
optional one. Optional text columns of a batch fall back to the
``DefaultPolicy`` placeholder so a mapped ``Batch`` never carries ``None``.

Renamed columns:

- ``batchin_records``: ``dc_identifier_localid`` -> ``local_id``,
  ``dc_title`` -> ``title``, ``filename`` -> ``file_name``,
  ``filesize`` -> ``file_size``, ``md5_hash`` -> ``checksum``
- ``batchin_droid_records``: ``name`` -> ``file_name``, ``size`` ->
  ``file_size``, ``md5_hash`` -> ``checksum`` and the reserved word column
  ``type`` -> ``resource_type``
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

from batchin.core.errors import MissingFieldError
from batchin.database.models import Batch, BatchSummary, ContentRecord, RecordKind


@dataclass(frozen=True)
class DefaultPolicy:
    """Placeholder used for optional batch text columns that are NULL or absent."""

    placeholder: str = "default"


class Column(NamedTuple):
    """Association between a catalog column and an entity field."""

    name: str
    field: str
    required: bool = True


BATCH_COLUMNS: tuple[Column, ...] = (
    Column("row_id", "row_id"),
    Column("batch_id", "batch_id"),
    Column("created_at", "created_at"),
)

# Optional text columns replaced by the policy placeholder
BATCH_DEFAULTED_COLUMNS: tuple[Column, ...] = (
    Column("description", "description", required=False),
    Column("cp_id", "cp_id", required=False),
    Column("status", "status", required=False),
    Column("host", "host", required=False),
    Column("path", "path", required=False),
)

RECORD_COLUMNS: dict[RecordKind, tuple[Column, ...]] = {
    RecordKind.CHECKSUM: (
        Column("row_id", "row_id"),
        Column("batch_row_id", "batch_row_id"),
        Column("dc_identifier_localid", "local_id"),
        Column("filename", "file_name"),
        Column("md5_hash", "checksum"),
        Column("dc_title", "title", required=False),
        Column("filesize", "file_size", required=False),
        Column("created_at", "created_at", required=False),
        Column("last_modified_at", "last_modified_at", required=False),
    ),
    RecordKind.DROID: (
        Column("row_id", "row_id"),
        Column("batch_row_id", "batch_row_id"),
        Column("local_id", "local_id"),
        Column("name", "file_name"),
        Column("md5_hash", "checksum"),
        Column("file_path", "file_path", required=False),
        Column("size", "file_size", required=False),
        Column("puid", "puid", required=False),
        Column("mime_type", "mime_type", required=False),
        Column("format_name", "format_name", required=False),
        Column("format_version", "format_version", required=False),
        Column("type", "resource_type", required=False),
        Column("created_at", "created_at", required=False),
        Column("last_modified_at", "last_modified_at", required=False),
    ),
}


def _extract(
    row: Mapping[str, Any], columns: tuple[Column, ...], entity: str
) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for column in columns:
        value = row.get(column.name)
        if value is None:
            if column.required:
                raise MissingFieldError(column.name, entity)
            continue
        values[column.field] = value
    return values


def map_batch(row: Mapping[str, Any], policy: DefaultPolicy | None = None) -> Batch:
    """Map a ``batchin_batches`` row onto a Batch.

    Args:
        row: Raw row mapping
        policy: Placeholder policy for optional text columns

    Returns:
        Mapped batch

    Raises:
        MissingFieldError: If a required column is absent or NULL
    """
    policy = policy or DefaultPolicy()
    values = _extract(row, BATCH_COLUMNS, "batch")
    for column in BATCH_DEFAULTED_COLUMNS:
        value = row.get(column.name)
        values[column.field] = policy.placeholder if value is None else value

    # Rows written before the column existed only carry created_at
    last_modified_at = row.get("last_modified_at")
    values["last_modified_at"] = (
        values["created_at"] if last_modified_at is None else last_modified_at
    )
    return Batch(**values)


def map_batch_summary(
    row: Mapping[str, Any], policy: DefaultPolicy | None = None
) -> BatchSummary:
    """Map a batch listing row (batch columns plus ``record_count``)."""
    return BatchSummary(
        batch=map_batch(row, policy),
        record_count=int(row.get("record_count") or 0),
    )


def map_record(
    row: Mapping[str, Any], kind: RecordKind = RecordKind.CHECKSUM
) -> ContentRecord:
    """Map a content record row of the given catalog schema.

    Args:
        row: Raw row mapping
        kind: Catalog schema the row was read from

    Returns:
        Mapped content record

    Raises:
        MissingFieldError: If a required column is absent or NULL
    """
    values = _extract(row, RECORD_COLUMNS[kind], f"{kind.value} record")
    return ContentRecord(kind=kind, **values)
