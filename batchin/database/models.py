"""Catalog entities read by a batch run."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class RecordKind(str, Enum):
    """Catalog schema a content record was read from."""

    CHECKSUM = "checksum"
    DROID = "droid"


class Batch(BaseModel):
    """A named collection of content items submitted together for ingest."""

    model_config = ConfigDict(frozen=True)

    row_id: int
    batch_id: str
    description: str
    cp_id: str
    status: str
    host: str
    path: str
    created_at: datetime
    last_modified_at: datetime


class BatchSummary(BaseModel):
    """A batch together with the number of content records it owns."""

    model_config = ConfigDict(frozen=True)

    batch: Batch
    record_count: int


class ContentRecord(BaseModel):
    """One file plus metadata belonging to a batch.

    Both catalog schemas share the identifying subset (local id, file name,
    checksum). Format identification fields are only filled for records
    read from the DROID table.
    """

    model_config = ConfigDict(frozen=True)

    kind: RecordKind
    row_id: int
    batch_row_id: int
    local_id: str
    file_name: str
    checksum: str
    title: str = ""
    file_size: int = 0
    created_at: datetime | None = None
    last_modified_at: datetime | None = None

    # DROID only
    file_path: str | None = None
    puid: str | None = None
    mime_type: str | None = None
    format_name: str | None = None
    format_version: str | None = None
    resource_type: str | None = None
