"""Errors raised while running a batch."""


class BatchRunError(Exception):
    """Base class for every fatal condition of a batch run."""


class BatchNotFoundError(BatchRunError):
    """Raised when no batch matches the external identifier."""

    def __init__(self, batch_id: str) -> None:
        self.batch_id = batch_id
        super().__init__(f"Batch not found: {batch_id!r}")


class AmbiguousBatchError(BatchRunError):
    """Raised when more than one batch matches the external identifier.

    This points at a catalog integrity problem rather than operator misuse.
    """

    def __init__(self, batch_id: str, count: int) -> None:
        self.batch_id = batch_id
        self.count = count
        super().__init__(
            f"Batch identifier {batch_id!r} matches {count} batches, expected one"
        )


class MissingFieldError(BatchRunError):
    """Raised when a catalog row lacks a required column."""

    def __init__(self, field: str, entity: str) -> None:
        self.field = field
        self.entity = entity
        super().__init__(f"Missing required field {field!r} for {entity}")


class SidecarDerivationError(BatchRunError):
    """Raised when no sidecar name can be derived for a content file."""

    def __init__(self, file_name: str) -> None:
        self.file_name = file_name
        super().__init__(f"Cannot derive sidecar name from file name {file_name!r}")


class TransportError(BatchRunError):
    """Raised when the transport rejects a message hand-off."""

    def __init__(self, queue: str, reason: str) -> None:
        self.queue = queue
        self.reason = reason
        super().__init__(f"Failed to publish to queue {queue!r}: {reason}")
