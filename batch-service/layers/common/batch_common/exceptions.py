from typing import List, Optional

class BatchError(Exception):
    """Base class for all batch processing errors."""

class BatchEventError(BatchError, ValueError):
    """Raised when the records of a batch event cannot be read."""

class RecordIdError(BatchError, ValueError):
    """Raised when a batch record does not yield a usable record id.

    This is a configuration problem of the extractor, not a record failure, so it
    is raised before any record handler runs.
    """

class RecordError(BatchError):
    """Failure of one record. The handler's own error, if any, is the ``__cause__``."""

    def __init__(self, message: str, record_id: str):
        super().__init__(message)
        self.record_id = record_id

class UnprocessedRecordError(RecordError):

    def __init__(self, record_id: str):
        super().__init__(f"Record: '{record_id}' has not been processed.", record_id)

class HandlerFailedError(RecordError):

    def __init__(self, record_id: str, message: Optional[str] = None):
        super().__init__(message or f"Failed processing record: '{record_id}'. See cause for details.", record_id)

class CircuitBreakerError(HandlerFailedError):

    def __init__(self, record_id: str):
        super().__init__(
            record_id,
            f"Failed processing record: '{record_id}'. Error handling policy is configured to stop "
            "processing on first batch item failure. See cause for details.")

class BatchProcessingError(BatchError):
    """Raised when the whole batch has to be retried instead of reporting a partial failure."""

    def __init__(self, message: str, errors: List[RecordError]):
        super().__init__(message)
        self.errors = list(errors)

    @property
    def record_ids(self) -> List[str]:
        return [error.record_id for error in self.errors]

    def __str__(self):
        details = "; ".join(f"{type(e).__name__}({e.record_id})" for e in self.errors)
        return f"{self.args[0]} [{details}]" if details else self.args[0]
