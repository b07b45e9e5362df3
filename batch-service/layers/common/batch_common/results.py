import threading

from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

from .exceptions import CircuitBreakerError, HandlerFailedError, RecordError, UnprocessedRecordError
from .models import FailureKind, PartialFailureResponse, ProcessingResult, RecordFailure, RecordSuccess
from .policy import ErrorHandlingPolicy

TRecord = TypeVar("TRecord")

Outcome = Union[RecordSuccess, RecordFailure]

class ResultAggregator(Generic[TRecord]):
    """Tracks the outcome of every record of one batch.

    Every record starts as an UNPROCESSED failure so that nothing is lost if the
    processing loop stops early. Updates are serialised with a lock so that worker
    threads can report outcomes concurrently.
    """

    def __init__(self, batch_records: Sequence[Tuple[str, TRecord]]):
        self._batch: List[Tuple[str, TRecord]] = list(batch_records)
        self._records: Dict[str, TRecord] = dict(self._batch)
        self._lock = threading.Lock()
        self._tripped_by: Optional[str] = None
        self._outcomes: Dict[str, Outcome] = {
            record_id: RecordFailure.create(record_id, record, FailureKind.UNPROCESSED, UnprocessedRecordError(record_id))
            for record_id, record in self._batch
        }

    @property
    def tripped_by(self) -> Optional[str]:
        """Id of the record whose failure tripped the circuit breaker, if any."""
        return self._tripped_by

    def outcome(self, record_id: str) -> Outcome:
        with self._lock:
            return self._outcomes[record_id]

    def record_success(self, record_id: str, result: Any = None) -> RecordSuccess:
        success = RecordSuccess(record=self._records[record_id], record_id=record_id, result=result)
        with self._lock:
            self._outcomes[record_id] = success
        return success

    def record_failure(self, record_id: str, cause: BaseException) -> RecordFailure:
        error = HandlerFailedError(record_id)
        error.__cause__ = cause
        failure = RecordFailure.create(record_id, self._records[record_id], FailureKind.HANDLER_FAILED, error)
        with self._lock:
            self._outcomes[record_id] = failure
        return failure

    def trip_circuit_breaker(self, record_id: str) -> bool:
        """Mark ``record_id`` as the failure that stopped the batch.

        Only the first caller wins; later failures keep their HANDLER_FAILED kind.
        """
        with self._lock:
            if self._tripped_by is not None:
                return False
            current = self._outcomes[record_id]
            if not isinstance(current, RecordFailure) or current.kind != FailureKind.HANDLER_FAILED:
                raise ValueError(f"Record '{record_id}' has no handler failure to trip the circuit breaker with")
            error = CircuitBreakerError(record_id)
            error.__cause__ = current.cause
            self._outcomes[record_id] = RecordFailure.create(record_id, current.record, FailureKind.CIRCUIT_BROKEN, error)
            self._tripped_by = record_id
            return True

    def _ordered(self) -> List[Outcome]:
        with self._lock:
            return [self._outcomes[record_id] for record_id, _ in self._batch]

    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self._ordered() if isinstance(outcome, RecordSuccess))

    @property
    def failure_count(self) -> int:
        return sum(1 for outcome in self._ordered() if isinstance(outcome, RecordFailure))

    def errors(self) -> List[RecordError]:
        """One error per failed record, in batch order."""
        return [outcome.error for outcome in self._ordered() if isinstance(outcome, RecordFailure)]

    def build(self, error_handling_policy: ErrorHandlingPolicy) -> ProcessingResult:
        outcomes = self._ordered()
        successes = [outcome for outcome in outcomes if isinstance(outcome, RecordSuccess)]
        failures = [outcome for outcome in outcomes if isinstance(outcome, RecordFailure)]
        return ProcessingResult(
            error_handling_policy=error_handling_policy,
            batch_records=[record for _, record in self._batch],
            success_records=successes,
            failure_records=failures,
            response=PartialFailureResponse.create([failure.record_id for failure in failures]),
        )
