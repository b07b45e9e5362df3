import time

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Generic, List, Optional, Tuple, TypeVar

from aws_lambda_powertools.utilities.data_classes import DynamoDBStreamEvent, KinesisStreamEvent, SQSEvent
from aws_lambda_powertools.utilities.data_classes.dynamo_db_stream_event import DynamoDBRecord
from aws_lambda_powertools.utilities.data_classes.kinesis_stream_event import KinesisStreamRecord
from aws_lambda_powertools.utilities.data_classes.sqs_event import SQSRecord

from .config import get_config
from .exceptions import BatchProcessingError
from .extractors import DynamoDbStreamRecordExtractor, KinesisRecordExtractor, RecordExtractor, SqsRecordExtractor
from .handlers import RecordHandler, as_record_handler
from .models import FailureKind, ProcessingOptions, ProcessingResult
from .observability import log_batch_summary, logger, tracer
from .policy import ErrorHandlingPolicy, resolve_error_handling_policy
from .results import ResultAggregator

TEvent = TypeVar("TEvent")
TRecord = TypeVar("TRecord")

RecordFailureHook = Callable[[Any, Exception], None]
BatchCompleteHook = Callable[[ProcessingResult], None]

class BatchProcessor(Generic[TEvent, TRecord]):
    """Drives every record of a batch through a record handler.

    The processor reports the records that failed so that only those are retried
    by the event source. Under STOP_ON_FIRST_FAILURE the first failure stops the
    batch and the records that were never attempted are reported as unprocessed.
    When nothing succeeded under that policy a ``BatchProcessingError`` is raised
    instead, so that the whole batch is retried.

    ``before_batch``, ``handle_record_success``, ``handle_record_failure`` and
    ``after_batch`` can be overridden to customise a processor. Errors raised by the
    per-record and after-batch hooks are logged and ignored.
    """

    def __init__(
        self,
        extractor: RecordExtractor[TEvent, TRecord],
        on_record_failure: Optional[RecordFailureHook] = None,
        on_batch_complete: Optional[BatchCompleteHook] = None,
    ):
        self.extractor = extractor
        self.on_record_failure = on_record_failure
        self.on_batch_complete = on_batch_complete
        self.processing_result: Optional[ProcessingResult] = None

    @tracer.capture_method(capture_response=False)
    def process(self, event: Any, record_handler: Any, options: Optional[ProcessingOptions] = None) -> ProcessingResult:
        options = options or ProcessingOptions.create(get_config())
        handler = as_record_handler(record_handler)

        # Clear result from any previous run
        self.processing_result = None

        event = self.extractor.to_event(event)
        batch_records = self.extractor.extract(event)
        policy = resolve_error_handling_policy(
            options.error_handling_policy,
            self.extractor.default_error_handling_policy(event))
        aggregator: ResultAggregator[TRecord] = ResultAggregator(batch_records)

        self.before_batch(event, options)

        logger.debug(
            f"Processing batch of {len(batch_records)} records",
            policy=policy.value,
            parallel=options.parallel_enabled,
            max_workers=options.max_workers)
        started = time.perf_counter()
        if options.parallel_enabled and len(batch_records) > 1:
            self._process_parallel(handler, batch_records, aggregator, policy, options)
        else:
            self._process_sequential(handler, batch_records, aggregator, policy, options)

        result = aggregator.build(policy)
        self.processing_result = result
        log_batch_summary(result, (time.perf_counter() - started) * 1000)

        self._invoke_hook(self.after_batch, event, result, options)
        self._raise_on_full_batch_failure(result, aggregator, policy, options)
        return result

    def _process_sequential(
        self,
        handler: RecordHandler[TRecord],
        batch_records: List[Tuple[str, TRecord]],
        aggregator: ResultAggregator[TRecord],
        policy: ErrorHandlingPolicy,
        options: ProcessingOptions,
    ) -> None:
        for position, (record_id, record) in enumerate(batch_records):
            if options.is_cancelled:
                logger.info("Batch processing cancelled", remaining=len(batch_records) - position)
                return
            if not self._process_record(handler, record_id, record, aggregator, policy):
                return

    def _process_parallel(
        self,
        handler: RecordHandler[TRecord],
        batch_records: List[Tuple[str, TRecord]],
        aggregator: ResultAggregator[TRecord],
        policy: ErrorHandlingPolicy,
        options: ProcessingOptions,
    ) -> None:
        def run(record_id: str, record: TRecord) -> None:
            # Records that have not started when the breaker trips stay unprocessed
            if aggregator.tripped_by is not None or options.is_cancelled:
                return
            self._process_record(handler, record_id, record, aggregator, policy)

        with ThreadPoolExecutor(max_workers=options.max_workers) as executor:
            futures = [executor.submit(run, record_id, record) for record_id, record in batch_records]
            for future in as_completed(futures):
                future.result()

    def _process_record(
        self,
        handler: RecordHandler[TRecord],
        record_id: str,
        record: TRecord,
        aggregator: ResultAggregator[TRecord],
        policy: ErrorHandlingPolicy,
    ) -> bool:
        """Run the handler for one record. Returns False when the batch must stop."""
        try:
            result = handler.handle(record)
        except Exception as e:
            logger.warning(f"Failed processing record: '{record_id}'", record_id=record_id, exc_info=e)
            aggregator.record_failure(record_id, e)
            stop = policy == ErrorHandlingPolicy.STOP_ON_FIRST_FAILURE
            if stop and aggregator.trip_circuit_breaker(record_id):
                logger.warning("Circuit breaker tripped, stopping batch processing", record_id=record_id)
            self._invoke_hook(self.handle_record_failure, record, e)
            return not stop

        aggregator.record_success(record_id, result)
        self._invoke_hook(self.handle_record_success, record, result)
        return True

    def _raise_on_full_batch_failure(
        self,
        result: ProcessingResult,
        aggregator: ResultAggregator[TRecord],
        policy: ErrorHandlingPolicy,
        options: ProcessingOptions,
    ) -> None:
        # A partial response cannot express "nothing succeeded", the whole batch has to be retried
        if result.success_records or not result.failure_records:
            return
        # Cancellation alone leaves records unprocessed without any handler failure
        if not any(failure.kind != FailureKind.UNPROCESSED for failure in result.failure_records):
            return
        if policy == ErrorHandlingPolicy.STOP_ON_FIRST_FAILURE or options.throw_on_full_batch_failure:
            raise BatchProcessingError(
                f"Entire batch of '{len(result.batch_records)}' record(s) failed processing. See errors for details.",
                aggregator.errors())

    def _invoke_hook(self, hook: Callable[..., None], *args: Any) -> None:
        try:
            hook(*args)
        except Exception:
            logger.exception(f"Batch processing hook '{hook.__name__}' failed, ignoring")

    def before_batch(self, event: TEvent, options: ProcessingOptions) -> None:
        pass

    def handle_record_success(self, record: TRecord, result: Any) -> None:
        pass

    def handle_record_failure(self, record: TRecord, error: Exception) -> None:
        if self.on_record_failure is not None:
            self.on_record_failure(record, error)

    def after_batch(self, event: TEvent, result: ProcessingResult, options: ProcessingOptions) -> None:
        if self.on_batch_complete is not None:
            self.on_batch_complete(result)

class SqsBatchProcessor(BatchProcessor[SQSEvent, SQSRecord]):

    def __init__(self, on_record_failure: Optional[RecordFailureHook] = None, on_batch_complete: Optional[BatchCompleteHook] = None):
        super().__init__(SqsRecordExtractor(), on_record_failure=on_record_failure, on_batch_complete=on_batch_complete)

class KinesisBatchProcessor(BatchProcessor[KinesisStreamEvent, KinesisStreamRecord]):

    def __init__(self, on_record_failure: Optional[RecordFailureHook] = None, on_batch_complete: Optional[BatchCompleteHook] = None):
        super().__init__(KinesisRecordExtractor(), on_record_failure=on_record_failure, on_batch_complete=on_batch_complete)

class DynamoDbStreamBatchProcessor(BatchProcessor[DynamoDBStreamEvent, DynamoDBRecord]):

    def __init__(self, on_record_failure: Optional[RecordFailureHook] = None, on_batch_complete: Optional[BatchCompleteHook] = None):
        super().__init__(DynamoDbStreamRecordExtractor(), on_record_failure=on_record_failure, on_batch_complete=on_batch_complete)

def process_partial_response(
    event: Any,
    record_handler: Any,
    processor: BatchProcessor,
    options: Optional[ProcessingOptions] = None,
) -> dict:
    """Process ``event`` and return the partial batch response for the Lambda return value."""
    result = processor.process(event, record_handler, options)
    return result.response.model_dump()
