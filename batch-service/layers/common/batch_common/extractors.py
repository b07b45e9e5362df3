from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, Tuple, TypeVar

from aws_lambda_powertools.utilities.data_classes import DynamoDBStreamEvent, KinesisStreamEvent, SQSEvent
from aws_lambda_powertools.utilities.data_classes.dynamo_db_stream_event import DynamoDBRecord
from aws_lambda_powertools.utilities.data_classes.kinesis_stream_event import KinesisStreamRecord
from aws_lambda_powertools.utilities.data_classes.sqs_event import SQSRecord

from .exceptions import BatchEventError, RecordIdError
from .observability import logger
from .policy import ErrorHandlingPolicy

TEvent = TypeVar("TEvent")
TRecord = TypeVar("TRecord")

class RecordExtractor(ABC, Generic[TEvent, TRecord]):
    """Turns one source-specific batch event into its ordered ``(record_id, record)`` pairs."""

    def to_event(self, event: Any) -> TEvent:
        return event

    @abstractmethod
    def get_records(self, event: TEvent) -> List[TRecord]:
        ...

    @abstractmethod
    def get_record_id(self, record: TRecord) -> Optional[str]:
        ...

    @abstractmethod
    def default_error_handling_policy(self, event: TEvent) -> ErrorHandlingPolicy:
        ...

    def extract(self, event: TEvent) -> List[Tuple[str, TRecord]]:
        pairs: List[Tuple[str, TRecord]] = []
        seen = set()
        try:
            records = self.get_records(event)
        except (KeyError, AttributeError, TypeError) as e:
            raise BatchEventError(f"Unable to read the records of batch event: {type(e).__name__}: {e}") from e
        for position, record in enumerate(records):
            try:
                record_id = self.get_record_id(record)
            except (KeyError, AttributeError, TypeError) as e:
                raise RecordIdError(f"Unable to read the id of batch record at position {position}") from e
            if not isinstance(record_id, str) or not record_id:
                raise RecordIdError(f"Batch record at position {position} has no record id: {record_id!r}")
            if record_id in seen:
                raise RecordIdError(f"Duplicate record id in batch: '{record_id}'")
            seen.add(record_id)
            pairs.append((record_id, record))
        logger.debug(f"Extracted {len(pairs)} records", extractor=type(self).__name__)
        return pairs

class SqsRecordExtractor(RecordExtractor[SQSEvent, SQSRecord]):

    def to_event(self, event: Any) -> SQSEvent:
        return event if isinstance(event, SQSEvent) else SQSEvent(event)

    def get_records(self, event: SQSEvent) -> List[SQSRecord]:
        # event.records is a generator
        return list(event.records)

    def get_record_id(self, record: SQSRecord) -> Optional[str]:
        return record.message_id

    def default_error_handling_policy(self, event: SQSEvent) -> ErrorHandlingPolicy:
        # FIFO queues guarantee ordering, so a failure must stop the rest of the batch
        first = next(iter(event.records), None)
        source_arn = first.get("eventSourceARN") if first is not None else None
        if source_arn and source_arn.lower().endswith(".fifo"):
            return ErrorHandlingPolicy.STOP_ON_FIRST_FAILURE
        return ErrorHandlingPolicy.CONTINUE_ON_FAILURE

class KinesisRecordExtractor(RecordExtractor[KinesisStreamEvent, KinesisStreamRecord]):

    def to_event(self, event: Any) -> KinesisStreamEvent:
        return event if isinstance(event, KinesisStreamEvent) else KinesisStreamEvent(event)

    def get_records(self, event: KinesisStreamEvent) -> List[KinesisStreamRecord]:
        return list(event.records)

    def get_record_id(self, record: KinesisStreamRecord) -> Optional[str]:
        return record.kinesis.sequence_number

    def default_error_handling_policy(self, event: KinesisStreamEvent) -> ErrorHandlingPolicy:
        return ErrorHandlingPolicy.STOP_ON_FIRST_FAILURE

class DynamoDbStreamRecordExtractor(RecordExtractor[DynamoDBStreamEvent, DynamoDBRecord]):

    def to_event(self, event: Any) -> DynamoDBStreamEvent:
        return event if isinstance(event, DynamoDBStreamEvent) else DynamoDBStreamEvent(event)

    def get_records(self, event: DynamoDBStreamEvent) -> List[DynamoDBRecord]:
        return list(event.records)

    def get_record_id(self, record: DynamoDBRecord) -> Optional[str]:
        stream_record = record.dynamodb
        if stream_record is None:
            return None
        return stream_record.sequence_number

    def default_error_handling_policy(self, event: DynamoDBStreamEvent) -> ErrorHandlingPolicy:
        return ErrorHandlingPolicy.STOP_ON_FIRST_FAILURE
