"""
Batch record processing engine shared by the batch processing Lambda functions.
"""

__version__ = "0.1.0"
__all__ = [
    "get_config", "AppConfig", "logger", "tracer",
    "ErrorHandlingPolicy", "FailureKind",
    "ProcessingOptions", "ProcessingResult", "PartialFailureResponse", "RecordSuccess", "RecordFailure",
    "RecordHandler", "RecordExtractor", "SqsRecordExtractor", "KinesisRecordExtractor", "DynamoDbStreamRecordExtractor",
    "BatchProcessor", "SqsBatchProcessor", "KinesisBatchProcessor", "DynamoDbStreamBatchProcessor",
    "process_partial_response",
    "BatchError", "BatchEventError", "BatchProcessingError", "RecordError", "RecordIdError",
    "UnprocessedRecordError", "HandlerFailedError", "CircuitBreakerError",
]

# Make key components available at package level
from .config import get_config, AppConfig
from .observability import logger, tracer
from .policy import ErrorHandlingPolicy
from .exceptions import (
    BatchError,
    BatchEventError,
    BatchProcessingError,
    RecordError,
    RecordIdError,
    UnprocessedRecordError,
    HandlerFailedError,
    CircuitBreakerError
)
from .models import (
    FailureKind,
    ProcessingOptions,
    ProcessingResult,
    PartialFailureResponse,
    RecordSuccess,
    RecordFailure
)
from .handlers import RecordHandler
from .extractors import (
    RecordExtractor,
    SqsRecordExtractor,
    KinesisRecordExtractor,
    DynamoDbStreamRecordExtractor
)
from .processor import (
    BatchProcessor,
    SqsBatchProcessor,
    KinesisBatchProcessor,
    DynamoDbStreamBatchProcessor,
    process_partial_response
)
