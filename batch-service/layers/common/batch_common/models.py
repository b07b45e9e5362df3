from __future__ import annotations

import threading

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_serializer
from typing import Any, List, Optional, Sequence
from enum import Enum

from .config import AppConfig
from .exceptions import RecordError
from .policy import ErrorHandlingPolicy

class FailureKind(str, Enum):
    UNPROCESSED = "unprocessed" # Never attempted, the batch was circuit-broken or cancelled first
    HANDLER_FAILED = "handler_failed" # The record handler raised
    CIRCUIT_BROKEN = "circuit_broken" # The handler failure that tripped the circuit breaker

# Record outcomes
class RecordSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)
    record: Any
    record_id: str
    result: Any = None

class RecordFailure(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
    record: Any
    record_id: str
    kind: FailureKind
    error: RecordError

    @property
    def cause(self) -> Optional[BaseException]:
        """The exception raised by the record handler, ``None`` for unprocessed records."""
        return self.error.__cause__

    @classmethod
    def create(cls, record_id: str, record: Any, kind: FailureKind, error: RecordError) -> "RecordFailure":
        return cls(record=record, record_id=record_id, kind=kind, error=error)

# Lambda response models
class BatchItemFailure(BaseModel):
    model_config = ConfigDict(frozen=True)
    item_identifier: str

    @model_serializer
    def serialize_model(self) -> dict:
        return {"itemIdentifier": self.item_identifier}

class PartialFailureResponse(BaseModel):
    """Partial batch response understood by SQS, Kinesis and DynamoDB event source mappings.

    Only the listed records are made available again for processing; an empty list
    tells the platform the whole batch succeeded.
    """
    model_config = ConfigDict(frozen=True)
    batch_item_failures: tuple[BatchItemFailure, ...] = Field(default_factory=tuple)

    @model_serializer
    def serialize_model(self) -> dict:
        return {
            "batchItemFailures": [failure.serialize_model() for failure in self.batch_item_failures]
        }

    @property
    def failed_record_ids(self) -> List[str]:
        return [failure.item_identifier for failure in self.batch_item_failures]

    @classmethod
    def create(cls, record_ids: Sequence[str]) -> "PartialFailureResponse":
        return cls(batch_item_failures=tuple(BatchItemFailure(item_identifier=record_id) for record_id in record_ids))

# Processing models
class ProcessingOptions(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
    error_handling_policy: ErrorHandlingPolicy = ErrorHandlingPolicy.DERIVE_FROM_EVENT
    parallel_enabled: bool = False
    max_workers: Optional[int] = Field(default=None, description="Worker pool size when parallel_enabled is set")
    throw_on_full_batch_failure: bool = Field(default=False, description="Also raise under CONTINUE_ON_FAILURE when every record failed")
    cancellation_event: Optional[threading.Event] = Field(default=None, description="When set, no further records are dispatched")

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v):
        if v is not None and v <= 0:
            raise ValueError("max_workers must be a positive integer")
        return v

    @property
    def is_cancelled(self) -> bool:
        return self.cancellation_event is not None and self.cancellation_event.is_set()

    @classmethod
    def create(cls, app_config: AppConfig, **overrides: Any) -> "ProcessingOptions":
        values = {
            "error_handling_policy": app_config.powertools_batch_error_handling_policy,
            "parallel_enabled": app_config.powertools_batch_parallel_enabled,
            "max_workers": app_config.max_workers,
            "throw_on_full_batch_failure": app_config.powertools_batch_throw_on_full_batch_failure,
        }
        values.update(overrides)
        return cls(**values)

class ProcessingResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)
    error_handling_policy: ErrorHandlingPolicy
    batch_records: List[Any] = Field(default_factory=list)
    success_records: List[RecordSuccess] = Field(default_factory=list)
    failure_records: List[RecordFailure] = Field(default_factory=list)
    response: PartialFailureResponse = Field(default_factory=PartialFailureResponse)

    @property
    def failed_record_ids(self) -> List[str]:
        return self.response.failed_record_ids

    @property
    def has_failures(self) -> bool:
        return len(self.failure_records) > 0

    def failures_of_kind(self, kind: FailureKind) -> List[RecordFailure]:
        return [failure for failure in self.failure_records if failure.kind == kind]
