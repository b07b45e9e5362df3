from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, TypeVar, Union

TRecord = TypeVar("TRecord")

class RecordHandler(ABC, Generic[TRecord]):
    """Business logic applied to every record of a batch.

    ``handle`` either returns (the value ends up in ``RecordSuccess.result``) or
    raises, which marks the record as failed.
    """

    @abstractmethod
    def handle(self, record: TRecord) -> Any:
        ...

class CallableRecordHandler(RecordHandler[TRecord]):

    def __init__(self, fn: Callable[[TRecord], Any]):
        self.fn = fn

    def handle(self, record: TRecord) -> Any:
        return self.fn(record)

    def __repr__(self):
        return f"CallableRecordHandler({getattr(self.fn, '__name__', self.fn)!r})"

def as_record_handler(handler: Union[RecordHandler[TRecord], Callable[[TRecord], Any]]) -> RecordHandler[TRecord]:
    if isinstance(handler, RecordHandler):
        return handler
    if callable(handler):
        return CallableRecordHandler(handler)
    raise TypeError(f"Record handler must be a RecordHandler or a callable, got {type(handler).__name__}")
