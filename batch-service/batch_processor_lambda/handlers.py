from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from batch_common import RecordHandler
from batch_common.config import AppConfig
from batch_common.observability import logger, tracer
from aws_lambda_powertools.utilities.data_classes.sqs_event import SQSRecord

class OrderMessage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    order_id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)

class OrderRecordHandler(RecordHandler[SQSRecord]):
    def __init__(self, app_config: AppConfig):
        self.service_name = app_config.powertools_service_name

    @tracer.capture_method
    def handle(self, record: SQSRecord) -> dict:
        logger.info(f"Processing order message", message_id=record.message_id)
        # Invalid bodies raise a ValidationError, which marks the message as failed
        order = OrderMessage.model_validate_json(record.body)
        total = round(order.quantity * order.unit_price, 2)
        logger.info(f"Order accepted", order_id=order.order_id, customer_id=order.customer_id, total=total)
        return {"order_id": order.order_id, "status": "accepted", "total": total}

def log_rejected_order(record: SQSRecord, error: Exception) -> None:
    logger.error(f"Order message rejected", message_id=record.message_id, error=str(error))

_record_handler: Optional[OrderRecordHandler] = None

def get_record_handler(app_config: AppConfig) -> OrderRecordHandler:
    global _record_handler
    if _record_handler is None:
        _record_handler = OrderRecordHandler(app_config=app_config)
    return _record_handler
