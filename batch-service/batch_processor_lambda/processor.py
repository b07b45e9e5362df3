from batch_common import SqsBatchProcessor, ProcessingOptions, process_partial_response
from batch_common.config import get_config
from batch_common.observability import logger, tracer
from aws_lambda_powertools.utilities.data_classes import event_source, SQSEvent
from aws_lambda_powertools.utilities.typing import LambdaContext

from handlers import get_record_handler, log_rejected_order

_app_config = get_config()
_batch_processor = SqsBatchProcessor(on_record_failure=log_rejected_order)

@tracer.capture_lambda_handler
@logger.inject_lambda_context(clear_state=True)
@event_source(data_class=SQSEvent)
def lambda_handler(event: SQSEvent, _: LambdaContext) -> dict:
    options = ProcessingOptions.create(_app_config)
    response = process_partial_response(event, get_record_handler(_app_config), _batch_processor, options)
    logger.info(f"Returning partial batch response", failures=len(response["batchItemFailures"]))
    return response
