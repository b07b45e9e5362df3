from aws_lambda_powertools import Logger, Tracer
from aws_xray_sdk.core import patch_all
from .config import get_config

# Apply X-Ray patching early at module import time
patch_all()

# Get config once at module import time
_config = get_config()

# Shared logger and tracer, used by the batch engine and the functions built on it
logger = Logger(
    service=_config.powertools_service_name,
    level=_config.log_level
)

tracer = Tracer(
    service=_config.powertools_service_name
)

def log_batch_summary(result, duration_ms: float) -> None:
    """Emit one structured line describing a finished batch."""
    kinds = {}
    for failure in result.failure_records:
        kinds[failure.kind.value] = kinds.get(failure.kind.value, 0) + 1
    log = logger.warning if result.failure_records else logger.info
    log(
        f"Processed batch of {len(result.batch_records)} records",
        policy=result.error_handling_policy.value,
        succeeded=len(result.success_records),
        failed=len(result.failure_records),
        failure_kinds=kinds,
        failed_record_ids=result.failed_record_ids,
        duration_ms=round(duration_ms, 2),
    )
