import re

from enum import Enum
from typing import Optional, Union

class ErrorHandlingPolicy(str, Enum):
    DERIVE_FROM_EVENT = "derive_from_event" # Use the default of the event source
    CONTINUE_ON_FAILURE = "continue_on_failure" # Attempt every record regardless of earlier failures
    STOP_ON_FIRST_FAILURE = "stop_on_first_failure" # Circuit-break the batch on the first failure

# Names used by other Powertools runtimes for the same settings
_ALIASES = {
    "derivefromevent": ErrorHandlingPolicy.DERIVE_FROM_EVENT,
    "continueonbatchitemfailure": ErrorHandlingPolicy.CONTINUE_ON_FAILURE,
    "continueonfailure": ErrorHandlingPolicy.CONTINUE_ON_FAILURE,
    "stoponfirstbatchitemfailure": ErrorHandlingPolicy.STOP_ON_FIRST_FAILURE,
    "stoponfirstfailure": ErrorHandlingPolicy.STOP_ON_FIRST_FAILURE,
}

def parse_error_handling_policy(value: Union[str, ErrorHandlingPolicy]) -> ErrorHandlingPolicy:
    """Parse a policy from its enum value, snake_case or PascalCase name."""
    if isinstance(value, ErrorHandlingPolicy):
        return value
    key = re.sub(r"[^a-z]", "", str(value).lower())
    policy = _ALIASES.get(key)
    if policy is None:
        raise ValueError(f"Unknown error handling policy: {value}. Supported policies: {[p.value for p in ErrorHandlingPolicy]}")
    return policy

def resolve_error_handling_policy(
    requested: Optional[ErrorHandlingPolicy],
    event_default: ErrorHandlingPolicy,
) -> ErrorHandlingPolicy:
    """Return the policy to apply for one batch.

    An explicit CONTINUE/STOP request always wins; ``None`` or DERIVE_FROM_EVENT
    falls back to the default of the event source.
    """
    if requested is None or requested == ErrorHandlingPolicy.DERIVE_FROM_EVENT:
        if event_default == ErrorHandlingPolicy.DERIVE_FROM_EVENT:
            raise ValueError("Event source default policy must be CONTINUE_ON_FAILURE or STOP_ON_FIRST_FAILURE")
        return event_default
    return requested
