from .events import log_event, redact_value
from .launch_events import (
    log_launch_process_error,
    log_launch_process_start,
    log_launch_spec_built,
)

__all__ = [
    "log_event",
    "log_launch_process_error",
    "log_launch_process_start",
    "log_launch_spec_built",
    "redact_value",
]
