"""Configuration module for puppet-launcher."""

from .loader import (
    expand_dotted_keys,
    load_connection_configuration,
    load_launch_inputs,
    load_settings,
)
from .settings import (
    EVENT_LOG,
    EVENT_LOG_REDACT,
    LOG_DIR,
    LOG_PATH,
    MAX_LOG_SIZE_BYTES,
)

__all__ = [
    # Settings
    "EVENT_LOG",
    "EVENT_LOG_REDACT",
    "LOG_DIR",
    "LOG_PATH",
    "MAX_LOG_SIZE_BYTES",
    # Loaders
    "expand_dotted_keys",
    "load_connection_configuration",
    "load_launch_inputs",
    "load_settings",
]
