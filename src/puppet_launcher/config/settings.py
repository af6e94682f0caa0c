import os
from pathlib import Path

from platformdirs import user_state_dir

__all__ = [
    "EVENT_LOG",
    "EVENT_LOG_REDACT",
    "LOG_DIR",
    "LOG_PATH",
    "MAX_LOG_SIZE_BYTES",
]

# Local event log mode (default: off)
# Options: off (disabled), safe (enabled with redaction), full (enabled without redaction)
_EVENT_LOG_RAW = os.getenv("PUPPET_LAUNCHER_EVENT_LOG", "off").strip().lower()
EVENT_LOG = _EVENT_LOG_RAW in ("safe", "full", "1", "true", "yes")
EVENT_LOG_REDACT = _EVENT_LOG_RAW != "full"

# Cross-platform state directory:
# - Linux: ~/.local/state/puppet-launcher
# - macOS: ~/Library/Application Support/puppet-launcher
# - Windows: %LOCALAPPDATA%\puppet-launcher
# Created lazily by observability.events when an event is written
LOG_DIR = Path(user_state_dir("puppet-launcher", appauthor=False))
LOG_PATH = LOG_DIR / "events.log"
MAX_LOG_SIZE_BYTES = 10 * 1024 * 1024
