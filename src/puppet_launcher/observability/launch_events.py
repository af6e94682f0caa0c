from typing import Any

from ..config import settings
from .events import log_event, redact_value


def log_launch_spec_built(
    mode: str,
    install_type: str,
    command: str,
    args: list[str],
    env: dict[str, Any],
) -> None:
    log_event(
        {
            "kind": "launch_spec_built",
            "level": "debug",
            "mode": mode,
            "install_type": install_type,
            "command": command,
            "args": args,
            "env_keys": sorted(env),
        }
    )


def log_launch_process_start(command: str, args: list[str], pid: int, latency_ms: float) -> None:
    log_event(
        {
            "kind": "launch_process_start",
            "level": "info",
            "command": command,
            "args": args,
            "pid": pid,
            "latency_ms": int(latency_ms),
        }
    )


def log_launch_process_error(command: str, error: str, error_type: str) -> None:
    log_event(
        {
            "kind": "launch_process_error",
            "level": "error",
            "command": command,
            # The sanitizer hashes "error" in redact mode; truncate only when it will not.
            "error": error if settings.EVENT_LOG_REDACT else redact_value(error, 500),
            "error_type": error_type,
        }
    )
