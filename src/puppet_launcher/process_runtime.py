import logging
import shlex
import subprocess  # nosec B404 - spawning the language server is the point
import time

import psutil

from puppet_launcher.observability import log_launch_process_error, log_launch_process_start
from puppet_launcher.types import LaunchSpec

logger = logging.getLogger(__name__)

_STDIO_MODES: dict[str, int | None] = {
    "pipe": subprocess.PIPE,
    "inherit": None,
}


def build_popen_command(spec: LaunchSpec) -> str | list[str]:
    """Return the command in the form Popen expects for the spec's shell mode.

    With shell=True on POSIX only the first list element is run by the shell,
    so the whole vector is quoted into one command line.
    """
    argv = [spec.command, *spec.args]
    if spec.options.shell:
        return shlex.join(argv)
    return argv


def start_launch_process(spec: LaunchSpec, cwd: str | None = None) -> subprocess.Popen[bytes]:
    """Spawn the process described by a launch spec.

    Raises:
        ValueError: The spec's stdio mode is unknown.
        OSError: The command could not be executed.
    """
    try:
        stdio = _STDIO_MODES[spec.options.stdio]
    except KeyError:
        raise ValueError(f"Unsupported stdio mode: {spec.options.stdio!r}") from None

    command = build_popen_command(spec)
    logger.debug("Starting process: %s", command if isinstance(command, str) else " ".join(command))
    started = time.perf_counter()
    try:
        process = subprocess.Popen(  # nosec B602 B603 - command built from trusted settings
            command,
            stdin=stdio,
            stdout=stdio,
            stderr=stdio,
            cwd=cwd,
            env=dict(spec.options.env),
            shell=bool(spec.options.shell),
        )
    except OSError as exc:
        log_launch_process_error(spec.command, str(exc), type(exc).__name__)
        raise

    log_launch_process_start(
        spec.command, spec.args, process.pid, (time.perf_counter() - started) * 1000
    )
    return process


def kill_process_tree(pid: int) -> None:
    try:
        parent = psutil.Process(pid)
    except psutil.Error:
        return

    for child in parent.children(recursive=True):
        try:
            child.kill()
        except psutil.Error:
            pass
    try:
        parent.kill()
    except psutil.Error:
        pass


def close_process_streams(process: subprocess.Popen[bytes]) -> None:
    for stream in (process.stdin, process.stdout, process.stderr):
        try:
            if stream:
                stream.close()
        except OSError:
            pass


__all__ = [
    "build_popen_command",
    "close_process_streams",
    "kill_process_tree",
    "start_launch_process",
]
