import ntpath
import posixpath
import sys
from collections.abc import Iterable
from types import ModuleType


def is_windows(platform: str | None = None) -> bool:
    return (platform or sys.platform) == "win32"


def path_module(platform: str | None = None) -> ModuleType:
    """Return the os.path flavour matching the target platform."""
    return ntpath if is_windows(platform) else posixpath


def path_env_separator(platform: str | None = None) -> str:
    """Separator used between entries of PATH-like environment variables."""
    return ";" if is_windows(platform) else ":"


def join_path(platform: str | None, *parts: str) -> str:
    return path_module(platform).join(*parts)


def build_path_array(items: Iterable[str | None], platform: str | None = None) -> str:
    """Join search-path entries, earlier entries taking precedence.

    None entries render as empty strings so the pre-existing value keeps its
    position even when it was unset.
    """
    return path_env_separator(platform).join("" if item is None else str(item) for item in items)


__all__ = [
    "build_path_array",
    "is_windows",
    "join_path",
    "path_env_separator",
    "path_module",
]
