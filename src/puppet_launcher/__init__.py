__version__ = "0.1.0.dev0"

from .command import (
    build_debug_server_arguments,
    build_executable_command,
    build_language_server_arguments,
)
from .connection import resolve_connection_configuration
from .launch import (
    get_debug_server_ruby_env_from_configuration,
    get_language_server_ruby_env_from_configuration,
)
from .types import (
    ConnectionConfiguration,
    EditorServiceSettings,
    InstallType,
    LaunchConfigError,
    LaunchOptions,
    LaunchSpec,
    ProtocolType,
    PuppetSettings,
    Settings,
    TcpSettings,
)

__all__ = [
    "__version__",
    "ConnectionConfiguration",
    "EditorServiceSettings",
    "InstallType",
    "LaunchConfigError",
    "LaunchOptions",
    "LaunchSpec",
    "ProtocolType",
    "PuppetSettings",
    "Settings",
    "TcpSettings",
    "build_debug_server_arguments",
    "build_executable_command",
    "build_language_server_arguments",
    "get_debug_server_ruby_env_from_configuration",
    "get_language_server_ruby_env_from_configuration",
    "resolve_connection_configuration",
]
