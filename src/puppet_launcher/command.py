import logging
from collections.abc import Sequence
from typing import assert_never

from puppet_launcher.paths import join_path
from puppet_launcher.types import ConnectionConfiguration, InstallType, ProtocolType, Settings

logger = logging.getLogger(__name__)

DEFAULT_TCP_ADDRESS = "127.0.0.1"
# The debug adapter always listens on IPv4 loopback. "localhost" can resolve
# to ::1 on one end and 127.0.0.1 on the other.
DEBUG_SERVER_ADDRESS = "127.0.0.1"


def _is_present(value: object) -> bool:
    return value is not None and value != ""


def build_executable_command(
    settings: Settings,
    config: ConnectionConfiguration,
    platform: str | None = None,
) -> str:
    """Return the ruby interpreter used to run the server.

    PDK installs ship their own ruby; a system install relies on the ruby
    found on PATH at spawn time. The path is not checked for existence.
    """
    match settings.install_type:
        case InstallType.PDK:
            if not _is_present(config.pdk_ruby_dir):
                logger.warning(
                    "PDK ruby directory is not configured, command resolves to a relative path"
                )
            return join_path(platform, config.pdk_ruby_dir or "", "bin", "ruby")
        case InstallType.PUPPET:
            return "ruby"
        case _:
            assert_never(settings.install_type)


def build_puppet_settings_argument(settings: Settings) -> str | None:
    puppet = settings.editor_service.puppet
    items: list[str] = []
    for name, value in (
        ("confdir", puppet.confdir),
        ("environment", puppet.environment),
        ("modulePath", puppet.module_path),
        ("vardir", puppet.vardir),
    ):
        if _is_present(value):
            items.append(f"--{name},{value}")
    if not items:
        return None
    return "--puppet-settings=" + ",".join(items)


def build_language_server_arguments(
    server_path: str,
    settings: Settings,
    workspace_folders: Sequence[str] | None = None,
) -> list[str]:
    """Build the argument vector for the language server.

    The order is significant to the server's own option parser.

    Args:
        server_path: Path to the language server entry point script.
        settings: User settings.
        workspace_folders: Open workspace folders; only the first one is passed on.
    """
    service = settings.editor_service
    args = [server_path]

    match service.protocol:
        case ProtocolType.STDIO:
            args.append("--stdio")
        case ProtocolType.TCP:
            address = service.tcp.address
            if not _is_present(address):
                address = DEFAULT_TCP_ADDRESS
            args.append(f"--ip={address}")
            if service.tcp.port:
                args.append(f"--port={service.tcp.port}")
        case _:
            assert_never(service.protocol)

    args.append(f"--timeout={service.timeout}")

    if workspace_folders:
        args.append(f"--local-workspace={workspace_folders[0]}")

    puppet_settings = build_puppet_settings_argument(settings)
    if puppet_settings is not None:
        args.append(puppet_settings)

    if _is_present(service.debug_file_path):
        args.append(f"--debug={service.debug_file_path}")

    logger.debug("Language server arguments: %s", args)
    return args


def build_debug_server_arguments(server_path: str) -> list[str]:
    return [server_path, f"--ip={DEBUG_SERVER_ADDRESS}"]


__all__ = [
    "DEBUG_SERVER_ADDRESS",
    "DEFAULT_TCP_ADDRESS",
    "build_debug_server_arguments",
    "build_executable_command",
    "build_language_server_arguments",
    "build_puppet_settings_argument",
]
