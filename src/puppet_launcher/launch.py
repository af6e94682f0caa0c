"""Assemble executable launch specs for the Puppet language and debug servers."""

import logging
import os
from collections.abc import Mapping, Sequence

from puppet_launcher.command import (
    build_debug_server_arguments,
    build_executable_command,
    build_language_server_arguments,
)
from puppet_launcher.environment import apply_ruby_env_from_configuration
from puppet_launcher.observability import log_launch_spec_built
from puppet_launcher.types import ConnectionConfiguration, LaunchSpec, Settings

logger = logging.getLogger(__name__)


def _build(
    mode: str,
    args: list[str],
    settings: Settings,
    config: ConnectionConfiguration,
    environ: Mapping[str, str | None] | None,
    platform: str | None,
) -> LaunchSpec:
    spec = LaunchSpec(
        command=build_executable_command(settings, config, platform),
        args=args,
    )
    # os.environ is read once here and copied by the environment composer
    apply_ruby_env_from_configuration(
        spec,
        settings,
        config,
        os.environ if environ is None else environ,
        platform,
    )
    logger.debug(
        "Built %s launch spec: command=%s install_type=%s",
        mode,
        spec.command,
        settings.install_type.value,
    )
    log_launch_spec_built(
        mode=mode,
        install_type=settings.install_type.value,
        command=spec.command,
        args=spec.args,
        env=spec.options.env,
    )
    return spec


def get_language_server_ruby_env_from_configuration(
    language_server_path: str,
    settings: Settings,
    config: ConnectionConfiguration,
    *,
    workspace_folders: Sequence[str] | None = None,
    environ: Mapping[str, str | None] | None = None,
    platform: str | None = None,
) -> LaunchSpec:
    """Build the launch spec for the language server.

    Args:
        language_server_path: Path to the language server entry point.
        settings: User settings.
        config: Install locations for settings.install_type.
        workspace_folders: Open workspace folders, first one is forwarded.
        environ: Host environment snapshot. Defaults to os.environ.
        platform: Target platform (sys.platform form). Defaults to the host.
    """
    args = build_language_server_arguments(language_server_path, settings, workspace_folders)
    return _build("language_server", args, settings, config, environ, platform)


def get_debug_server_ruby_env_from_configuration(
    debug_server_path: str,
    settings: Settings,
    config: ConnectionConfiguration,
    *,
    environ: Mapping[str, str | None] | None = None,
    platform: str | None = None,
) -> LaunchSpec:
    """Build the launch spec for the debug server (always TCP on IPv4 loopback)."""
    args = build_debug_server_arguments(debug_server_path)
    return _build("debug_server", args, settings, config, environ, platform)


__all__ = [
    "get_debug_server_ruby_env_from_configuration",
    "get_language_server_ruby_env_from_configuration",
]
