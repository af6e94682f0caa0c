import json
import logging
import os
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from puppet_launcher.config import load_launch_inputs
from puppet_launcher.connection import resolve_connection_configuration
from puppet_launcher.launch import (
    get_debug_server_ruby_env_from_configuration,
    get_language_server_ruby_env_from_configuration,
)
from puppet_launcher.process_runtime import (
    close_process_streams,
    kill_process_tree,
    start_launch_process,
)
from puppet_launcher.types import ConnectionConfiguration, LaunchConfigError, LaunchSpec, Settings

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    log_level_str = os.getenv("PUPPET_LAUNCHER_LOG_LEVEL", "INFO").upper()
    log_level = logging.DEBUG if verbose else getattr(logging, log_level_str, logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )


def _load_inputs(
    settings_path: str,
    connection_path: str | None,
    install_dir: str | None,
) -> tuple[Settings, ConnectionConfiguration]:
    try:
        settings, config = load_launch_inputs(settings_path, connection_path)
    except LaunchConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    if config is None:
        config = resolve_connection_configuration(settings.install_type, install_dir)
    return settings, config


def _emit(spec: LaunchSpec, include_env: bool, execute: bool, cwd: str | None) -> None:
    if not execute:
        click.echo(json.dumps(spec.to_dict(include_env=include_env), indent=2))
        return

    # Attach the child to our own terminal instead of pipes
    spec.options.stdio = "inherit"
    try:
        process = start_launch_process(spec, cwd=cwd)
    except OSError as exc:
        raise click.ClickException(f"Failed to start {spec.command}: {exc}") from exc

    try:
        returncode = process.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping process %s", process.pid)
        kill_process_tree(process.pid)
        returncode = process.wait()
    finally:
        close_process_streams(process)
    sys.exit(returncode)


_settings_option = click.option(
    "--settings",
    "settings_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="YAML or JSON file with puppet.* editor settings",
)
_connection_option = click.option(
    "--connection",
    "connection_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="YAML or JSON file with resolved install locations (default: derive from --install-dir)",
)
_install_dir_option = click.option(
    "--install-dir",
    default=None,
    help="PDK or Puppet agent install root (default: the installer's default location)",
)
_env_option = click.option(
    "--env/--no-env",
    "include_env",
    default=True,
    show_default=True,
    help="Include the environment block in the printed launch spec",
)
_exec_option = click.option(
    "--exec", "execute", is_flag=True, help="Start the process instead of printing the launch spec"
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Build launch specs for the Puppet language server and debug server."""
    # Load .env from current directory or parents
    load_dotenv()
    _configure_logging(verbose)


@cli.command("language-server")
@click.argument("server_path")
@_settings_option
@_connection_option
@_install_dir_option
@click.option(
    "--workspace",
    "workspace_folders",
    multiple=True,
    help="Workspace folder; may be repeated, the first one is passed to the server",
)
@_env_option
@_exec_option
def language_server(
    server_path: str,
    settings_path: str,
    connection_path: str | None,
    install_dir: str | None,
    workspace_folders: tuple[str, ...],
    include_env: bool,
    execute: bool,
) -> None:
    """Print or run the language server launch spec."""
    settings, config = _load_inputs(settings_path, connection_path, install_dir)
    folders = [str(Path(folder).resolve()) for folder in workspace_folders]
    spec = get_language_server_ruby_env_from_configuration(
        server_path, settings, config, workspace_folders=folders
    )
    _emit(spec, include_env, execute, folders[0] if folders else None)


@cli.command("debug-server")
@click.argument("server_path")
@_settings_option
@_connection_option
@_install_dir_option
@_env_option
@_exec_option
def debug_server(
    server_path: str,
    settings_path: str,
    connection_path: str | None,
    install_dir: str | None,
    include_env: bool,
    execute: bool,
) -> None:
    """Print or run the debug server launch spec."""
    settings, config = _load_inputs(settings_path, connection_path, install_dir)
    spec = get_debug_server_ruby_env_from_configuration(server_path, settings, config)
    _emit(spec, include_env, execute, None)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
