import logging
import re
from collections.abc import Mapping, MutableMapping
from typing import assert_never

from puppet_launcher.paths import build_path_array, is_windows
from puppet_launcher.types import ConnectionConfiguration, InstallType, LaunchSpec, Settings

logger = logging.getLogger(__name__)

_PATH_KEY_RE = re.compile(r"^PATH$", re.IGNORECASE)

Environment = MutableMapping[str, str | None]


def shallow_clone_environment(environ: Mapping[str, str | None]) -> dict[str, str | None]:
    return {key: value for key, value in environ.items() if isinstance(key, str)}


def remove_empty_elements(env: Environment) -> None:
    """Drop keys whose value is None.

    subprocess rejects None values in env, and an explicit entry would not
    mean "unset" anyway.
    """
    for key in [k for k, v in env.items() if v is None]:
        del env[key]


def clean_environment_path(env: Environment) -> None:
    """Make PATH the single canonical search-path key and make sure RUBYLIB exists.

    Windows commonly spells the variable "Path". When no usable PATH key is
    present, every case variant is cleared and the last one (in insertion
    order) donates its value to PATH. When PATH already exists, other case
    variants are cleared so only one search path reaches the child.
    """
    variants = [key for key in env if key != "PATH" and _PATH_KEY_RE.match(key)]

    if env.get("PATH") is None:
        env_path = ""
        for key in variants:
            value = env[key]
            if value is not None:
                env_path = value
        if variants:
            logger.debug("Normalizing %s into PATH", ", ".join(variants))
        env["PATH"] = env_path

    for key in variants:
        env[key] = None

    if env.get("RUBYLIB") is None:
        env["RUBYLIB"] = ""


def build_puppet_environment(
    env: Environment, config: ConnectionConfiguration, platform: str | None = None
) -> None:
    env["RUBYOPT"] = "rubygems"
    env["SSL_CERT_FILE"] = config.ssl_cert_file
    env["SSL_CERT_DIR"] = config.ssl_cert_dir
    env["RUBY_DIR"] = config.rubydir
    env["PATH"] = build_path_array([config.environment_path, env.get("PATH")], platform)
    env["RUBYLIB"] = build_path_array([config.rubylib, env.get("RUBYLIB")], platform)


def build_pdk_environment(
    env: Environment, config: ConnectionConfiguration, platform: str | None = None
) -> None:
    env["RUBYOPT"] = "rubygems"
    env["DEVKIT_BASEDIR"] = config.puppet_base_dir
    env["RUBY_DIR"] = config.pdk_ruby_dir
    env["GEM_HOME"] = config.pdk_gem_dir
    env["GEM_PATH"] = build_path_array(
        [config.pdk_gem_ver_dir, config.pdk_gem_dir, config.pdk_ruby_ver_dir], platform
    )
    env["RUBYLIB"] = build_path_array([config.pdk_ruby_lib, env.get("RUBYLIB")], platform)
    env["PATH"] = build_path_array(
        [config.pdk_bin_dir, config.pdk_ruby_bin_dir, env.get("PATH")], platform
    )


def apply_ruby_env_from_configuration(
    spec: LaunchSpec,
    settings: Settings,
    config: ConnectionConfiguration,
    environ: Mapping[str, str | None],
    platform: str | None = None,
) -> LaunchSpec:
    """Fill in spawn options and the ruby environment for a launch spec.

    Args:
        spec: Launch spec whose options are replaced in place.
        settings: User settings; selects the install type.
        config: Resolved install locations.
        environ: Snapshot of the host environment. It is copied, never modified.
        platform: Target platform in sys.platform form. Defaults to the host.

    Returns:
        The same launch spec.
    """
    options = spec.options
    options.env = shallow_clone_environment(environ)
    options.stdio = "pipe"
    # Non-Windows hosts may rely on shell-level PATH resolution of the command.
    options.shell = None if is_windows(platform) else True

    clean_environment_path(options.env)

    match settings.install_type:
        case InstallType.PDK:
            build_pdk_environment(options.env, config, platform)
        case InstallType.PUPPET:
            build_puppet_environment(options.env, config, platform)
        case _:
            assert_never(settings.install_type)

    remove_empty_elements(options.env)
    return spec


__all__ = [
    "apply_ruby_env_from_configuration",
    "build_pdk_environment",
    "build_puppet_environment",
    "clean_environment_path",
    "remove_empty_elements",
    "shallow_clone_environment",
]
