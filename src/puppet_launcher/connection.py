import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import assert_never

from puppet_launcher.paths import build_path_array, is_windows, join_path
from puppet_launcher.types import ConnectionConfiguration, InstallType

logger = logging.getLogger(__name__)

_VERSION_DIR_RE = re.compile(r"^\d+(\.\d+)*$")


def _program_files(platform: str | None, environ: Mapping[str, str | None]) -> str:
    if is_windows(platform):
        return environ.get("ProgramFiles") or environ.get("PROGRAMFILES") or "C:\\Program Files"
    return "/opt"


def default_install_dir(
    install_type: InstallType,
    platform: str | None = None,
    environ: Mapping[str, str | None] | None = None,
) -> str:
    """Return where the installer puts the given install type by default."""
    program_files = _program_files(platform, os.environ if environ is None else environ)
    windows = is_windows(platform)
    match install_type:
        case InstallType.PDK:
            if windows:
                return join_path(platform, program_files, "Puppet Labs", "DevelopmentKit")
            return join_path(platform, program_files, "puppetlabs", "pdk")
        case InstallType.PUPPET:
            if windows:
                return join_path(platform, program_files, "Puppet Labs", "Puppet")
            return join_path(platform, program_files, "puppetlabs")
        case _:
            assert_never(install_type)


def ruby_api_version(version: str) -> str:
    """Map a ruby version to its gem ABI directory name ("2.5.7" -> "2.5.0")."""
    parts = version.split(".")
    if len(parts) < 2:
        return version
    return f"{parts[0]}.{parts[1]}.0"


def _version_key(name: str) -> tuple[int, ...]:
    return tuple(int(part) for part in name.split("."))


def find_newest_ruby_version(ruby_root: str | Path) -> str | None:
    """Return the highest version-named subdirectory of ruby_root, if any."""
    root = Path(ruby_root)
    if not root.is_dir():
        logger.debug("Ruby directory does not exist: %s", root)
        return None
    versions = [
        entry.name
        for entry in root.iterdir()
        if entry.is_dir() and _VERSION_DIR_RE.match(entry.name)
    ]
    if not versions:
        return None
    return max(versions, key=_version_key)


def _resolve_pdk(base_dir: str, platform: str | None) -> ConnectionConfiguration:
    ruby_version = find_newest_ruby_version(join_path(platform, base_dir, "private", "ruby"))
    if ruby_version is None:
        logger.warning("No bundled ruby found under %s", base_dir)
        ruby_dir = ruby_bin_dir = gem_ver_dir = gem_dir = ruby_ver_dir = None
    else:
        api = ruby_api_version(ruby_version)
        ruby_dir = join_path(platform, base_dir, "private", "ruby", ruby_version)
        ruby_bin_dir = join_path(platform, ruby_dir, "bin")
        gem_ver_dir = join_path(platform, ruby_dir, "lib", "ruby", "gems", api)
        gem_dir = join_path(platform, base_dir, "share", "cache", "ruby", api)
        ruby_ver_dir = join_path(platform, base_dir, "private", "puppet", "ruby", api)

    return ConnectionConfiguration(
        puppet_base_dir=base_dir,
        pdk_bin_dir=join_path(platform, base_dir, "bin"),
        pdk_ruby_lib=join_path(platform, base_dir, "lib"),
        pdk_ruby_dir=ruby_dir,
        pdk_ruby_bin_dir=ruby_bin_dir,
        pdk_gem_dir=gem_dir,
        pdk_gem_ver_dir=gem_ver_dir,
        pdk_ruby_ver_dir=ruby_ver_dir,
    )


def _resolve_puppet(base_dir: str, platform: str | None) -> ConnectionConfiguration:
    windows = is_windows(platform)
    puppet_dir = join_path(platform, base_dir, "puppet")
    facter_dir = join_path(platform, base_dir, "facter")

    bin_dirs = [
        join_path(platform, puppet_dir, "bin"),
        join_path(platform, facter_dir, "bin"),
        join_path(platform, base_dir, "hiera", "bin"),
        join_path(platform, base_dir, "mcollective", "bin"),
        join_path(platform, base_dir, "bin"),
    ]
    if windows:
        bin_dirs.append(join_path(platform, base_dir, "sys", "ruby", "bin"))
        bin_dirs.append(join_path(platform, base_dir, "sys", "tools", "bin"))

    lib_dirs = [join_path(platform, puppet_dir, "lib"), join_path(platform, facter_dir, "lib")]
    if windows:
        # ruby on Windows expects forward slashes in RUBYLIB
        lib_dirs = [d.replace("\\", "/") for d in lib_dirs]

    return ConnectionConfiguration(
        puppet_base_dir=base_dir,
        rubydir=join_path(platform, base_dir, "sys", "ruby") if windows else puppet_dir,
        environment_path=build_path_array(bin_dirs, platform),
        rubylib=build_path_array(lib_dirs, platform),
        ssl_cert_file=join_path(platform, puppet_dir, "ssl", "cert.pem"),
        ssl_cert_dir=join_path(platform, puppet_dir, "ssl", "certs"),
    )


def resolve_connection_configuration(
    install_type: InstallType,
    install_dir: str | None = None,
    *,
    platform: str | None = None,
    environ: Mapping[str, str | None] | None = None,
) -> ConnectionConfiguration:
    """Derive install locations from the standard on-disk layout.

    Args:
        install_type: PDK or system-wide agent install.
        install_dir: Install root. Defaults to the installer's default location.
        platform: Target platform (sys.platform form). Defaults to the host.
        environ: Environment used to find ProgramFiles on Windows.

    Returns:
        The connection configuration. Paths are not checked for existence,
        except that the PDK ruby directory is listed to find its version.
    """
    base_dir = install_dir or default_install_dir(install_type, platform, environ)
    logger.debug("Resolving %s install layout under %s", install_type.value, base_dir)
    match install_type:
        case InstallType.PDK:
            return _resolve_pdk(base_dir, platform)
        case InstallType.PUPPET:
            return _resolve_puppet(base_dir, platform)
        case _:
            assert_never(install_type)


__all__ = [
    "default_install_dir",
    "find_newest_ruby_version",
    "resolve_connection_configuration",
    "ruby_api_version",
]
