from collections.abc import Callable, Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from puppet_launcher.types import (
    ConnectionConfiguration,
    EditorServiceSettings,
    InstallType,
    ProtocolType,
    PuppetSettings,
    Settings,
    TcpSettings,
)


@pytest.fixture
def pdk_config() -> ConnectionConfiguration:
    return ConnectionConfiguration(
        puppet_base_dir="/opt/puppetlabs/pdk",
        pdk_ruby_dir="/opt/puppetlabs/pdk/private/ruby/2.5.7",
        pdk_bin_dir="/opt/puppetlabs/pdk/bin",
        pdk_ruby_bin_dir="/opt/puppetlabs/pdk/private/ruby/2.5.7/bin",
        pdk_ruby_lib="/opt/puppetlabs/pdk/lib",
        pdk_gem_dir="/opt/puppetlabs/pdk/share/cache/ruby/2.5.0",
        pdk_gem_ver_dir="/opt/puppetlabs/pdk/private/ruby/2.5.7/lib/ruby/gems/2.5.0",
        pdk_ruby_ver_dir="/opt/puppetlabs/pdk/private/puppet/ruby/2.5.0",
    )


@pytest.fixture
def puppet_config() -> ConnectionConfiguration:
    return ConnectionConfiguration(
        puppet_base_dir="/opt/puppetlabs",
        ssl_cert_file="/opt/puppetlabs/puppet/ssl/cert.pem",
        ssl_cert_dir="/opt/puppetlabs/puppet/ssl/certs",
        rubydir="/opt/puppetlabs/puppet",
        environment_path="/opt/puppetlabs/puppet/bin",
        rubylib="/b",
    )


def _make_settings(
    install_type: InstallType = InstallType.PDK,
    protocol: ProtocolType = ProtocolType.STDIO,
    address: str | None = None,
    port: int | None = None,
    timeout: int | float = 10,
    debug_file_path: str | None = None,
    puppet: PuppetSettings | None = None,
) -> Settings:
    return Settings(
        install_type=install_type,
        editor_service=EditorServiceSettings(
            protocol=protocol,
            tcp=TcpSettings(address=address, port=port),
            timeout=timeout,
            debug_file_path=debug_file_path,
            puppet=puppet or PuppetSettings(),
        ),
    )


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    return _make_settings


@pytest.fixture(autouse=True)
def mock_log_path(tmp_path: Path) -> Generator[Path, None, None]:
    """Auto-mock LOG_PATH and enable the event log for all tests."""
    log_file = tmp_path / "events.log"
    with (
        patch("puppet_launcher.config.settings.EVENT_LOG", True),
        patch("puppet_launcher.config.settings.LOG_PATH", log_file),
    ):
        yield log_file
