from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class LaunchConfigError(RuntimeError):
    """Raised when launch settings or connection configuration cannot be read."""


class InstallType(str, Enum):
    PDK = "pdk"
    PUPPET = "puppet"


class ProtocolType(str, Enum):
    STDIO = "stdio"
    TCP = "tcp"


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _section(data: Mapping[str, Any], *keys: str) -> Mapping[str, Any]:
    value = _pick(data, *keys, default=None)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise LaunchConfigError(
            f"Setting '{keys[0]}' must be a mapping, got {type(value).__name__}"
        )
    return value


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _parse_enum(enum_cls: type[Enum], raw: Any, label: str) -> Any:
    if isinstance(raw, enum_cls):
        return raw
    text = str(raw).strip().lower()
    for member in enum_cls:
        if member.value == text:
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise LaunchConfigError(f"Invalid {label} '{raw}'. Expected one of: {choices}")


@dataclass(frozen=True)
class TcpSettings:
    address: str | None = None
    """Address the language server binds to. Empty means IPv4 loopback."""

    port: int | None = None
    """TCP port. Zero or None lets the server pick one."""


@dataclass(frozen=True)
class PuppetSettings:
    """Puppet settings forwarded to the server via --puppet-settings."""

    confdir: str | None = None
    environment: str | None = None
    module_path: str | None = None
    vardir: str | None = None


@dataclass(frozen=True)
class EditorServiceSettings:
    protocol: ProtocolType = ProtocolType.STDIO
    tcp: TcpSettings = field(default_factory=TcpSettings)
    timeout: int | float = 10
    """Seconds the server waits for a client before shutting down."""

    debug_file_path: str | None = None
    puppet: PuppetSettings = field(default_factory=PuppetSettings)

    def __post_init__(self) -> None:
        object.__setattr__(self, "protocol", _parse_enum(ProtocolType, self.protocol, "protocol"))


@dataclass(frozen=True)
class Settings:
    install_type: InstallType = InstallType.PDK
    editor_service: EditorServiceSettings = field(default_factory=EditorServiceSettings)

    def __post_init__(self) -> None:
        # Plain strings ("pdk", "puppet") are accepted and stored as the enum.
        object.__setattr__(
            self, "install_type", _parse_enum(InstallType, self.install_type, "installType")
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        """Build settings from editor-style camelCase or snake_case keys.

        Raises:
            LaunchConfigError: An enum value or section has the wrong shape.
        """
        service = _section(data, "editorService", "editor_service")
        tcp = _section(service, "tcp")
        puppet = _section(service, "puppet")

        raw_port = _pick(tcp, "port")
        try:
            port = int(raw_port) if raw_port not in (None, "") else None
        except (TypeError, ValueError) as exc:
            raise LaunchConfigError(f"Invalid tcp port '{raw_port}'") from exc

        raw_timeout = _pick(service, "timeout", default=10)
        try:
            timeout: int | float = float(raw_timeout)
        except (TypeError, ValueError) as exc:
            raise LaunchConfigError(f"Invalid timeout '{raw_timeout}'") from exc
        if timeout.is_integer():
            timeout = int(timeout)

        return cls(
            install_type=_parse_enum(
                InstallType,
                _pick(data, "installType", "install_type", default="pdk"),
                "installType",
            ),
            editor_service=EditorServiceSettings(
                protocol=_parse_enum(
                    ProtocolType, _pick(service, "protocol", default="stdio"), "protocol"
                ),
                tcp=TcpSettings(address=_optional_str(_pick(tcp, "address")), port=port),
                timeout=timeout,
                debug_file_path=_optional_str(_pick(service, "debugFilePath", "debug_file_path")),
                puppet=PuppetSettings(
                    confdir=_optional_str(_pick(puppet, "confdir")),
                    environment=_optional_str(_pick(puppet, "environment")),
                    module_path=_optional_str(_pick(puppet, "modulePath", "module_path")),
                    vardir=_optional_str(_pick(puppet, "vardir")),
                ),
            ),
        )


# (field name, editor key) pairs understood by ConnectionConfiguration.from_mapping
_CONNECTION_KEYS: tuple[tuple[str, str], ...] = (
    ("puppet_base_dir", "puppetBaseDir"),
    ("pdk_ruby_dir", "pdkRubyDir"),
    ("pdk_bin_dir", "pdkBinDir"),
    ("pdk_ruby_bin_dir", "pdkRubyBinDir"),
    ("pdk_ruby_lib", "pdkRubyLib"),
    ("pdk_gem_dir", "pdkGemDir"),
    ("pdk_gem_ver_dir", "pdkGemVerDir"),
    ("pdk_ruby_ver_dir", "pdkRubyVerDir"),
    ("ssl_cert_file", "sslCertFile"),
    ("ssl_cert_dir", "sslCertDir"),
    ("rubydir", "rubydir"),
    ("environment_path", "environmentPath"),
    ("rubylib", "rubylib"),
)


@dataclass(frozen=True)
class ConnectionConfiguration:
    """Resolved filesystem locations for running the server under an install type.

    PDK fields are used when the install type is PDK, the SSL/rubydir/
    environment_path/rubylib fields for a system-wide agent install.
    """

    puppet_base_dir: str | None = None
    pdk_ruby_dir: str | None = None
    pdk_bin_dir: str | None = None
    pdk_ruby_bin_dir: str | None = None
    pdk_ruby_lib: str | None = None
    pdk_gem_dir: str | None = None
    pdk_gem_ver_dir: str | None = None
    pdk_ruby_ver_dir: str | None = None
    ssl_cert_file: str | None = None
    ssl_cert_dir: str | None = None
    rubydir: str | None = None
    environment_path: str | None = None
    rubylib: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConnectionConfiguration":
        values = {
            name: _optional_str(_pick(data, editor_key, name))
            for name, editor_key in _CONNECTION_KEYS
        }
        return cls(**values)


@dataclass
class LaunchOptions:
    env: dict[str, str | None] = field(default_factory=dict)
    stdio: str = "pipe"
    shell: bool | None = None


@dataclass
class LaunchSpec:
    """A child process ready to hand to a subprocess spawn facility."""

    command: str
    args: list[str]
    options: LaunchOptions = field(default_factory=LaunchOptions)

    def to_dict(self, include_env: bool = True) -> dict[str, Any]:
        options: dict[str, Any] = {"stdio": self.options.stdio}
        if self.options.shell is not None:
            options["shell"] = self.options.shell
        if include_env:
            options["env"] = dict(self.options.env)
        return {"command": self.command, "args": list(self.args), "options": options}
