import logging
from pathlib import Path
from typing import Any

import yaml

from ..types import ConnectionConfiguration, LaunchConfigError, Settings

logger = logging.getLogger(__name__)

# Editor settings files namespace every key, e.g. "puppet.editorService.protocol"
SETTINGS_NAMESPACE = "puppet"


def deep_update_dict(target: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            deep_update_dict(target[key], value)
        else:
            target[key] = value
    return target


def expand_dotted_keys(data: dict[str, Any], strip_namespace: bool = True) -> dict[str, Any]:
    """Turn flat editor keys ("puppet.editorService.tcp.port") into nested mappings.

    The leading namespace is dropped at the top level only. Nested mappings
    are expanded recursively and merged with any flat keys addressing the same section.
    """
    expanded: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = expand_dotted_keys(value, strip_namespace=False)
        parts = str(key).split(".")
        if strip_namespace and len(parts) > 1 and parts[0] == SETTINGS_NAMESPACE:
            parts = parts[1:]
        if strip_namespace and parts == [SETTINGS_NAMESPACE] and isinstance(value, dict):
            deep_update_dict(expanded, value)
            continue
        node: dict[str, Any] = {parts[-1]: value}
        for part in reversed(parts[:-1]):
            node = {part: node}
        deep_update_dict(expanded, node)
    return expanded


def _read_document(path: Path, label: str) -> dict[str, Any]:
    if not path.is_file():
        raise LaunchConfigError(f"{label} file does not exist: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise LaunchConfigError(f"Failed to read {label} file {path}: {exc}") from exc

    if data is None:
        logger.warning("%s file %s is empty, using defaults", label, path)
        return {}
    if not isinstance(data, dict):
        raise LaunchConfigError(f"{label} file {path} must contain a mapping at the top level")
    return expand_dotted_keys(data)


def load_settings(path: str | Path) -> Settings:
    """Load user settings from a YAML or JSON document."""
    return Settings.from_mapping(_read_document(Path(path), "Settings"))


def load_connection_configuration(path: str | Path) -> ConnectionConfiguration:
    return ConnectionConfiguration.from_mapping(_read_document(Path(path), "Connection"))


def load_launch_inputs(
    settings_path: str | Path,
    connection_path: str | Path | None = None,
) -> tuple[Settings, ConnectionConfiguration | None]:
    settings = load_settings(settings_path)
    config = load_connection_configuration(connection_path) if connection_path else None
    logger.debug(
        "Loaded settings from %s (install_type=%s, protocol=%s)",
        settings_path,
        settings.install_type.value,
        settings.editor_service.protocol.value,
    )
    return settings, config
