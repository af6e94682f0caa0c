import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from puppet_launcher.cli import _configure_logging, cli


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "puppet.installType": "puppet",
                "puppet.editorService.protocol": "tcp",
                "puppet.editorService.tcp.port": 8081,
                "puppet.editorService.puppet.vardir": "/v",
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def connection_file(tmp_path: Path) -> Path:
    path = tmp_path / "connection.yaml"
    path.write_text(
        "environmentPath: /opt/puppetlabs/puppet/bin\n"
        "rubylib: /opt/puppetlabs/puppet/lib\n"
        "sslCertFile: /opt/puppetlabs/puppet/ssl/cert.pem\n",
        encoding="utf-8",
    )
    return path


class TestLanguageServerCommand:
    def test_prints_launch_spec(
        self, tmp_path: Path, settings_file: Path, connection_file: Path
    ) -> None:
        workspace = tmp_path / "control-repo"
        workspace.mkdir()
        result = CliRunner().invoke(
            cli,
            [
                "language-server",
                "/ext/puppet-languageserver",
                "--settings",
                str(settings_file),
                "--connection",
                str(connection_file),
                "--workspace",
                str(workspace),
            ],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["command"] == "ruby"
        assert data["args"] == [
            "/ext/puppet-languageserver",
            "--ip=127.0.0.1",
            "--port=8081",
            "--timeout=10",
            f"--local-workspace={workspace.resolve()}",
            "--puppet-settings=--vardir,/v",
        ]
        assert data["options"]["env"]["SSL_CERT_FILE"] == "/opt/puppetlabs/puppet/ssl/cert.pem"

    def test_no_env_flag(self, settings_file: Path, connection_file: Path) -> None:
        result = CliRunner().invoke(
            cli,
            [
                "language-server",
                "server",
                "--settings",
                str(settings_file),
                "--connection",
                str(connection_file),
                "--no-env",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "env" not in json.loads(result.output)["options"]

    def test_resolves_pdk_layout_from_install_dir(self, tmp_path: Path) -> None:
        install_dir = tmp_path / "pdk"
        (install_dir / "private" / "ruby" / "2.7.8").mkdir(parents=True)
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text("installType: pdk\n", encoding="utf-8")

        result = CliRunner().invoke(
            cli,
            [
                "language-server",
                "server",
                "--settings",
                str(settings_path),
                "--install-dir",
                str(install_dir),
            ],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["command"] == f"{install_dir}/private/ruby/2.7.8/bin/ruby"
        assert data["options"]["env"]["GEM_HOME"] == f"{install_dir}/share/cache/ruby/2.7.0"

    def test_invalid_settings_reported(self, tmp_path: Path) -> None:
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text("installType: auto\n", encoding="utf-8")
        result = CliRunner().invoke(
            cli, ["language-server", "server", "--settings", str(settings_path)]
        )
        assert result.exit_code == 1
        assert "Invalid installType 'auto'" in result.output


class TestDebugServerCommand:
    def test_prints_debug_spec(self, settings_file: Path, connection_file: Path) -> None:
        result = CliRunner().invoke(
            cli,
            [
                "debug-server",
                "/ext/puppet-debugserver",
                "--settings",
                str(settings_file),
                "--connection",
                str(connection_file),
            ],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["args"] == ["/ext/puppet-debugserver", "--ip=127.0.0.1"]

    def test_exec_runs_process_and_returns_exit_code(
        self, settings_file: Path, connection_file: Path
    ) -> None:
        process = MagicMock()
        process.wait.return_value = 3
        process.stdin = process.stdout = process.stderr = None
        with patch("puppet_launcher.cli.start_launch_process", return_value=process) as start:
            result = CliRunner().invoke(
                cli,
                [
                    "debug-server",
                    "dbg",
                    "--settings",
                    str(settings_file),
                    "--connection",
                    str(connection_file),
                    "--exec",
                ],
            )
        assert result.exit_code == 3
        spec = start.call_args.args[0]
        assert spec.options.stdio == "inherit"
        assert spec.args == ["dbg", "--ip=127.0.0.1"]

    def test_exec_spawn_failure(self, settings_file: Path, connection_file: Path) -> None:
        with patch(
            "puppet_launcher.cli.start_launch_process", side_effect=FileNotFoundError("ruby")
        ):
            result = CliRunner().invoke(
                cli,
                [
                    "debug-server",
                    "dbg",
                    "--settings",
                    str(settings_file),
                    "--connection",
                    str(connection_file),
                    "--exec",
                ],
            )
        assert result.exit_code == 1
        assert "Failed to start ruby" in result.output


class TestConfigureLogging:
    def test_level_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PUPPET_LAUNCHER_LOG_LEVEL", "warning")
        with patch("puppet_launcher.cli.logging.basicConfig") as basic_config:
            _configure_logging(False)
        assert basic_config.call_args.kwargs["level"] == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PUPPET_LAUNCHER_LOG_LEVEL", "chatty")
        with patch("puppet_launcher.cli.logging.basicConfig") as basic_config:
            _configure_logging(False)
        assert basic_config.call_args.kwargs["level"] == logging.INFO

    def test_verbose_forces_debug(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PUPPET_LAUNCHER_LOG_LEVEL", "ERROR")
        with patch("puppet_launcher.cli.logging.basicConfig") as basic_config:
            _configure_logging(True)
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG
