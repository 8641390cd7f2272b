"""End-to-end tests for the credfile command line."""

from __future__ import annotations

import json
import stat
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from credfile import __version__
from credfile.app import app, main
from credfile.exceptions import ConfigError, InvalidUsageError, ParseError, SecretError
from credfile.secret import SecretStore, derive_secret_name

runner = CliRunner()


@pytest.fixture
def tokens(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "gotham")
    monkeypatch.setenv("GITLAB_TOKEN", "chaos")


@pytest.fixture
def default_store(isolated_config: Path) -> SecretStore:
    return SecretStore()


# ---------------------------------------------------------------------------
# Top level
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_sub_commands_registered(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for group in ("netrc", "registry", "secrets", "config"):
            assert group in result.output


# ---------------------------------------------------------------------------
# netrc build
# ---------------------------------------------------------------------------


class TestNetrcBuild:
    def test_prints_compact(self, isolated_config: Path, tokens: None) -> None:
        result = runner.invoke(app, ["netrc", "build", "--login", "github.com=batman=env:GITHUB_TOKEN"])
        assert result.exit_code == 0, result.output
        assert result.stdout == "machine github.com login batman password gotham\n"

    def test_format_flag(self, isolated_config: Path, tokens: None) -> None:
        result = runner.invoke(
            app,
            ["netrc", "build", "--format", "full", "--login", "github.com=batman=env:GITHUB_TOKEN"],
        )
        assert result.exit_code == 0, result.output
        assert result.stdout == "machine github.com\nlogin batman\npassword gotham\n"

    def test_format_from_environment(
        self, isolated_config: Path, tokens: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CREDFILE_NETRC_FORMAT", "full")
        result = runner.invoke(app, ["netrc", "build", "--login", "a=u=literal:p"])
        assert result.stdout == "machine a\nlogin u\npassword p\n"

    def test_files_merged_before_logins(self, isolated_config: Path, tokens: None) -> None:
        existing = isolated_config / "existing.netrc"
        existing.write_text("machine gitlab.com\nlogin joker\npassword chaos\n", encoding="utf-8")
        result = runner.invoke(
            app,
            [
                "netrc", "build",
                "--login", "github.com=batman=env:GITHUB_TOKEN",
                "--file", str(existing),
            ],
        )
        assert result.exit_code == 0, result.output
        assert result.stdout == (
            "machine gitlab.com login joker password chaos\n"
            "machine github.com login batman password gotham\n"
        )

    def test_writes_file(self, isolated_config: Path, tokens: None) -> None:
        target = isolated_config / "out" / ".netrc"
        result = runner.invoke(
            app,
            ["netrc", "build", "--login", "github.com=batman=env:GITHUB_TOKEN", "-o", str(target)],
        )
        assert result.exit_code == 0, result.output
        assert target.read_text(encoding="utf-8") == "machine github.com login batman password gotham"
        assert stat.S_IMODE(target.stat().st_mode) == 0o600
        assert "gotham" not in result.stdout

    def test_stores_secret(self, default_store: SecretStore, tokens: None) -> None:
        result = runner.invoke(
            app, ["netrc", "build", "--login", "github.com=batman=env:GITHUB_TOKEN", "--secret"]
        )
        assert result.exit_code == 0, result.output
        expected = derive_secret_name("netrc", "machine github.com login batman password gotham")
        assert result.stdout.strip() == expected
        assert default_store.load(expected) == "machine github.com login batman password gotham"

    def test_stores_named_secret(self, default_store: SecretStore, tokens: None) -> None:
        result = runner.invoke(
            app,
            ["netrc", "build", "--login", "a=u=literal:p", "--secret", "--name", "ci-netrc"],
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "ci-netrc"
        assert default_store.exists("ci-netrc")

    def test_output_and_secret_conflict(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["netrc", "build", "-o", "x", "--secret"])
        assert isinstance(result.exception, InvalidUsageError)

    def test_name_without_secret(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["netrc", "build", "--name", "x"])
        assert isinstance(result.exception, InvalidUsageError)

    def test_malformed_login_entry(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["netrc", "build", "--login", "github.com=batman"])
        assert isinstance(result.exception, InvalidUsageError)

    def test_unset_variable(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CREDFILE_UNSET", raising=False)
        result = runner.invoke(app, ["netrc", "build", "--login", "a=u=env:CREDFILE_UNSET"])
        assert isinstance(result.exception, SecretError)
        assert result.stdout == ""

    def test_unparseable_file(self, isolated_config: Path) -> None:
        bad = isolated_config / "bad.netrc"
        bad.write_text("machine github.com password arkam login bane", encoding="utf-8")
        result = runner.invoke(app, ["netrc", "build", "--file", str(bad)])
        assert isinstance(result.exception, ParseError)


# ---------------------------------------------------------------------------
# netrc inspect
# ---------------------------------------------------------------------------


class TestNetrcInspect:
    def test_masks_passwords(self, isolated_config: Path) -> None:
        path = isolated_config / ".netrc"
        path.write_text("machine github.com login batman password gotham\n", encoding="utf-8")
        result = runner.invoke(app, ["--plain", "netrc", "inspect", str(path)])
        assert result.exit_code == 0, result.output
        assert "github.com\tbatman\t********" in result.stdout
        assert "gotham" not in result.output

    def test_json(self, isolated_config: Path) -> None:
        path = isolated_config / ".netrc"
        path.write_text("machine a\nlogin u\npassword p\nmachine b login v password q", encoding="utf-8")
        result = runner.invoke(app, ["--json", "netrc", "inspect", str(path)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [
            {"Machine": "a", "Login": "u", "Password": "********"},
            {"Machine": "b", "Login": "v", "Password": "********"},
        ]

    def test_non_utf8_file(self, isolated_config: Path) -> None:
        path = isolated_config / ".netrc"
        path.write_bytes(b"machine a login u password \xff\xfe")
        result = runner.invoke(app, ["netrc", "inspect", str(path)])
        assert isinstance(result.exception, ConfigError)

    def test_configured_output_format(self, isolated_config: Path) -> None:
        runner.invoke(app, ["config", "set", "output.format", "json"])
        path = isolated_config / ".netrc"
        path.write_text("machine a login u password p", encoding="utf-8")
        result = runner.invoke(app, ["netrc", "inspect", str(path)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [{"Machine": "a", "Login": "u", "Password": "********"}]

    def test_flag_overrides_configured_output_format(self, isolated_config: Path) -> None:
        runner.invoke(app, ["config", "set", "output.format", "json"])
        path = isolated_config / ".netrc"
        path.write_text("machine a login u password p", encoding="utf-8")
        result = runner.invoke(app, ["--plain", "netrc", "inspect", str(path)])
        assert result.exit_code == 0, result.output
        assert "a\tu\t********" in result.stdout


# ---------------------------------------------------------------------------
# registry build
# ---------------------------------------------------------------------------


class TestRegistryBuild:
    def test_prints_json(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCKER_PASSWORD", "c8H96YDRENibMQ==")
        result = runner.invoke(
            app,
            [
                "registry", "build",
                "--auth", "ghcr.io=joker=literal:6VXzOeygB8KrsQ==",
                "--auth", "docker.io=batman=env:DOCKER_PASSWORD",
            ],
        )
        assert result.exit_code == 0, result.output
        assert result.stdout == (
            '{"auths":{'
            '"docker.io":{"auth":"YmF0bWFuOmM4SDk2WURSRU5pYk1RPT0="},'
            '"ghcr.io":{"auth":"am9rZXI6NlZYek9leWdCOEtyc1E9PQ=="}'
            "}}\n"
        )

    def test_host_with_port(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["registry", "build", "--auth", "localhost:5000=u=literal:p"])
        assert result.exit_code == 0, result.output
        assert "localhost:5000" in json.loads(result.stdout)["auths"]

    def test_oci_reference_reduced_to_host(self, isolated_config: Path) -> None:
        result = runner.invoke(
            app, ["registry", "build", "--auth", "oci://ghcr.io/purpleclay/charts=joker=literal:p"]
        )
        assert result.exit_code == 0, result.output
        assert list(json.loads(result.stdout)["auths"]) == ["ghcr.io"]

    def test_namespace_key_kept_without_scheme(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["registry", "build", "--auth", "quay.io/user/image=u=literal:p"])
        assert result.exit_code == 0, result.output
        assert list(json.loads(result.stdout)["auths"]) == ["quay.io/user/image"]

    def test_empty(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["registry", "build"])
        assert result.stdout == '{"auths":{}}\n'

    def test_writes_file(self, isolated_config: Path) -> None:
        target = isolated_config / "config.json"
        result = runner.invoke(app, ["registry", "build", "--auth", "a.io=u=literal:p", "-o", str(target)])
        assert result.exit_code == 0, result.output
        assert stat.S_IMODE(target.stat().st_mode) == 0o644

    def test_stores_named_secret(self, default_store: SecretStore) -> None:
        result = runner.invoke(
            app,
            ["registry", "build", "--auth", "a.io=u=literal:p", "--secret", "--name", "oci-login"],
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "oci-login"
        assert json.loads(default_store.load("oci-login"))["auths"]["a.io"]

    def test_prefix_from_project_config(self, default_store: SecretStore, isolated_config: Path) -> None:
        (isolated_config / "credfile.json").write_text(
            json.dumps({"registry": {"secret_prefix": "registry-auth"}}), encoding="utf-8"
        )
        result = runner.invoke(app, ["registry", "build", "--secret"])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == derive_secret_name("registry-auth", '{"auths":{}}')


# ---------------------------------------------------------------------------
# secrets
# ---------------------------------------------------------------------------


class TestSecrets:
    def test_list_empty(self, default_store: SecretStore) -> None:
        result = runner.invoke(app, ["secrets", "list"])
        assert result.exit_code == 0
        assert result.stdout == "" or "No secrets" in result.stdout

    def test_list(self, default_store: SecretStore) -> None:
        default_store.save("zeta", "1")
        default_store.save("alpha", "2")
        result = runner.invoke(app, ["--plain", "secrets", "list"])
        assert result.exit_code == 0, result.output
        assert result.stdout == "Name\nalpha\nzeta\n"

    def test_show(self, default_store: SecretStore) -> None:
        default_store.save("ci-netrc", "machine a login u password p")
        result = runner.invoke(app, ["secrets", "show", "ci-netrc"])
        assert result.exit_code == 0, result.output
        assert result.stdout == "machine a login u password p\n"

    def test_show_missing(self, default_store: SecretStore) -> None:
        result = runner.invoke(app, ["secrets", "show", "missing"])
        assert isinstance(result.exception, SecretError)

    def test_delete_forced(self, default_store: SecretStore) -> None:
        default_store.save("ci-netrc", "x")
        result = runner.invoke(app, ["--force", "secrets", "delete", "ci-netrc"])
        assert result.exit_code == 0, result.output
        assert not default_store.exists("ci-netrc")

    def test_delete_declined(self, default_store: SecretStore) -> None:
        default_store.save("ci-netrc", "x")
        result = runner.invoke(app, ["secrets", "delete", "ci-netrc"], input="n\n")
        assert result.exit_code == 0
        assert default_store.exists("ci-netrc")


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_set_then_show(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "netrc.format", "full"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["netrc"]["format"] == "full"

    def test_set_drives_build_format(self, isolated_config: Path) -> None:
        runner.invoke(app, ["config", "set", "netrc.format", "full"])
        result = runner.invoke(app, ["netrc", "build", "--login", "a=u=literal:p"])
        assert result.stdout == "machine a\nlogin u\npassword p\n"

    def test_set_invalid_value(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "netrc.format", "tabular"])
        assert result.exit_code == 2

    def test_set_unknown_key(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "netrc.colour", "red"])
        assert result.exit_code == 2

    def test_set_invalid_output_format(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "output.format", "yaml"])
        assert result.exit_code == 2

    def test_show_effective(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CREDFILE_NETRC_FORMAT", "full")
        result = runner.invoke(app, ["--json", "--quiet", "config", "show", "--effective"])
        assert json.loads(result.stdout)["netrc"]["format"] == "full"

    def test_reset(self, isolated_config: Path) -> None:
        runner.invoke(app, ["config", "set", "netrc.format", "full"])
        result = runner.invoke(app, ["--force", "config", "reset"])
        assert result.exit_code == 0, result.output
        result = runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert json.loads(result.stdout)["netrc"]["format"] == "compact"


# ---------------------------------------------------------------------------
# main() exit codes
# ---------------------------------------------------------------------------


class TestMainExitCodes:
    @pytest.fixture(autouse=True)
    def _no_signal_handlers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("credfile.app._setup_signal_handlers", lambda: None)

    def _run(self, monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
        monkeypatch.setattr(sys, "argv", ["credfile", *args])
        with pytest.raises(SystemExit) as exc_info:
            main()
        return exc_info.value.code

    def test_success(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._run(monkeypatch, "netrc", "build", "--login", "a=u=literal:p") == 0

    def test_invalid_usage(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._run(monkeypatch, "netrc", "build", "--login", "bad") == 2

    def test_secret_error(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CREDFILE_UNSET", raising=False)
        assert self._run(monkeypatch, "netrc", "build", "--login", "a=u=env:CREDFILE_UNSET") == 3

    def test_parse_error(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        bad = isolated_config / "bad.netrc"
        bad.write_text("machine a password p login u", encoding="utf-8")
        assert self._run(monkeypatch, "--no-color", "netrc", "inspect", str(bad)) == 7
        assert "line 1, column 11" in capsys.readouterr().err

    def test_unexpected_error_writes_crash_log(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _boom(*args: object, **kwargs: object) -> None:
            raise RuntimeError("boom")

        monkeypatch.setattr("credfile.config.resolve_config", _boom)
        assert self._run(monkeypatch, "netrc", "build") == 1
        logs = list((isolated_config / "data" / "credfile" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError" in logs[0].read_text()
