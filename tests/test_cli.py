"""Tests for the actiongen CLI."""

from pathlib import Path

import pytest

from actiongen.cli import main
from actiongen.cli.errors import CLIError, format_cli_error
from actiongen.errors import ReservedBasePathError

ACTIONS = '''
from actiongen import define_action

actions = {"ping": define_action(lambda payload: "pong")}
'''


@pytest.fixture
def project(tmp_path: Path, monkeypatch) -> Path:
    for name in ("ACTIONGEN_ADAPTER", "ACTIONGEN_BASE_PATH", "ACTIONGEN_PORT", "ACTIONGEN_SITE"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / "actions.py").write_text(ACTIONS, encoding="utf-8")
    return tmp_path


def test_generate_writes_files(project: Path, capsys) -> None:
    exit_code = main(["--log-level", "error", "generate", "--root", str(project), "--adapter", "uvicorn"])
    assert exit_code == 0
    out = capsys.readouterr().out
    assert "router.py" in out
    assert "route: /api/{slug:path} -> api:ALL" in out
    assert (project / "_actiongen" / "api.py").exists()


def test_generate_flags_override_config(project: Path, capsys) -> None:
    (project / "actiongen.toml").write_text('adapter = "uvicorn"\nport = 8000\n', encoding="utf-8")
    exit_code = main(
        [
            "--log-level",
            "error",
            "generate",
            "--root",
            str(project),
            "--adapter",
            "cloudflare",
            "--base-path",
            "/rpc",
            "--port",
            "5000",
            "--out",
            "gen",
        ]
    )
    assert exit_code == 0
    assert "route: /rpc/{slug:path} -> api:ALL" in capsys.readouterr().out
    assert 'return "http://localhost:5000"' in (project / "gen" / "client.py").read_text(encoding="utf-8")
    assert "env=env, ctx=ctx" in (project / "gen" / "api.py").read_text(encoding="utf-8")


def test_generate_explicit_actions_path(tmp_path: Path, capsys) -> None:
    (tmp_path / "handlers.py").write_text(ACTIONS, encoding="utf-8")
    exit_code = main(
        ["--log-level", "error", "generate", "--root", str(tmp_path), "--adapter", "vercel", "--actions", "handlers.py"]
    )
    assert exit_code == 0
    router = (tmp_path / "_actiongen" / "router.py").read_text(encoding="utf-8")
    assert 'load_action_map("handlers", __package__)' in router


def test_unsupported_adapter_exits_with_error(project: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", "--root", str(project), "--adapter", "netlify"])
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "error: Unsupported adapter: netlify" in err
    assert "hint: Use one of: cloudflare, uvicorn, vercel, lambda" in err
    assert not (project / "_actiongen").exists()


def test_reserved_base_path_exits_with_error(project: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", "--root", str(project), "--adapter", "uvicorn", "--base-path", "/docs"])
    assert excinfo.value.code == 1
    assert "error: Base path /docs is reserved" in capsys.readouterr().err


def test_missing_actions_exits_with_error(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--log-level", "error", "generate", "--root", str(tmp_path), "--adapter", "uvicorn"])
    assert excinfo.value.code == 1
    assert "error: No actions module found." in capsys.readouterr().err


def test_adapters_command_lists_supported_adapters(capsys) -> None:
    assert main(["adapters"]) == 0
    assert capsys.readouterr().out.split() == ["cloudflare", "uvicorn", "vercel", "lambda"]


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 1
    assert "usage: actiongen" in capsys.readouterr().out


def test_format_cli_error() -> None:
    assert format_cli_error(CLIError("Invalid port", hint="Use 0-65535")) == "error: Invalid port\nhint: Use 0-65535"
    assert format_cli_error(ReservedBasePathError("Base path /docs is reserved")) == (
        "error: Base path /docs is reserved"
    )
    assert format_cli_error(ValueError("boom")) == "error: ValueError: boom"
