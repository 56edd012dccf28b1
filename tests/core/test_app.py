# tests/core/test_app.py
import pytest
from unittest.mock import MagicMock

from xrun import app
from xrun.core.utils.path_utils import PathUtils


@pytest.fixture(autouse=True)
def quiet_app(clean_registry, monkeypatch):
    monkeypatch.setattr(app, "configure_from_settings", lambda *args, **kwargs: None)
    monkeypatch.delenv("COMP_LINE", raising=False)
    monkeypatch.delenv("COMP_POINT", raising=False)


def test_no_arguments_prints_usage(capsys):
    exit_code = app.main([])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "project task runner" in out
    assert "check-deps" in out


def test_unknown_command_prints_usage(capsys):
    assert app.main(["nope"]) == 0
    assert "project task runner" in capsys.readouterr().out


def test_completion_mode_prints_only_candidates(monkeypatch, capsys):
    monkeypatch.setenv("COMP_LINE", "x li")

    assert app.main(["ignored"]) == 0
    assert capsys.readouterr().out == "lint\n"


def test_completion_mode_offers_command_flags(monkeypatch, capsys):
    monkeypatch.setenv("COMP_LINE", "x lint --x-")

    assert app.main([]) == 0
    assert capsys.readouterr().out.splitlines() == ["--x-fix", "--x-no-confirmation"]


def test_completion_mode_never_dispatches(monkeypatch, capsys):
    engine = MagicMock()
    monkeypatch.setattr(app, "ExecuteEngine", engine)
    monkeypatch.setenv("COMP_LINE", "x lint ")

    app.main(["lint"])
    engine.assert_not_called()
    assert "project task runner" not in capsys.readouterr().out


def test_known_command_runs_with_args(monkeypatch, capsys):
    assert app.main(["--x-no-confirmation", "completion"]) == 0
    assert capsys.readouterr().out == "complete -o default -C x x\n"


def test_handler_exit_code_is_returned(monkeypatch):
    monkeypatch.setattr("xrun.core.context.run_context.RunContext.run", lambda self, cmd, check=False: 5)

    assert app.main(["test", "-k", "slow"]) == 5


def test_registry_unavailable_exits_non_zero(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(PathUtils, "get_handlers_dir", lambda: tmp_path / "missing")

    assert app.main([]) == 2
    assert "cannot load commands" in capsys.readouterr().err
