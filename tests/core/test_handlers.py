# tests/core/test_handlers.py
import sys

import pytest
from unittest.mock import MagicMock
from tenacity import wait_none

from xrun.core.context.run_context import RunContext
from xrun.core.errors import HandlerFailure
from xrun.core.handlers import check_handler, gen_handler, install_handler, lint_handler, testing_handler
from xrun.core.managers.config_manager import config_manager

TOOLS = [{"name": "ruff"}, {"name": "datamodel-codegen", "package": "datamodel-code-generator"}]


@pytest.fixture(autouse=True)
def restore_config():
    yield
    config_manager.reset()


@pytest.fixture
def ctx():
    context = RunContext()
    context.run = MagicMock(return_value=0)
    return context


@pytest.fixture
def tools_config():
    config_manager.set_nested("tools", TOOLS)


def on_path(*present):
    return lambda name: f"/usr/bin/{name}" if name in present else None


# --- check-deps ---

def test_check_deps_all_present(tools_config, monkeypatch, capsys):
    monkeypatch.setattr(check_handler.shutil, "which", on_path("ruff", "datamodel-codegen"))

    assert check_handler.x_check_deps([], RunContext()) == 0
    assert "All 2 tools are installed" in capsys.readouterr().out


def test_check_deps_quiet(tools_config, monkeypatch, capsys):
    monkeypatch.setattr(check_handler.shutil, "which", on_path("ruff", "datamodel-codegen"))

    assert check_handler.x_check_deps(["--x-quiet"], RunContext()) == 0
    assert capsys.readouterr().out == ""


def test_check_deps_reports_missing(tools_config, monkeypatch, capsys):
    monkeypatch.setattr(check_handler.shutil, "which", on_path("ruff"))

    assert check_handler.x_check_deps([], RunContext()) == 1
    out = capsys.readouterr().out
    assert "datamodel-codegen (pip: datamodel-code-generator)" in out
    assert "- ruff" not in out


def test_check_deps_rejects_unknown_argument(tools_config):
    assert check_handler.x_check_deps(["--bogus"], RunContext()) == 2


def test_invalid_tools_setting_is_ignored():
    config_manager.set_nested("tools", [{"package": "no-name"}])
    assert check_handler.configured_tools() == []


# --- install ---

def test_install_missing_tools_after_confirmation(tools_config, monkeypatch, ctx):
    monkeypatch.setattr(install_handler, "find_missing_tools", lambda tools: tools[1:])
    ctx.confirm = MagicMock(return_value=True)

    assert install_handler.x_install([], ctx) == 0
    ctx.confirm.assert_called_once()
    ctx.run.assert_called_once_with(
        [sys.executable, "-m", "pip", "install", "datamodel-code-generator"], check=True
    )


def test_install_declined(tools_config, ctx, capsys):
    ctx.confirm = MagicMock(return_value=False)

    assert install_handler.x_install(["ruff"], ctx) == 1
    ctx.run.assert_not_called()
    assert "Aborted" in capsys.readouterr().out


def test_install_skips_prompt_without_confirmation(tools_config, monkeypatch):
    prompt = MagicMock()
    monkeypatch.setattr("xrun.core.context.run_context.confirm", prompt)
    ctx = RunContext(skip_confirmation=True)
    ctx.run = MagicMock(return_value=0)

    assert install_handler.x_install(["--x-upgrade", "ruff"], ctx) == 0
    prompt.assert_not_called()
    ctx.run.assert_called_once_with(
        [sys.executable, "-m", "pip", "install", "--upgrade", "ruff"], check=True
    )


def test_install_nothing_missing(tools_config, monkeypatch, ctx, capsys):
    monkeypatch.setattr(install_handler, "find_missing_tools", lambda tools: [])

    assert install_handler.x_install([], ctx) == 0
    ctx.run.assert_not_called()


def test_pip_install_retries_then_succeeds(monkeypatch, ctx):
    monkeypatch.setattr(install_handler, "wait_exponential", lambda **kwargs: wait_none())
    config_manager.set_nested("install.retries", 3)
    ctx.run.side_effect = [HandlerFailure("pip", 1), HandlerFailure("pip", 1), 0]

    assert install_handler.pip_install(["ruff"], ctx) == 0
    assert ctx.run.call_count == 3


def test_pip_install_gives_up_with_exit_code(monkeypatch, ctx):
    monkeypatch.setattr(install_handler, "wait_exponential", lambda **kwargs: wait_none())
    config_manager.set_nested("install.retries", 2)
    ctx.run.side_effect = HandlerFailure("pip", 4)

    assert install_handler.pip_install(["ruff"], ctx) == 4
    assert ctx.run.call_count == 2


@pytest.mark.parametrize("exit_code", [127, 23, 2])
def test_pip_install_does_not_retry_permanent_failures(monkeypatch, ctx, exit_code):
    monkeypatch.setattr(install_handler, "wait_exponential", lambda **kwargs: wait_none())
    config_manager.set_nested("install.retries", 3)
    ctx.run.side_effect = HandlerFailure("pip", exit_code)

    assert install_handler.pip_install(["no-such-tool"], ctx) == exit_code
    assert ctx.run.call_count == 1


# --- gen ---

def test_gen_runs_both_steps(monkeypatch, ctx, tmp_path):
    seen = []

    async def fake_step(step, cwd):
        seen.append(step)
        return 0

    monkeypatch.setattr(gen_handler, "_run_step", fake_step)
    config_manager.set_nested("gen.steps", [["gen-a"], ["gen-b", "--x"]])
    ctx.cwd = tmp_path

    assert gen_handler.x_gen([], ctx) == 0
    assert sorted(seen) == [["gen-a"], ["gen-b", "--x"]]


def test_gen_returns_first_failure(monkeypatch, ctx, tmp_path):
    codes = {"gen-a": 0, "gen-b": 7}

    async def fake_step(step, cwd):
        return codes[step[0]]

    monkeypatch.setattr(gen_handler, "_run_step", fake_step)
    config_manager.set_nested("gen.steps", [["gen-a"], ["gen-b"]])
    ctx.cwd = tmp_path

    assert gen_handler.x_gen([], ctx) == 7


def test_gen_without_steps(ctx):
    config_manager.set_nested("gen.steps", [])
    assert gen_handler.x_gen([], ctx) == 1


# --- lint / fmt / test ---

def test_lint_translates_fix_flag(ctx):
    config_manager.set_nested("lint.command", ["ruff", "check"])

    lint_handler.x_lint(["--x-fix", "src"], ctx)
    ctx.run.assert_called_once_with(["ruff", "check", "--fix", "src"])


def test_fmt_translates_check_flag(ctx):
    config_manager.set_nested("fmt.command", ["ruff", "format"])

    lint_handler.x_fmt(["--x-check"], ctx)
    ctx.run.assert_called_once_with(["ruff", "format", "--check"])


def test_test_forwards_args_untouched(ctx):
    config_manager.set_nested("test.command", ["pytest"])
    ctx.run.return_value = 1

    assert testing_handler.x_test(["-k", "slow", "--x-fix"], ctx) == 1
    ctx.run.assert_called_once_with(["pytest", "-k", "slow", "--x-fix"])
