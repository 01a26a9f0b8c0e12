"""Tests for the CLI module."""

import argparse
import asyncio
import json
import os
import sys
import types
from pathlib import Path
from unittest.mock import patch

import pytest

from agent_workspace.cli import (
	_check_config_toml,
	_check_optional_extras,
	_check_secrets_json,
	cmd_history,
	cmd_run,
	main,
)
from agent_workspace.config import load_config
from agent_workspace.plans.models import PlanStatus
from agent_workspace.plans.store import PlanStateStore

from .helpers import make_plan


@pytest.fixture
def env(tmp_path: Path, monkeypatch):
	"""Point config and data at tmp_path and force simulated completions."""
	monkeypatch.setenv("AGENT_WORKSPACE_CONFIG_DIR", str(tmp_path / "config"))
	monkeypatch.setenv("AGENT_WORKSPACE_DATA_DIR", str(tmp_path / "data"))
	monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
	return tmp_path


def _run_args(text: str, mode: str = "act", yes: bool = False, session: str = "default") -> argparse.Namespace:
	return argparse.Namespace(text=text, mode=mode, yes=yes, session=session, no_delay=True)


def test_check_config_toml_missing(tmp_path: Path):
	"""Test that a missing config.toml is reported as optional."""
	status, issue = _check_config_toml(tmp_path)
	assert status == "not found (optional)"
	assert issue is None


def test_check_config_toml_invalid(tmp_path: Path):
	"""Test that an unparseable config.toml is reported as an issue."""
	(tmp_path / "config.toml").write_text("step_delay = = 1")
	status, issue = _check_config_toml(tmp_path)
	assert status.startswith("INVALID")
	assert "config.toml" in issue


def test_check_secrets_json(tmp_path: Path):
	"""Test that secrets are counted with their active flags."""
	path = tmp_path / "secrets.json"
	path.write_text(json.dumps({"keys": {"openrouter": {"key": "x", "active": True}}}))
	status, issue = _check_secrets_json(path)
	assert status == "1 secrets (1 active)"
	assert issue is None


def test_check_secrets_json_bad_keys(tmp_path: Path):
	"""Test that a non-dict keys field is reported as invalid."""
	path = tmp_path / "secrets.json"
	path.write_text(json.dumps({"keys": []}))
	status, issue = _check_secrets_json(path)
	assert status.startswith("INVALID")


def test_check_optional_extras_lists_web():
	"""Test that the web extra is the only optional extra checked."""
	names = [name for name, _ in _check_optional_extras()]
	assert names == ["web"]


def test_run_act_mode(env, capsys):
	"""Test that run in act mode prints the transcript and stores the plan."""
	with pytest.raises(SystemExit) as exc:
		cmd_run(_run_args("Build a login form"))
	assert exc.value.code == 0

	out = capsys.readouterr().out
	assert "Build a login form" in out
	assert "Agents" in out

	history = asyncio.run(_history(env))
	assert len(history) == 1
	assert history[0].status == PlanStatus.COMPLETE


def test_run_plan_mode_keeps_draft(env, capsys):
	"""Test that plan mode stores a draft that a later yes executes."""
	with pytest.raises(SystemExit):
		cmd_run(_run_args("Build a login form", mode="plan"))
	assert "Shall I execute this plan?" in capsys.readouterr().out
	assert asyncio.run(_history(env)) == []

	with pytest.raises(SystemExit):
		cmd_run(_run_args("yes", mode="plan"))
	history = asyncio.run(_history(env))
	assert len(history) == 1
	assert history[0].status == PlanStatus.COMPLETE


def test_run_plan_mode_with_yes(env, capsys):
	"""Test that --yes confirms and executes the draft in one run."""
	with pytest.raises(SystemExit):
		cmd_run(_run_args("Build a login form", mode="plan", yes=True))
	history = asyncio.run(_history(env))
	assert len(history) == 1
	assert history[0].status == PlanStatus.COMPLETE


def test_history_lists_plans(env, capsys):
	"""Test that history lists stored plans and shows one in detail."""
	plan = make_plan(title="Stored plan", status=PlanStatus.CONFIRMED)
	asyncio.run(_save_history(env, [plan]))

	cmd_history(argparse.Namespace(session="default", plan_id=None))
	assert "Stored plan" in capsys.readouterr().out

	cmd_history(argparse.Namespace(session="default", plan_id=plan.id))
	out = capsys.readouterr().out
	assert plan.id in out
	assert "Do part 1" in out


def test_history_unknown_plan(env, capsys):
	"""Test that an unknown plan id exits with an error."""
	with pytest.raises(SystemExit) as exc:
		cmd_history(argparse.Namespace(session="default", plan_id="plan_missing"))
	assert exc.value.code == 1


def test_main_no_command_exits():
	"""Test that running without a command prints help and exits."""
	with patch.object(sys, "argv", ["agent-workspace"]):
		with pytest.raises(SystemExit) as exc:
			main()
	assert exc.value.code == 1


def test_main_dispatches_history(env, capsys):
	"""Test that main routes the history command."""
	with patch.object(sys, "argv", ["agent-workspace", "history", "--session", "empty"]):
		with patch("agent_workspace.cli.setup_logging"):
			main()
	assert "No confirmed plans yet." in capsys.readouterr().out


def test_main_log_level_applies_to_other_commands(env):
	"""Test that --log-level is passed to setup_logging for non-serve commands."""
	with patch.object(sys, "argv", ["agent-workspace", "--log-level", "DEBUG", "history"]):
		with patch("agent_workspace.cli.setup_logging") as mock_setup:
			main()
	assert mock_setup.call_args.args[0] == "DEBUG"


def test_serve_honours_log_level(env, monkeypatch):
	"""Test that --log-level reaches the config the MCP server loads."""
	# Restored by monkeypatch after the test
	monkeypatch.setenv("AGENT_WORKSPACE_LOG_LEVEL", "INFO")
	seen = {}

	class FakeMCP:
		def run(self):
			seen["env"] = os.environ["AGENT_WORKSPACE_LOG_LEVEL"]
			seen["config"] = load_config().log_level

	fake_server = types.ModuleType("agent_workspace.server")
	fake_server.mcp = FakeMCP()
	monkeypatch.setitem(sys.modules, "agent_workspace.server", fake_server)

	with patch.object(sys, "argv", ["agent-workspace", "--log-level", "DEBUG", "serve"]):
		main()

	assert seen == {"env": "DEBUG", "config": "DEBUG"}


async def _history(tmp_path: Path):
	store = PlanStateStore(str(load_config().state_db_path))
	try:
		return await store.load_plan_history("default")
	finally:
		await store.close()


async def _save_history(tmp_path: Path, plans):
	store = PlanStateStore(str(load_config().state_db_path))
	try:
		await store.save_plan_history("default", plans)
	finally:
		await store.close()
