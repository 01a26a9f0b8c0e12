"""Tests for the MCP tool functions, called directly."""

import asyncio
import json
from pathlib import Path

import pytest

from agent_workspace.orchestrator.workspace import WorkspaceRegistry
from agent_workspace.tools.core import register_core_tools
from agent_workspace.tools.secrets import register_secrets_tools
from agent_workspace.tools.workspace import register_workspace_tools

from .helpers import ScriptedProvider, capture_tools, mock_config, plan_json

STEPS = [("Analyze requirements", "planner"), ("Implement form", "worker")]


@pytest.fixture
def config(tmp_path: Path):
	return mock_config(tmp_path)


@pytest.fixture
def workspaces():
	provider = ScriptedProvider([plan_json(STEPS)], default="OK")
	return WorkspaceRegistry(provider, step_delay=0)


@pytest.fixture
def tools(config, workspaces):
	return capture_tools(register_workspace_tools, config, workspaces)


class TestWorkspaceTools:
	"""Create, confirm, execute through the tool surface."""

	@pytest.mark.asyncio
	async def test_full_flow(self, tools):
		"""Test the create, confirm, execute, list sequence."""
		created = json.loads(await tools["create_plan"]("Build a login form"))
		assert created["plan"]["status"] == "draft"
		assert len(created["plan"]["steps"]) == 2
		assert created["markdown"].startswith("# Login form plan")

		confirmed = json.loads(await tools["confirm_plan"]())
		assert confirmed["success"] is True
		assert confirmed["status"] == "confirmed"
		assert confirmed["history_size"] == 1

		executed = json.loads(await tools["execute_plan"]())
		assert executed["status"] == "complete"
		assert [m["content"] for m in executed["messages"]] == ["OK", "OK"]
		assert executed["progress"]["finished_steps"] == 2

		listed = json.loads(await tools["list_plans"]())
		assert listed["plans"][0]["status"] == "complete"

	@pytest.mark.asyncio
	async def test_confirm_without_draft(self, tools):
		"""Test that confirming with no draft returns an error."""
		result = json.loads(await tools["confirm_plan"]())
		assert "error" in result

	@pytest.mark.asyncio
	async def test_execute_without_confirmation(self, tools):
		"""Test that executing a draft returns an error with its status."""
		await tools["create_plan"]("Build a login form")
		result = json.loads(await tools["execute_plan"]())
		assert result["error"] == "No confirmed plan to execute"
		assert result["status"] == "draft"

	@pytest.mark.asyncio
	async def test_overlapping_execute_reports_error(self, tools, workspaces):
		"""Test that the execute call that loses the race gets an error, not an empty success."""
		await tools["create_plan"]("Build a login form")
		await tools["confirm_plan"]()
		workspace = await workspaces.get()

		# Both calls pass the confirmed check before either can run
		async with workspace._lock:
			first = asyncio.create_task(tools["execute_plan"]())
			second = asyncio.create_task(tools["execute_plan"]())
			for _ in range(20):
				await asyncio.sleep(0)
		results = [json.loads(r) for r in await asyncio.gather(first, second)]

		errors = [r for r in results if "error" in r]
		successes = [r for r in results if "error" not in r]
		assert len(errors) == 1
		assert len(successes) == 1
		assert errors[0] == {"error": "Plan was already executed", "status": "complete"}
		assert len(successes[0]["messages"]) == 2

	@pytest.mark.asyncio
	async def test_submit_message_modes(self, tools):
		"""Test that plan mode drafts and a yes reply executes."""
		planned = json.loads(await tools["submit_message"]("Build a login form", mode="plan"))
		assert planned["awaiting_confirmation"] is True
		assert planned["messages"][0]["type"] == "user"

		done = json.loads(await tools["submit_message"]("yes", mode="plan"))
		assert done["awaiting_confirmation"] is False
		assert len(done["messages"]) == 3

	@pytest.mark.asyncio
	async def test_submit_message_unknown_mode(self, tools):
		"""Test that an unknown mode lists the available ones."""
		result = json.loads(await tools["submit_message"]("hi", mode="dance"))
		assert result["available"] == ["plan", "act", "ask"]

	@pytest.mark.asyncio
	async def test_sessions_are_separate(self, tools):
		"""Test that session ids select separate workspaces."""
		await tools["create_plan"]("Build a login form", session_id="alice")
		state = json.loads(await tools["get_workspace_state"](session_id="bob"))
		assert state["current_plan"] is None
		assert state["session_id"] == "bob"

	@pytest.mark.asyncio
	async def test_reset_agents(self, tools):
		"""Test that reset_agents returns every agent to idle."""
		await tools["submit_message"]("Build a login form", mode="act")
		result = json.loads(await tools["reset_agents"]())
		assert {a["status"] for a in result["agents"]} == {"idle"}


class TestCoreAndSecretTools:
	@pytest.mark.asyncio
	async def test_health_check_reports_simulated(self, config):
		"""Test that health_check reports a simulated provider without a key."""
		tools = capture_tools(register_core_tools, config)
		status = json.loads(await tools["health_check"]())
		assert status["server"] == "running"
		assert status["completion_provider"] == "simulated"
		assert status["state_db_exists"] is False

	@pytest.mark.asyncio
	async def test_set_and_list_api_keys(self, config):
		"""Test that stored keys are listed without their values."""
		tools = capture_tools(register_secrets_tools, config)

		saved = json.loads(await tools["set_api_key"]("openrouter", "sk-or-secret", notes="mine"))
		assert saved["success"] is True

		raw = await tools["list_api_keys"]()
		assert "sk-or-secret" not in raw
		listed = json.loads(raw)
		assert listed["secrets"][0]["name"] == "openrouter"
		assert listed["secrets"][0]["has_value"] is True
