"""Tests for server startup and tool registration."""

import pytest

EXPECTED_TOOLS = {
	"health_check",
	"list_api_keys",
	"set_api_key",
	"create_plan",
	"confirm_plan",
	"execute_plan",
	"submit_message",
	"reset_agents",
	"get_workspace_state",
	"list_plans",
}


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
	monkeypatch.setenv("AGENT_WORKSPACE_CONFIG_DIR", str(tmp_path / "config"))
	monkeypatch.setenv("AGENT_WORKSPACE_DATA_DIR", str(tmp_path / "data"))


def test_server_imports():
	"""Server module should import without errors."""
	from agent_workspace.server import mcp
	assert mcp is not None


def test_server_tool_names():
	"""Server should register every workspace tool."""
	from agent_workspace.server import mcp
	tool_names = set(mcp._tool_manager._tools.keys())

	missing = EXPECTED_TOOLS - tool_names
	assert not missing, f"Missing tools: {missing}"


def test_server_workspaces_use_config():
	"""Test that the server registry is built from the loaded config."""
	from agent_workspace.server import config, workspaces
	assert workspaces.step_delay == config.step_delay
	assert workspaces.store.db_path == str(config.state_db_path)
