"""Shared test fixtures and helpers for agent-workspace tests."""

import json
from typing import Callable, Optional, Union
from unittest.mock import MagicMock

from agent_workspace.agents.registry import AgentType
from agent_workspace.llm.completion import (
	CompletionOptions,
	CompletionProvider,
	CompletionResult,
	CompletionSource,
)
from agent_workspace.plans.models import Plan, PlanStatus, PlanStep

Reply = Union[str, CompletionResult, Exception]


def make_plan(
	title: str = "Build a login form",
	status: PlanStatus = PlanStatus.DRAFT,
	agent_types: Optional[list[AgentType]] = None,
) -> Plan:
	"""Create a Plan with one step per agent type."""
	agent_types = agent_types or [
		AgentType.PLANNER,
		AgentType.WORKER,
		AgentType.SUPERVISOR,
		AgentType.ERROR_FIXER,
	]
	return Plan(
		title=title,
		description="Login form with validation",
		steps=[
			PlanStep(id=f"step_{i}", description=f"Do part {i}", agent_type=agent_type)
			for i, agent_type in enumerate(agent_types, 1)
		],
		status=status,
	)


def plan_json(steps: list[tuple[str, str]], title: str = "Login form plan") -> str:
	"""Render a planner model answer with the given (description, agentType) steps."""
	return json.dumps({
		"title": title,
		"description": "Build and check a login form",
		"steps": [{"description": d, "agentType": a} for d, a in steps],
	})


class ScriptedProvider(CompletionProvider):
	"""Completion provider that replays scripted replies.

	Replies are consumed in call order. A reply may be a string, a full
	CompletionResult, or an Exception to raise. When the script runs out,
	``default`` is used. Every call is recorded in ``calls``.
	"""

	def __init__(
		self,
		replies: Optional[list[Reply]] = None,
		default: Union[str, Callable[[str], str]] = "Done.",
	):
		self.replies = list(replies or [])
		self.default = default
		self.calls: list[dict] = []

	async def complete(
		self,
		prompt: str,
		model: Optional[str] = None,
		options: Optional[CompletionOptions] = None,
	) -> CompletionResult:
		self.calls.append({"prompt": prompt, "model": model, "options": options})
		if self.replies:
			reply = self.replies.pop(0)
		elif callable(self.default):
			reply = self.default(prompt)
		else:
			reply = self.default

		if isinstance(reply, Exception):
			raise reply
		if isinstance(reply, CompletionResult):
			return reply
		return CompletionResult(text=reply, source=CompletionSource.REMOTE, model=model or "test-model")


def capture_tools(register_fn: Callable, *args) -> dict:
	"""Register tools on a mock MCP and return the captured tool functions.

	Args:
		register_fn: The registration function (e.g., register_workspace_tools)
		*args: Arguments passed after the MCP instance

	Returns:
		Dict mapping tool name to the tool function
	"""
	captured = {}

	class MockMCP:
		def tool(self):
			def decorator(fn):
				captured[fn.__name__] = fn
				return fn
			return decorator

	register_fn(MockMCP(), *args)
	return captured


def mock_config(tmp_path) -> MagicMock:
	"""A config stand-in with paths under tmp_path."""
	config = MagicMock()
	config.config_dir = tmp_path / "config"
	config.data_dir = tmp_path / "data"
	config.secrets_file = tmp_path / "config" / "secrets.json"
	config.state_db_path = tmp_path / "data" / "workspace.db"
	config.openrouter_api_key = ""
	config.openrouter_base_url = "https://openrouter.ai/api/v1"
	config.default_model = "test-model"
	config.request_timeout = 5.0
	config.app_url = "http://localhost"
	config.app_title = "AI Agent Workspace"
	return config
