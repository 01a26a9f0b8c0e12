"""Workspace tools - plan, confirm, execute, and chat routing."""

import json

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..orchestrator.workspace import DEFAULT_SESSION, WorkMode, WorkspaceRegistry
from ..plans.models import Message


def _messages_payload(messages: list[Message]) -> list[dict]:
	return [m.model_dump(mode="json") for m in messages]


def register_workspace_tools(mcp: FastMCP, config: Config, workspaces: WorkspaceRegistry) -> None:
	"""Register workspace orchestration tools."""

	@mcp.tool()
	async def create_plan(request: str, session_id: str = DEFAULT_SESSION) -> str:
		"""
		Decompose a request into a draft plan for the agent team.

		The plan must be confirmed with confirm_plan before it can be executed.

		Args:
			request: What the user wants done
			session_id: Workspace session (default: "default")
		"""
		workspace = await workspaces.get(session_id)
		plan = await workspace.create_plan(request)
		return json.dumps({
			"plan": plan.model_dump(mode="json"),
			"markdown": plan.to_markdown(),
			"next": "confirm_plan",
		}, indent=2)

	@mcp.tool()
	async def confirm_plan(session_id: str = DEFAULT_SESSION) -> str:
		"""
		Confirm the current draft plan so it can be executed.

		Args:
			session_id: Workspace session
		"""
		workspace = await workspaces.get(session_id)
		if not workspace.awaiting_confirmation:
			return json.dumps({
				"error": "No draft plan to confirm",
				"hint": "Use create_plan first",
			})
		await workspace.confirm_plan()
		plan = workspace.current_plan
		return json.dumps({
			"success": True,
			"plan_id": plan.id,
			"status": plan.status.value,
			"history_size": len(workspace.plans),
		}, indent=2)

	@mcp.tool()
	async def execute_plan(session_id: str = DEFAULT_SESSION) -> str:
		"""
		Execute the confirmed plan step by step and return each agent's response.

		Args:
			session_id: Workspace session
		"""
		workspace = await workspaces.get(session_id)
		plan = workspace.current_plan
		if plan is None or plan.status.value != "confirmed":
			return json.dumps({
				"error": "No confirmed plan to execute",
				"status": plan.status.value if plan else None,
			})
		messages = await workspace.execute_plan()
		if not messages:
			return json.dumps({
				"error": "Plan was already executed",
				"status": workspace.current_plan.status.value if workspace.current_plan else None,
			})
		return json.dumps({
			"plan_id": plan.id,
			"status": workspace.current_plan.status.value,
			"progress": workspace.current_plan.get_progress(),
			"messages": _messages_payload(messages),
		}, indent=2)

	@mcp.tool()
	async def submit_message(text: str, mode: str = "act", session_id: str = DEFAULT_SESSION) -> str:
		"""
		Send a chat message to the workspace.

		Modes: "ask" answers directly, "plan" drafts a plan and asks for
		confirmation, "act" plans and executes at once. Replying "yes" or
		"no" to a pending draft confirms or discards it.

		Args:
			text: The message
			mode: ask, plan or act
			session_id: Workspace session
		"""
		try:
			work_mode = WorkMode(mode)
		except ValueError:
			return json.dumps({
				"error": f"Unknown mode: {mode}",
				"available": [m.value for m in WorkMode],
			})
		workspace = await workspaces.get(session_id)
		messages = await workspace.submit(text, work_mode)
		return json.dumps({
			"messages": _messages_payload(messages),
			"awaiting_confirmation": workspace.awaiting_confirmation,
		}, indent=2)

	@mcp.tool()
	async def reset_agents(session_id: str = DEFAULT_SESSION) -> str:
		"""
		Reset every agent to idle. Plans and history are kept.

		Args:
			session_id: Workspace session
		"""
		workspace = await workspaces.get(session_id)
		workspace.reset_all_agents()
		return json.dumps({"success": True, "agents": [a.model_dump(mode="json") for a in workspace.agents]})

	@mcp.tool()
	async def get_workspace_state(session_id: str = DEFAULT_SESSION) -> str:
		"""
		Get agents, current plan, and working status for a session.

		Args:
			session_id: Workspace session
		"""
		workspace = await workspaces.get(session_id)
		return json.dumps(workspace.snapshot(), indent=2)

	@mcp.tool()
	async def list_plans(session_id: str = DEFAULT_SESSION) -> str:
		"""
		List confirmed plans in the session history.

		Args:
			session_id: Workspace session
		"""
		workspace = await workspaces.get(session_id)
		return json.dumps({
			"plans": [
				{
					"id": p.id,
					"title": p.title,
					"status": p.status.value,
					"steps": len(p.steps),
					"created_at": p.created_at,
				}
				for p in workspace.plans
			],
		}, indent=2)
