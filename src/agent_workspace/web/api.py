"""JSON API endpoints for the web workspace."""

from __future__ import annotations

import json

from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse

from ..orchestrator.workspace import DEFAULT_SESSION, AgentWorkspace, WorkMode
from ..plans.models import PlanStatus
from .templates import WORKSPACE_HTML


async def get_workspace(request: Request) -> AgentWorkspace:
	"""Get the session's workspace, selected by the ?session= query param."""
	session_id = request.query_params.get("session") or DEFAULT_SESSION
	return await request.app.state.workspaces.get(session_id)


async def _read_json(request: Request) -> dict:
	body = await request.body()
	if not body:
		return {}
	data = json.loads(body)
	if not isinstance(data, dict):
		raise ValueError("Request body must be a JSON object")
	return data


def _bad_request(message: str) -> JSONResponse:
	return JSONResponse({"error": message}, status_code=400)


async def index(request: Request) -> HTMLResponse:
	"""Serve the workspace HTML page."""
	return HTMLResponse(WORKSPACE_HTML)


async def api_state(request: Request) -> JSONResponse:
	"""Agents, current plan, and working status."""
	workspace = await get_workspace(request)
	return JSONResponse(workspace.snapshot())


async def api_create_plan(request: Request) -> JSONResponse:
	"""Build a draft plan from {"request": "..."}."""
	try:
		data = await _read_json(request)
	except ValueError as e:
		return _bad_request(f"Invalid JSON: {e}")
	text = str(data.get("request", "")).strip()
	if not text:
		return _bad_request("Field 'request' is required")

	workspace = await get_workspace(request)
	plan = await workspace.create_plan(text)
	return JSONResponse({"plan": plan.model_dump(mode="json")}, status_code=201)


async def api_confirm_plan(request: Request) -> JSONResponse:
	"""Confirm the current draft plan."""
	workspace = await get_workspace(request)
	if not workspace.awaiting_confirmation:
		return JSONResponse({"error": "No draft plan to confirm"}, status_code=409)
	await workspace.confirm_plan()
	return JSONResponse({"plan": workspace.current_plan.model_dump(mode="json")})


async def api_execute_plan(request: Request) -> JSONResponse:
	"""Execute the confirmed plan and return the agent messages."""
	workspace = await get_workspace(request)
	plan = workspace.current_plan
	if plan is None or plan.status != PlanStatus.CONFIRMED:
		return JSONResponse({"error": "No confirmed plan to execute"}, status_code=409)
	messages = await workspace.execute_plan()
	if not messages:
		# Another request ran the plan while this one waited for the lock
		return JSONResponse({
			"error": "Plan was already executed",
			"status": workspace.current_plan.status.value if workspace.current_plan else None,
		}, status_code=409)
	return JSONResponse({
		"plan": workspace.current_plan.model_dump(mode="json"),
		"messages": [m.model_dump(mode="json") for m in messages],
	})


async def api_reset_agents(request: Request) -> JSONResponse:
	"""Reset every agent to idle."""
	workspace = await get_workspace(request)
	workspace.reset_all_agents()
	return JSONResponse({"agents": [a.model_dump(mode="json") for a in workspace.agents]})


async def api_messages(request: Request) -> JSONResponse:
	"""Submit a chat message: {"text": "...", "mode": "ask|plan|act", "is_voice": false}."""
	try:
		data = await _read_json(request)
	except ValueError as e:
		return _bad_request(f"Invalid JSON: {e}")
	text = str(data.get("text", "")).strip()
	if not text:
		return _bad_request("Field 'text' is required")
	try:
		mode = WorkMode(data.get("mode", WorkMode.ACT.value))
	except ValueError:
		return _bad_request(f"Unknown mode: {data.get('mode')}")

	workspace = await get_workspace(request)
	messages = await workspace.submit(text, mode, is_voice=bool(data.get("is_voice", False)))
	return JSONResponse({
		"messages": [m.model_dump(mode="json") for m in messages],
		"awaiting_confirmation": workspace.awaiting_confirmation,
	})


async def api_plans(request: Request) -> JSONResponse:
	"""Confirmed plan history, newest first."""
	workspace = await get_workspace(request)
	plans = sorted(workspace.plans, key=lambda p: p.created_at, reverse=True)
	return JSONResponse([
		{
			"id": p.id,
			"title": p.title,
			"status": p.status.value,
			"progress": p.get_progress(),
			"created_at": p.created_at,
		}
		for p in plans
	])
