"""Tests for the web workspace API endpoints."""

import asyncio

import pytest

from agent_workspace.orchestrator.workspace import WorkspaceRegistry

from .helpers import ScriptedProvider, plan_json

try:
	import httpx
	from starlette.testclient import TestClient

	from agent_workspace.web.app import build_app

	HAS_WEB = True
except ImportError:
	HAS_WEB = False

pytestmark = pytest.mark.skipif(not HAS_WEB, reason="web extras not installed")

STEPS = [("Analyze requirements", "planner"), ("Implement form", "worker")]


def _provider() -> ScriptedProvider:
	return ScriptedProvider(default=lambda prompt: plan_json(STEPS) if "## User Request" in prompt else "OK")


@pytest.fixture
def client():
	"""Create a test client over an in-memory workspace registry."""
	app = build_app(workspaces=WorkspaceRegistry(_provider(), step_delay=0))
	with TestClient(app) as c:
		yield c


class TestStateEndpoints:
	def test_index_serves_html(self, client):
		"""Test that the root path serves the workspace page."""
		response = client.get("/")
		assert response.status_code == 200
		assert "AI Agent Workspace" in response.text

	def test_initial_state(self, client):
		"""Test that a fresh session has idle agents and no plan."""
		data = client.get("/api/state").json()
		assert data["session_id"] == "default"
		assert data["current_plan"] is None
		assert data["is_working"] is False
		assert len(data["agents"]) == 4

	def test_plans_empty(self, client):
		"""Test that plan history starts empty."""
		assert client.get("/api/plans").json() == []


class TestPlanEndpoints:
	def test_create_confirm_execute(self, client):
		"""Test the full create, confirm, execute sequence over HTTP."""
		created = client.post("/api/plan", json={"request": "Build a login form"})
		assert created.status_code == 201
		assert created.json()["plan"]["status"] == "draft"

		confirmed = client.post("/api/plan/confirm")
		assert confirmed.status_code == 200
		assert confirmed.json()["plan"]["status"] == "confirmed"

		executed = client.post("/api/plan/execute")
		assert executed.status_code == 200
		body = executed.json()
		assert body["plan"]["status"] == "complete"
		assert [m["agent_type"] for m in body["messages"]] == ["planner", "worker"]

		plans = client.get("/api/plans").json()
		assert len(plans) == 1
		assert plans[0]["progress"]["percent_complete"] == 100.0

	def test_create_requires_text(self, client):
		"""Test that missing or malformed request bodies are rejected."""
		assert client.post("/api/plan", json={}).status_code == 400
		assert client.post("/api/plan", content=b"[1, 2]").status_code == 400
		assert client.post("/api/plan", content=b"{broken").status_code == 400

	def test_confirm_without_draft(self, client):
		"""Test that confirming with no draft is a conflict."""
		assert client.post("/api/plan/confirm").status_code == 409

	def test_execute_unconfirmed(self, client):
		"""Test that executing a draft is a conflict."""
		client.post("/api/plan", json={"request": "Build a login form"})
		assert client.post("/api/plan/execute").status_code == 409

	def test_execute_twice(self, client):
		"""Test that executing a finished plan again is a conflict."""
		client.post("/api/plan", json={"request": "Build a login form"})
		client.post("/api/plan/confirm")
		assert client.post("/api/plan/execute").status_code == 200
		assert client.post("/api/plan/execute").status_code == 409

	def test_reset_agents(self, client):
		"""Test that resetting returns every agent to idle."""
		client.post("/api/messages", json={"text": "Build a login form", "mode": "act"})
		data = client.post("/api/agents/reset").json()
		assert {a["status"] for a in data["agents"]} == {"idle"}


class TestConcurrentExecute:
	"""Two execute requests for the same confirmed plan."""

	@pytest.mark.asyncio
	async def test_losing_request_gets_conflict(self):
		"""Test that only one of two overlapping executes reports success."""
		workspaces = WorkspaceRegistry(_provider(), step_delay=0)
		app = build_app(workspaces=workspaces)
		transport = httpx.ASGITransport(app=app)

		async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
			await http.post("/api/plan", json={"request": "Build a login form"})
			await http.post("/api/plan/confirm")

			workspace = await workspaces.get()
			# Both requests pass the confirmed check before either can run
			async with workspace._lock:
				first = asyncio.create_task(http.post("/api/plan/execute"))
				second = asyncio.create_task(http.post("/api/plan/execute"))
				for _ in range(20):
					await asyncio.sleep(0)
			responses = await asyncio.gather(first, second)

		assert sorted(r.status_code for r in responses) == [200, 409]
		conflict = next(r for r in responses if r.status_code == 409).json()
		assert conflict["error"] == "Plan was already executed"
		assert conflict["status"] == "complete"
		assert len(workspace.provider.calls) == 3


class TestMessages:
	def test_ask_mode(self, client):
		"""Test that ask mode answers without planning."""
		data = client.post("/api/messages", json={"text": "hello", "mode": "ask"}).json()
		assert [m["type"] for m in data["messages"]] == ["user", "agent"]
		assert data["messages"][1]["content"] == "OK"

	def test_plan_then_yes(self, client):
		"""Test that a yes reply executes the drafted plan."""
		planned = client.post("/api/messages", json={"text": "Build a login form", "mode": "plan"}).json()
		assert planned["awaiting_confirmation"] is True

		done = client.post("/api/messages", json={"text": "yes", "mode": "plan"}).json()
		assert done["awaiting_confirmation"] is False
		assert len(done["messages"]) == 3

	def test_voice_flag(self, client):
		"""Test that the voice flag reaches the user message."""
		data = client.post("/api/messages", json={"text": "hi", "mode": "ask", "is_voice": True}).json()
		assert data["messages"][0]["is_voice"] is True

	def test_bad_mode(self, client):
		"""Test that an unknown mode is rejected."""
		response = client.post("/api/messages", json={"text": "hi", "mode": "dance"})
		assert response.status_code == 400

	def test_sessions_are_separate(self, client):
		"""Test that the session query param selects separate workspaces."""
		client.post("/api/plan?session=alice", json={"request": "Build a login form"})
		assert client.get("/api/state?session=alice").json()["current_plan"] is not None
		assert client.get("/api/state?session=bob").json()["current_plan"] is None
