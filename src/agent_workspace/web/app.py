"""Starlette app with route assembly."""

from __future__ import annotations

import logging
from typing import Optional

from starlette.applications import Starlette
from starlette.routing import Route

from ..config import get_config
from ..orchestrator.workspace import WorkspaceRegistry
from .api import (
	api_confirm_plan,
	api_create_plan,
	api_execute_plan,
	api_messages,
	api_plans,
	api_reset_agents,
	api_state,
	index,
)

logger = logging.getLogger(__name__)


def build_app(workspaces: Optional[WorkspaceRegistry] = None) -> Starlette:
	"""Build and return the Starlette ASGI app."""
	routes = [
		Route("/", index),
		Route("/api/state", api_state),
		Route("/api/plan", api_create_plan, methods=["POST"]),
		Route("/api/plan/confirm", api_confirm_plan, methods=["POST"]),
		Route("/api/plan/execute", api_execute_plan, methods=["POST"]),
		Route("/api/agents/reset", api_reset_agents, methods=["POST"]),
		Route("/api/messages", api_messages, methods=["POST"]),
		Route("/api/plans", api_plans),
	]

	if workspaces is None:
		workspaces = WorkspaceRegistry.from_config(get_config())
		logger.info("Web app using configured workspace registry")

	app = Starlette(routes=routes)
	app.state.workspaces = workspaces
	return app
