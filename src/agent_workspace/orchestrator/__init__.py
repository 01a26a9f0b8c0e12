"""Orchestrator module - plan building, execution, and the workspace facade."""

from .executor import ROLE_PROMPTS, PlanExecutor, RolePrompt
from .planner import PlanBuilder, build_fallback_plan, parse_plan_response
from .workspace import AgentWorkspace, WorkMode, WorkspaceRegistry

__all__ = [
	"AgentWorkspace",
	"PlanBuilder",
	"PlanExecutor",
	"ROLE_PROMPTS",
	"RolePrompt",
	"WorkMode",
	"WorkspaceRegistry",
	"build_fallback_plan",
	"parse_plan_response",
]
