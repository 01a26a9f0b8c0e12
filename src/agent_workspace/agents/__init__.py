"""Agents module - the fixed planner/worker/supervisor/error-fixer roster."""

from .registry import AGENT_PROFILES, Agent, AgentRegistry, AgentStatus, AgentType

__all__ = [
	"AGENT_PROFILES",
	"Agent",
	"AgentRegistry",
	"AgentStatus",
	"AgentType",
]
