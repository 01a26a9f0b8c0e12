"""
Agent Registry - the fixed roster of cooperating roles.

Four agents exist for the lifetime of a workspace. Only their status
changes; display metadata is fixed.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AgentType(str, Enum):
	"""Role an agent plays in the pipeline."""
	PLANNER = "planner"
	WORKER = "worker"
	SUPERVISOR = "supervisor"
	ERROR_FIXER = "error-fixer"


class AgentStatus(str, Enum):
	"""Current status of an agent."""
	IDLE = "idle"
	THINKING = "thinking"
	ACTIVE = "active"
	COMPLETE = "complete"
	ERROR = "error"


class Agent(BaseModel):
	"""A single agent with static display metadata and a mutable status."""
	id: AgentType
	name: str
	description: str
	avatar: str
	status: AgentStatus = Field(default=AgentStatus.IDLE)


# Roster order is also the fallback plan's step order
AGENT_PROFILES: dict[AgentType, dict[str, str]] = {
	AgentType.PLANNER: {
		"name": "Planner",
		"description": "Creates detailed plans and clarifies requirements",
		"avatar": "🧠",
	},
	AgentType.WORKER: {
		"name": "Worker",
		"description": "Executes tasks and generates code",
		"avatar": "⚡",
	},
	AgentType.SUPERVISOR: {
		"name": "Supervisor",
		"description": "Oversees quality and ensures standards",
		"avatar": "👁️",
	},
	AgentType.ERROR_FIXER: {
		"name": "Error Fixer",
		"description": "Identifies and fixes issues",
		"avatar": "🔧",
	},
}


class AgentRegistry:
	"""Holds the four agents and the single "currently active" marker."""

	def __init__(self):
		self._agents: dict[AgentType, Agent] = {
			agent_type: Agent(id=agent_type, **profile)
			for agent_type, profile in AGENT_PROFILES.items()
		}
		self.current_agent: Optional[AgentType] = None

	def get(self, agent_type: AgentType) -> Agent:
		return self._agents[AgentType(agent_type)]

	def list_agents(self) -> list[Agent]:
		"""Agents in roster order."""
		return list(self._agents.values())

	def set_status(self, agent_type: AgentType, status: AgentStatus) -> None:
		agent = self.get(agent_type)
		if agent.status != status:
			logger.debug(f"Agent {agent.id.value}: {agent.status.value} -> {status.value}")
		agent.status = status

	def activate(self, agent_type: AgentType, status: AgentStatus) -> None:
		"""Set an agent's status and mark it as the current agent."""
		self.set_status(agent_type, status)
		self.current_agent = AgentType(agent_type)

	def clear_current(self) -> None:
		self.current_agent = None

	def reset(self) -> None:
		"""Return every agent to idle and clear the current marker."""
		for agent in self._agents.values():
			agent.status = AgentStatus.IDLE
		self.current_agent = None

	def snapshot(self) -> list[dict]:
		"""JSON-ready view of the roster."""
		return [agent.model_dump(mode="json") for agent in self._agents.values()]
