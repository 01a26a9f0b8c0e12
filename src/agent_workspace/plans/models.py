"""
Plan Models - Pydantic schemas for plans, steps, and agent messages.

A plan is a user request decomposed into ordered steps, each assigned to
one agent role. Plan status only ever moves forward:
draft -> confirmed -> executing -> complete.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..agents.registry import AGENT_PROFILES, AgentType
from ..llm.completion import CompletionSource


class PlanStatus(str, Enum):
	"""Status of a plan."""
	DRAFT = "draft"
	CONFIRMED = "confirmed"
	EXECUTING = "executing"
	COMPLETE = "complete"


PLAN_STATUS_ORDER = [
	PlanStatus.DRAFT,
	PlanStatus.CONFIRMED,
	PlanStatus.EXECUTING,
	PlanStatus.COMPLETE,
]


class StepStatus(str, Enum):
	"""Status of a step within a plan."""
	PENDING = "pending"
	IN_PROGRESS = "in-progress"
	COMPLETE = "complete"
	ERROR = "error"


class MessageType(str, Enum):
	USER = "user"
	AGENT = "agent"


class PlanTransitionError(Exception):
	"""Raised when a plan status change would skip or reverse a state."""
	pass


class StepResultError(Exception):
	"""Raised when a step result is written a second time."""
	pass


def new_plan_id() -> str:
	return f"plan_{uuid.uuid4().hex[:12]}"


def new_message_id() -> str:
	return f"msg_{uuid.uuid4().hex[:12]}"


def _now() -> str:
	return datetime.now().isoformat()


class PlanStep(BaseModel):
	"""A single step of a plan, performed by one agent role."""
	id: str = Field(description="Step identifier, step_<n> in creation order")
	description: str = Field(description="Instruction for this step")
	status: StepStatus = Field(default=StepStatus.PENDING)
	agent_type: AgentType = Field(description="Role that performs this step")
	result: Optional[str] = Field(default=None, description="Written once, after the step runs")
	completed_at: Optional[str] = Field(default=None)

	def start(self) -> None:
		if self.result is None:
			self.status = StepStatus.IN_PROGRESS

	def record_result(self, result: str, status: StepStatus = StepStatus.COMPLETE) -> None:
		"""Store the step's result. A step result can only be written once."""
		if self.result is not None:
			raise StepResultError(f"Step {self.id} already has a result")
		self.result = result
		self.status = status
		self.completed_at = _now()


class Plan(BaseModel):
	"""
	A decomposed user request.

	The same Plan object is mutated through its lifecycle; its id never
	changes.
	"""
	id: str = Field(default_factory=new_plan_id)
	title: str = Field(description="Short summary of the plan")
	description: str = Field(default="")
	steps: list[PlanStep] = Field(default_factory=list)
	status: PlanStatus = Field(default=PlanStatus.DRAFT)
	created_at: str = Field(default_factory=_now)
	updated_at: str = Field(default_factory=_now)

	def transition_to(self, status: PlanStatus) -> None:
		"""Move to the next status. Skips and reversals are rejected."""
		current = PLAN_STATUS_ORDER.index(self.status)
		target = PLAN_STATUS_ORDER.index(PlanStatus(status))
		if target != current + 1:
			raise PlanTransitionError(
				f"Cannot move plan {self.id} from {self.status.value} to {PlanStatus(status).value}"
			)
		self.status = PlanStatus(status)
		self.updated_at = _now()

	def get_step(self, step_id: str) -> Optional[PlanStep]:
		for step in self.steps:
			if step.id == step_id:
				return step
		return None

	def get_progress(self) -> dict:
		"""Calculate overall progress."""
		total = len(self.steps)
		done = len([s for s in self.steps if s.status in (StepStatus.COMPLETE, StepStatus.ERROR)])
		failed = len([s for s in self.steps if s.status == StepStatus.ERROR])
		return {
			"total_steps": total,
			"finished_steps": done,
			"failed_steps": failed,
			"percent_complete": round(done / total * 100, 1) if total > 0 else 0,
		}

	def to_markdown(self) -> str:
		"""Convert plan to markdown format."""
		lines = [
			f"# {self.title}",
			"",
			f"**Status:** {self.status.value}",
			f"**Created:** {self.created_at}",
			"",
		]
		if self.description:
			lines.extend([self.description, ""])

		lines.append("## Steps")
		for i, step in enumerate(self.steps, 1):
			icon = {
				StepStatus.PENDING: "[ ]",
				StepStatus.IN_PROGRESS: "[~]",
				StepStatus.COMPLETE: "[x]",
				StepStatus.ERROR: "[!]",
			}.get(step.status, "[ ]")
			agent_name = AGENT_PROFILES[step.agent_type]["name"]
			lines.append(f"{i}. {icon} **{agent_name}**: {step.description}")

		return "\n".join(lines)


class Message(BaseModel):
	"""A chat message shown to the user."""
	id: str = Field(default_factory=new_message_id)
	type: MessageType
	content: str
	agent_type: Optional[AgentType] = None
	timestamp: str = Field(default_factory=_now)
	is_voice: bool = False
	source: Optional[CompletionSource] = Field(
		default=None,
		description="Provenance of agent text; None for user messages",
	)

	@classmethod
	def user(cls, content: str, is_voice: bool = False) -> "Message":
		return cls(type=MessageType.USER, content=content, is_voice=is_voice)

	@classmethod
	def agent(
		cls,
		content: str,
		agent_type: Optional[AgentType] = None,
		source: Optional[CompletionSource] = None,
	) -> "Message":
		return cls(type=MessageType.AGENT, content=content, agent_type=agent_type, source=source)
