"""
Agent Workspace - the orchestration facade used by every surface.

One workspace per user session. It owns the agent roster, the current plan
and the plan history, persists both through a ``PlanStateStore``, and
serialises plan-changing operations with a lock so that a plan is never
built and executed at the same time.

Lifecycle of the current plan:
	(none) --create_plan--> draft --confirm_plan--> confirmed
	--execute_plan--> executing --> complete
create_plan may be called from any state and replaces the current plan.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

import aiosqlite

from ..agents.registry import Agent, AgentRegistry, AgentType
from ..llm.completion import CompletionError, CompletionProvider, CompletionSource
from ..plans.models import Message, Plan, PlanStatus
from ..plans.store import PlanStateStore
from .executor import PlanExecutor
from .planner import PlanBuilder

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default"

AFFIRMATIVE_REPLIES = {"yes", "y", "ok", "okay", "go", "confirm", "execute", "да"}
NEGATIVE_REPLIES = {"no", "n", "cancel", "stop", "нет"}


class WorkMode(str, Enum):
	"""How a submitted message is handled."""
	PLAN = "plan"  # build a draft and wait for confirmation
	ACT = "act"  # build, confirm and execute at once
	ASK = "ask"  # answer directly, no plan


def _normalise_reply(text: str) -> str:
	return text.strip().lower().rstrip(".!")


class AgentWorkspace:
	"""
	Orchestration facade for one session.

	Usage:
		workspace = AgentWorkspace(provider, store=store, session_id="alice")
		await workspace.load()
		plan = await workspace.create_plan("Build a login form")
		await workspace.confirm_plan()
		messages = await workspace.execute_plan()
	"""

	def __init__(
		self,
		provider: CompletionProvider,
		store: Optional[PlanStateStore] = None,
		session_id: str = DEFAULT_SESSION,
		model: Optional[str] = None,
		step_delay: float = 1.0,
		timeout: Optional[float] = None,
	):
		self.provider = provider
		self.store = store
		self.session_id = session_id
		self.model = model

		self._registry = AgentRegistry()
		self._current_plan: Optional[Plan] = None
		self._plans: list[Plan] = []
		self._is_working = False
		self._lock = asyncio.Lock()

		self._builder = PlanBuilder(provider, self._registry, model=model, timeout=timeout)
		self._executor = PlanExecutor(
			provider,
			self._registry,
			model=model,
			step_delay=step_delay,
			timeout=timeout,
			on_update=self._on_plan_update,
		)

	# Read-only state

	@property
	def agents(self) -> list[Agent]:
		return self._registry.list_agents()

	@property
	def current_plan(self) -> Optional[Plan]:
		return self._current_plan

	@property
	def plans(self) -> list[Plan]:
		return list(self._plans)

	@property
	def is_working(self) -> bool:
		return self._is_working

	@property
	def current_agent(self) -> Optional[AgentType]:
		return self._registry.current_agent

	@property
	def awaiting_confirmation(self) -> bool:
		return self._current_plan is not None and self._current_plan.status == PlanStatus.DRAFT

	def get_agent(self, agent_type: AgentType) -> Agent:
		return self._registry.get(agent_type)

	def snapshot(self) -> dict:
		"""JSON-ready view of the whole workspace state."""
		return {
			"session_id": self.session_id,
			"agents": self._registry.snapshot(),
			"current_agent": self.current_agent.value if self.current_agent else None,
			"is_working": self._is_working,
			"awaiting_confirmation": self.awaiting_confirmation,
			"current_plan": self._current_plan.model_dump(mode="json") if self._current_plan else None,
			"plan_count": len(self._plans),
		}

	# Persistence

	async def load(self) -> None:
		"""Restore the current plan and history from the store."""
		if not self.store:
			return
		self._current_plan = await self.store.load_current_plan(self.session_id)
		self._plans = await self.store.load_plan_history(self.session_id)
		logger.debug(
			f"Loaded session {self.session_id}: "
			f"current={'yes' if self._current_plan else 'none'}, history={len(self._plans)}"
		)

	def _sync_history(self, plan: Plan) -> bool:
		for i, entry in enumerate(self._plans):
			if entry.id == plan.id:
				self._plans[i] = plan.model_copy(deep=True)
				return True
		return False

	async def _persist(self, history_changed: bool = False) -> None:
		if self._current_plan is not None and self._sync_history(self._current_plan):
			history_changed = True

		if not self.store:
			return
		try:
			await self.store.save_current_plan(self.session_id, self._current_plan)
			if history_changed:
				await self.store.save_plan_history(self.session_id, self._plans)
		except aiosqlite.Error as e:
			logger.error(f"Failed to persist state for session {self.session_id}: {e}")

	async def _on_plan_update(self, plan: Plan) -> None:
		await self._persist()

	# Operations

	async def create_plan(self, user_input: str) -> Plan:
		"""Build a new draft plan and make it the current plan."""
		async with self._lock:
			plan = await self._builder.build(user_input)
			self._current_plan = plan
			await self._persist()
			return plan

	async def confirm_plan(self) -> None:
		"""Confirm the current draft and add it to the history. No-op otherwise."""
		async with self._lock:
			plan = self._current_plan
			if plan is None or plan.status != PlanStatus.DRAFT:
				return
			plan.transition_to(PlanStatus.CONFIRMED)
			self._plans.append(plan.model_copy(deep=True))
			await self._persist(history_changed=True)
			logger.info(f"Confirmed plan {plan.id}")

	async def execute_plan(self) -> list[Message]:
		"""Execute the current plan if it is confirmed, else return []."""
		async with self._lock:
			plan = self._current_plan
			if plan is None or plan.status != PlanStatus.CONFIRMED:
				return []

			self._is_working = True
			try:
				return await self._executor.execute(plan)
			finally:
				self._is_working = False
				self._registry.clear_current()

	def reset_all_agents(self) -> None:
		"""Return all agents to idle without touching plans."""
		self._registry.reset()
		self._is_working = False

	async def discard_plan(self) -> None:
		"""Drop the current draft. Confirmed plans stay in the history."""
		async with self._lock:
			if self._current_plan is None:
				return
			logger.info(f"Discarded plan {self._current_plan.id}")
			self._current_plan = None
			await self._persist()

	# Chat routing

	async def submit(self, text: str, mode: WorkMode = WorkMode.ACT, is_voice: bool = False) -> list[Message]:
		"""
		Handle one user message in the given work mode.

		Args:
			text: The user message
			mode: plan, act or ask
			is_voice: Whether the message came from speech input

		Returns:
			The user message followed by the agent replies
		"""
		mode = WorkMode(mode)
		messages = [Message.user(text, is_voice=is_voice)]

		if self.awaiting_confirmation:
			reply = _normalise_reply(text)
			if reply in AFFIRMATIVE_REPLIES:
				await self.confirm_plan()
				messages.extend(await self.execute_plan())
				return messages
			if reply in NEGATIVE_REPLIES:
				await self.discard_plan()
				messages.append(Message.agent(
					"Plan discarded. Send a new request when you are ready.",
					AgentType.PLANNER,
				))
				return messages

		if mode == WorkMode.ASK:
			try:
				result = await self.provider.complete(text, self.model)
				if not isinstance(result.text, str):
					raise CompletionError(f"Provider returned {type(result.text).__name__} instead of text")
			except Exception as e:
				logger.error(f"Direct question failed: {e!r}")
				messages.append(Message.agent(
					"Sorry, no answer could be produced right now. Check the API settings.",
					source=CompletionSource.FALLBACK,
				))
				return messages
			messages.append(Message.agent(result.text, source=result.source))
			return messages

		plan = await self.create_plan(text)

		if mode == WorkMode.PLAN:
			messages.append(Message.agent(self._confirmation_prompt(plan), AgentType.PLANNER))
			return messages

		await self.confirm_plan()
		messages.extend(await self.execute_plan())
		return messages

	@staticmethod
	def _confirmation_prompt(plan: Plan) -> str:
		lines = [f"I prepared a plan: {plan.title}", ""]
		if plan.description:
			lines.extend([plan.description, ""])
		for i, step in enumerate(plan.steps, 1):
			lines.append(f"{i}. [{step.agent_type.value}] {step.description}")
		lines.extend(["", "Shall I execute this plan? (yes/no)"])
		return "\n".join(lines)


class WorkspaceRegistry:
	"""One AgentWorkspace per session id, created and loaded on first use."""

	def __init__(
		self,
		provider: CompletionProvider,
		store: Optional[PlanStateStore] = None,
		model: Optional[str] = None,
		step_delay: float = 1.0,
		timeout: Optional[float] = None,
	):
		self.provider = provider
		self.store = store
		self.model = model
		self.step_delay = step_delay
		self.timeout = timeout
		self._workspaces: dict[str, AgentWorkspace] = {}
		self._lock = asyncio.Lock()

	@classmethod
	def from_config(cls, config) -> "WorkspaceRegistry":
		"""Build a registry backed by OpenRouter and the configured state db."""
		from ..llm.completion import OpenRouterProvider

		return cls(
			provider=OpenRouterProvider.from_config(config),
			store=PlanStateStore(str(config.state_db_path)),
			step_delay=config.step_delay,
			timeout=config.request_timeout,
		)

	async def get(self, session_id: str = DEFAULT_SESSION) -> AgentWorkspace:
		async with self._lock:
			workspace = self._workspaces.get(session_id)
			if workspace is None:
				workspace = AgentWorkspace(
					self.provider,
					store=self.store,
					session_id=session_id,
					model=self.model,
					step_delay=self.step_delay,
					timeout=self.timeout,
				)
				await workspace.load()
				self._workspaces[session_id] = workspace
			return workspace

	def list_sessions(self) -> list[str]:
		return sorted(self._workspaces)
