"""
Plan Executor - runs a confirmed plan one step at a time.

Each step is handed to the agent named by its ``agent_type``, with that
role's system message and prompt template. A failing step is recorded with
a fallback result and the run continues; the plan always ends complete.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from ..agents.registry import AGENT_PROFILES, AgentRegistry, AgentStatus, AgentType
from ..llm.completion import CompletionError, CompletionOptions, CompletionProvider, CompletionSource
from ..plans.models import Message, Plan, PlanStatus, PlanStep, StepStatus

logger = logging.getLogger(__name__)

STEP_MAX_TOKENS = 1500
STEP_TEMPERATURE = 0.7

PlanUpdateCallback = Callable[[Plan], Awaitable[None]]


@dataclass(frozen=True)
class RolePrompt:
	"""System message and prompt template for one agent role."""
	system_message: str
	template: str

	def render(self, step: PlanStep) -> str:
		return self.template.format(description=step.description)


ROLE_PROMPTS: dict[AgentType, RolePrompt] = {
	AgentType.PLANNER: RolePrompt(
		system_message=(
			"You are the Planner agent. You analyze requirements, clarify goals "
			"and outline the approach before anyone starts building."
		),
		template=(
			"Analyze the requirements for this step and describe the approach:\n\n"
			"{description}\n\n"
			"List the key requirements, assumptions and risks."
		),
	),
	AgentType.WORKER: RolePrompt(
		system_message=(
			"You are the Worker agent. You implement solutions and write clean, "
			"working code."
		),
		template=(
			"Implement the following step. The requirements have already been analyzed.\n\n"
			"{description}\n\n"
			"Provide the implementation with short explanations."
		),
	),
	AgentType.SUPERVISOR: RolePrompt(
		system_message=(
			"You are the Supervisor agent. You review work for quality, correctness "
			"and adherence to standards."
		),
		template=(
			"Review the work done so far for this step:\n\n"
			"{description}\n\n"
			"Point out quality issues and confirm what meets the standard."
		),
	),
	AgentType.ERROR_FIXER: RolePrompt(
		system_message=(
			"You are the Error Fixer agent. You find bugs, fix them and perform the "
			"final check before delivery."
		),
		template=(
			"Debug and fix any problems for this step, then run a final check:\n\n"
			"{description}\n\n"
			"List the issues found, the fixes applied and the final status."
		),
	),
}


def fallback_step_result(step: PlanStep) -> str:
	agent_name = AGENT_PROFILES[step.agent_type]["name"]
	return (
		f"{agent_name}: step \"{step.description}\" was completed in fallback mode. "
		"The model could not be reached, so no detailed result is available."
	)


class PlanExecutor:
	"""
	Executes confirmed plans.

	Usage:
		executor = PlanExecutor(provider, registry, step_delay=1.0)
		messages = await executor.execute(plan)
	"""

	def __init__(
		self,
		provider: CompletionProvider,
		registry: AgentRegistry,
		model: Optional[str] = None,
		step_delay: float = 1.0,
		timeout: Optional[float] = None,
		on_update: Optional[PlanUpdateCallback] = None,
	):
		"""
		Initialize the executor.

		Args:
			provider: Completion provider used for every step
			registry: Agent roster whose statuses are updated
			model: Model id, provider default if None
			step_delay: Pause between steps in seconds
			timeout: Per-step request timeout in seconds, None for no limit
			on_update: Awaited with the plan after every state change
		"""
		self.provider = provider
		self.registry = registry
		self.model = model
		self.step_delay = step_delay
		self.timeout = timeout
		self.on_update = on_update

	async def _notify(self, plan: Plan) -> None:
		if self.on_update:
			await self.on_update(plan)

	async def execute(self, plan: Optional[Plan]) -> list[Message]:
		"""
		Run every step of a confirmed plan in order.

		Returns:
			One message per step, in step order. Empty if the plan is not confirmed.
		"""
		if plan is None or plan.status != PlanStatus.CONFIRMED:
			return []

		plan.transition_to(PlanStatus.EXECUTING)
		await self._notify(plan)
		logger.info(f"Executing plan {plan.id} ({len(plan.steps)} steps)")

		messages: list[Message] = []
		for index, step in enumerate(plan.steps):
			message = await self._run_step(step)
			messages.append(message)
			await self._notify(plan)

			if self.step_delay > 0 and index < len(plan.steps) - 1:
				await asyncio.sleep(self.step_delay)

		plan.transition_to(PlanStatus.COMPLETE)
		self.registry.clear_current()
		await self._notify(plan)
		logger.info(f"Plan {plan.id} complete")

		return messages

	async def _run_step(self, step: PlanStep) -> Message:
		self.registry.activate(step.agent_type, AgentStatus.ACTIVE)
		step.start()

		role = ROLE_PROMPTS[step.agent_type]
		options = CompletionOptions(
			max_tokens=STEP_MAX_TOKENS,
			temperature=STEP_TEMPERATURE,
			system_message=role.system_message,
		)

		try:
			result = await asyncio.wait_for(
				self.provider.complete(role.render(step), self.model, options),
				timeout=self.timeout,
			)
			if not isinstance(result.text, str):
				raise CompletionError(f"Provider returned {type(result.text).__name__} instead of text")
		except Exception as e:
			logger.error(f"Step {step.id} ({step.agent_type.value}) failed: {e!r}")
			self.registry.set_status(step.agent_type, AgentStatus.ERROR)
			content = fallback_step_result(step)
			step.record_result(content, StepStatus.ERROR)
			return Message.agent(content, step.agent_type, CompletionSource.FALLBACK)

		self.registry.set_status(step.agent_type, AgentStatus.COMPLETE)
		step.record_result(result.text, StepStatus.COMPLETE)
		return Message.agent(result.text, step.agent_type, result.source)
