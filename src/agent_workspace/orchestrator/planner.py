"""
Plan Builder - turns a free-form request into a structured draft Plan.

The planner agent asks the completion provider for a JSON decomposition.
Whatever goes wrong (provider exception, timeout, non-JSON answer, bad
fields) the builder still returns a usable plan built by
``build_fallback_plan``.
"""

import asyncio
import json
import logging
import re
from typing import Optional

from ..agents.registry import AgentRegistry, AgentStatus, AgentType
from ..llm.completion import CompletionOptions, CompletionProvider
from ..plans.models import Plan, PlanStatus, PlanStep

logger = logging.getLogger(__name__)

MIN_STEPS = 1
MAX_STEPS = 5
TITLE_PREFIX_LENGTH = 50

PLANNING_SYSTEM_MESSAGE = (
	"You are a planning expert who decomposes tasks into steps for a team of agents. "
	"Respond with valid JSON only."
)

PLANNING_OPTIONS = CompletionOptions(
	max_tokens=1000,
	temperature=0.3,
	system_message=PLANNING_SYSTEM_MESSAGE,
)

FALLBACK_STEPS = [
	(AgentType.PLANNER, "Analyze user requirements and context"),
	(AgentType.WORKER, "Generate the implementation"),
	(AgentType.SUPERVISOR, "Review quality and standards"),
	(AgentType.ERROR_FIXER, "Fix any identified issues and run a final check"),
]


class PlanFormatError(ValueError):
	"""The model's answer could not be turned into plan steps."""
	pass


def build_fallback_plan(user_input: str) -> Plan:
	"""The canned four-step plan, one step per role in roster order."""
	title_text = user_input[:TITLE_PREFIX_LENGTH]
	if len(user_input) > TITLE_PREFIX_LENGTH:
		title_text += "..."

	return Plan(
		title=f"Plan for: {title_text}",
		description=f"Comprehensive plan to address: {user_input}",
		steps=[
			PlanStep(id=f"step_{i}", description=description, agent_type=agent_type)
			for i, (agent_type, description) in enumerate(FALLBACK_STEPS, 1)
		],
		status=PlanStatus.DRAFT,
	)


def build_planning_prompt(user_input: str) -> str:
	"""Build the decomposition prompt sent to the planner model."""
	roles = ", ".join(f'"{t.value}"' for t in AgentType)
	lines = [
		"Break the following user request into an execution plan for a team of four agents.",
		"",
		"## User Request",
		user_input,
		"",
		"## Agents",
		"- planner: analyzes requirements and clarifies the task",
		"- worker: implements the solution and writes code",
		"- supervisor: reviews quality and checks standards",
		"- error-fixer: finds and fixes problems, performs the final check",
		"",
		"## Output Format",
		"",
		"Return ONLY a JSON object of this shape, with no text before or after it:",
		"",
		"{",
		'  "title": "short plan title",',
		'  "description": "one or two sentence summary",',
		'  "steps": [',
		'    {"description": "what this step does", "agentType": "planner"}',
		"  ]",
		"}",
		"",
		"IMPORTANT:",
		f"- Use between 3 and {MAX_STEPS} steps",
		f"- agentType must be one of: {roles}",
		"- Steps run in order, each one building on the previous ones",
	]
	return "\n".join(lines)


FENCED_BLOCK = re.compile(r"```[\w-]*\s*(.*?)```", re.DOTALL)


def _extract_json(response: str) -> dict:
	"""Pull the plan object out of a model response."""
	for block in FENCED_BLOCK.findall(response):
		try:
			data = json.loads(block)
		except json.JSONDecodeError:
			continue
		if isinstance(data, dict):
			return data

	# First complete object; trailing prose is ignored
	decoder = json.JSONDecoder()
	start = response.find("{")
	while start != -1:
		try:
			data, _ = decoder.raw_decode(response, start)
			return data
		except json.JSONDecodeError:
			start = response.find("{", start + 1)
	raise PlanFormatError("No JSON object in response")


def parse_plan_response(response: str, user_input: str) -> Plan:
	"""
	Parse the planner model's answer into a draft Plan.

	Raises:
		PlanFormatError: If the answer is not a usable decomposition
	"""
	data = _extract_json(response)

	if not isinstance(data, dict):
		raise PlanFormatError("Plan JSON is not an object")

	raw_steps = data.get("steps")
	if not isinstance(raw_steps, list) or len(raw_steps) < MIN_STEPS:
		raise PlanFormatError("Plan JSON has no steps")

	if len(raw_steps) > MAX_STEPS:
		logger.warning(f"Planner returned {len(raw_steps)} steps, keeping the first {MAX_STEPS}")
		raw_steps = raw_steps[:MAX_STEPS]

	steps = []
	for i, raw in enumerate(raw_steps, 1):
		if not isinstance(raw, dict):
			raise PlanFormatError(f"Step {i} is not an object")
		description = raw.get("description")
		if not isinstance(description, str) or not description.strip():
			raise PlanFormatError(f"Step {i} has no description")
		agent_value = raw.get("agentType", raw.get("agent_type"))
		try:
			agent_type = AgentType(agent_value)
		except ValueError as e:
			raise PlanFormatError(f"Step {i} has unknown agentType: {agent_value!r}") from e

		steps.append(PlanStep(id=f"step_{i}", description=description.strip(), agent_type=agent_type))

	title = data.get("title")
	if not isinstance(title, str) or not title.strip():
		title = build_fallback_plan(user_input).title
	description = data.get("description")
	if not isinstance(description, str):
		description = ""

	return Plan(
		title=title.strip(),
		description=description.strip(),
		steps=steps,
		status=PlanStatus.DRAFT,
	)


class PlanBuilder:
	"""
	Builds draft plans with the planner agent.

	``build`` always returns a Plan; it never raises for provider or
	format failures.
	"""

	def __init__(
		self,
		provider: CompletionProvider,
		registry: AgentRegistry,
		model: Optional[str] = None,
		timeout: Optional[float] = None,
	):
		self.provider = provider
		self.registry = registry
		self.model = model
		self.timeout = timeout

	async def build(self, user_input: str) -> Plan:
		"""
		Decompose ``user_input`` into a draft plan.

		Args:
			user_input: The raw user message

		Returns:
			A Plan in draft status with 1 to 5 steps
		"""
		self.registry.activate(AgentType.PLANNER, AgentStatus.THINKING)

		prompt = build_planning_prompt(user_input)
		try:
			result = await asyncio.wait_for(
				self.provider.complete(prompt, self.model, PLANNING_OPTIONS),
				timeout=self.timeout,
			)
		except Exception as e:
			logger.error(f"Plan generation request failed: {e!r}, using fallback plan")
			self.registry.set_status(AgentType.PLANNER, AgentStatus.ERROR)
			return build_fallback_plan(user_input)

		try:
			plan = parse_plan_response(result.text, user_input)
			logger.info(f"Generated plan {plan.id} with {len(plan.steps)} steps ({result.source.value})")
		except Exception as e:
			logger.warning(f"Could not parse planner response: {e!r}, using fallback plan")
			plan = build_fallback_plan(user_input)

		self.registry.set_status(AgentType.PLANNER, AgentStatus.COMPLETE)
		return plan
