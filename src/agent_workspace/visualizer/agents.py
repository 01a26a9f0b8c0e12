"""Rich view of the agent roster."""

from typing import Optional

from rich.console import Console
from rich.table import Table

from ..agents.registry import Agent, AgentType
from .utils import AGENT_STATUS_STYLES


def render_agent_roster(
	agents: list[Agent],
	console: Optional[Console] = None,
	current: Optional[AgentType] = None,
) -> None:
	"""Render the agents and their statuses, marking the current agent."""
	console = console or Console()

	table = Table(title="Agents")
	table.add_column("", width=2)
	table.add_column("Agent", style="bold")
	table.add_column("Status")
	table.add_column("Role", style="dim")

	for agent in agents:
		style = AGENT_STATUS_STYLES.get(agent.status, "")
		marker = "*" if current is not None and agent.id == current else ""
		table.add_row(
			agent.avatar,
			f"{agent.name} {marker}".rstrip(),
			f"[{style}]{agent.status.value}[/{style}]",
			agent.description,
		)

	console.print(table)
