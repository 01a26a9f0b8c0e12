"""Rich views for plan progress visualization."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from ..agents.registry import AGENT_PROFILES
from ..plans.models import Plan, StepStatus
from .utils import format_timestamp, truncate

STATUS_ICONS = {
	StepStatus.PENDING: "[dim][ ][/dim]",
	StepStatus.IN_PROGRESS: "[yellow][~][/yellow]",
	StepStatus.COMPLETE: "[green]\\[x][/green]",
	StepStatus.ERROR: "[red][!][/red]",
}


def render_plan_progress(plan: Plan, console: Optional[Console] = None, show_results: bool = False) -> None:
	"""Render a plan as a Rich Tree of steps, one branch per step."""
	console = console or Console()

	progress = plan.get_progress()
	pct = progress["percent_complete"]

	tree = Tree(
		f"[bold]{escape(plan.title)}[/bold]  "
		f"[dim]({progress['finished_steps']}/{progress['total_steps']} steps, {pct:.0f}%)[/dim]"
	)

	for step in plan.steps:
		icon = STATUS_ICONS.get(step.status, "[ ]")
		profile = AGENT_PROFILES[step.agent_type]
		branch = tree.add(f"{icon} {profile['avatar']} [bold]{profile['name']}[/bold] {escape(step.description)}")
		if show_results and step.result:
			branch.add(f"[dim]{escape(truncate(step.result, 120))}[/dim]")

	console.print(tree)


def render_plan_summary(plan: Plan, console: Optional[Console] = None) -> None:
	"""Render a summary panel for a plan."""
	console = console or Console()

	progress = plan.get_progress()
	pct = progress["percent_complete"]

	lines = []
	lines.append(f"[bold]Title:[/bold] {escape(plan.title)}")
	if plan.description:
		lines.append(f"[bold]Description:[/bold] {escape(plan.description)}")
	lines.append(f"[bold]Status:[/bold] {plan.status.value}")
	lines.append(f"[bold]Created:[/bold] {format_timestamp(plan.created_at)}")
	lines.append("")
	lines.append(
		f"[bold]Progress:[/bold] {progress['finished_steps']}/{progress['total_steps']} steps ({pct:.0f}%)"
	)
	if progress["failed_steps"]:
		lines.append(f"[bold red]Failed:[/bold red] {progress['failed_steps']}")

	console.print(Panel("\n".join(lines), title=f"Plan: {plan.id}", border_style="cyan"))


def render_plan_history(plans: list[Plan], console: Optional[Console] = None) -> None:
	"""Render the confirmed plan history as a table."""
	console = console or Console()

	if not plans:
		console.print("[dim]No confirmed plans yet.[/dim]")
		return

	table = Table(title=f"Plan History ({len(plans)})")
	table.add_column("ID", style="cyan")
	table.add_column("Title")
	table.add_column("Status")
	table.add_column("Steps", justify="right")
	table.add_column("Created")

	for plan in plans:
		progress = plan.get_progress()
		table.add_row(
			plan.id,
			escape(truncate(plan.title, 50)),
			plan.status.value,
			f"{progress['finished_steps']}/{progress['total_steps']}",
			format_timestamp(plan.created_at),
		)

	console.print(table)
