"""Shared utilities for visualizer views."""

from datetime import datetime

from ..agents.registry import AgentStatus
from ..llm.completion import CompletionSource

AGENT_STATUS_STYLES = {
	AgentStatus.IDLE: "dim",
	AgentStatus.THINKING: "yellow",
	AgentStatus.ACTIVE: "bold yellow",
	AgentStatus.COMPLETE: "green",
	AgentStatus.ERROR: "red",
}

SOURCE_LABELS = {
	CompletionSource.REMOTE: "",
	CompletionSource.SIMULATED: "[dim](simulated)[/dim]",
	CompletionSource.FALLBACK: "[red](fallback)[/red]",
}


def format_timestamp(iso_str: str) -> str:
	"""Format an ISO timestamp as relative time (e.g. '2m ago') or absolute."""
	try:
		dt = datetime.fromisoformat(iso_str)
		delta = datetime.now() - dt
		total_secs = int(delta.total_seconds())

		if total_secs < 0:
			return iso_str[:19]
		if total_secs < 60:
			return f"{total_secs}s ago"
		if total_secs < 3600:
			return f"{total_secs // 60}m ago"
		if total_secs < 86400:
			return f"{total_secs // 3600}h ago"
		return f"{total_secs // 86400}d ago"
	except (ValueError, TypeError):
		return str(iso_str)[:19]


def truncate(text: str, max_len: int = 80) -> str:
	"""Shorten text to one table-friendly line."""
	if not text:
		return ""
	line = " ".join(text.split())
	if len(line) <= max_len:
		return line
	return line[:max_len - 3] + "..."
