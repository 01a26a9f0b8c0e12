"""Rich view of a chat transcript."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..agents.registry import AGENT_PROFILES
from ..llm.completion import CompletionSource
from ..plans.models import Message, MessageType
from .utils import SOURCE_LABELS


def render_transcript(messages: list[Message], console: Optional[Console] = None) -> None:
	"""Render user and agent messages as panels, in order."""
	console = console or Console()

	for message in messages:
		if message.type == MessageType.USER:
			title = "You (voice)" if message.is_voice else "You"
			console.print(Panel(escape(message.content), title=title, title_align="right", border_style="blue"))
			continue

		if message.agent_type is not None:
			profile = AGENT_PROFILES[message.agent_type]
			title = f"{profile['avatar']} {profile['name']}"
		else:
			title = "Assistant"
		label = SOURCE_LABELS.get(message.source, "") if message.source else ""
		if label:
			title = f"{title} {label}"
		border = "red" if message.source == CompletionSource.FALLBACK else "green"
		console.print(Panel(escape(message.content), title=title, title_align="left", border_style=border))
