"""Visualizer package - Rich terminal views for the agent workspace."""

from .agents import render_agent_roster
from .plan_progress import render_plan_history, render_plan_progress, render_plan_summary
from .transcript import render_transcript

__all__ = [
	"render_agent_roster",
	"render_plan_history",
	"render_plan_progress",
	"render_plan_summary",
	"render_transcript",
]
