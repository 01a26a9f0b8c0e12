"""Plans module - plan data model and per-session persistence."""

from .models import Message, MessageType, Plan, PlanStatus, PlanStep, StepStatus
from .store import PlanStateStore

__all__ = [
	"Message",
	"MessageType",
	"Plan",
	"PlanStatus",
	"PlanStep",
	"StepStatus",
	"PlanStateStore",
]
