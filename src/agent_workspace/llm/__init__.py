"""LLM module - completion providers with simulated fallback."""

from .completion import (
	CompletionOptions,
	CompletionProvider,
	CompletionResult,
	CompletionSource,
	OpenRouterProvider,
	SimulatedProvider,
	simulate_completion,
)

__all__ = [
	"CompletionOptions",
	"CompletionProvider",
	"CompletionResult",
	"CompletionSource",
	"OpenRouterProvider",
	"SimulatedProvider",
	"simulate_completion",
]
