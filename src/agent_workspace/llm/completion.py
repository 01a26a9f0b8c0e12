"""
Completion Provider - prompt in, text out, never raises on transport errors.

Talks to an OpenAI-compatible ``/chat/completions`` endpoint (OpenRouter by
default). When no API key is configured, or the remote call fails for any
reason, a deterministic keyword-driven simulated answer is returned instead.
The result carries a ``CompletionSource`` tag so callers can tell a real
answer from a simulated or degraded one.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

import aiohttp

from ..config import DEFAULT_BASE_URL, DEFAULT_MODEL

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_MESSAGE = "You are a helpful AI assistant."
PLACEHOLDER_API_KEY = "your_openrouter_api_key_here"
EMPTY_RESPONSE = "Empty response"

ChunkCallback = Callable[[str], Union[None, Awaitable[None]]]


class CompletionSource(str, Enum):
	"""Where the text of a completion came from."""
	REMOTE = "remote"
	SIMULATED = "simulated"  # no credential configured
	FALLBACK = "fallback"  # remote call failed at runtime


class CompletionError(Exception):
	"""Raised inside the provider when the remote call cannot produce text."""
	pass


@dataclass
class CompletionOptions:
	"""Sampling options for a single completion."""
	max_tokens: int = 1000
	temperature: float = 0.7
	system_message: str = DEFAULT_SYSTEM_MESSAGE


@dataclass
class CompletionResult:
	"""Text returned by a provider plus its provenance."""
	text: str
	source: CompletionSource = CompletionSource.REMOTE
	model: str = ""
	error: Optional[str] = None
	usage: dict = field(default_factory=dict)

	@property
	def degraded(self) -> bool:
		return self.source != CompletionSource.REMOTE


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
	return any(k in text for k in keywords)


PLAN_KEYWORDS = ("plan", "planner", "план", "планировщик")
CODE_KEYWORDS = ("code", "program", "код", "программа")
ERROR_KEYWORDS = ("error", "fix", "bug", "ошибка", "исправить")


def simulate_completion(prompt: str) -> str:
	"""Produce a deterministic templated answer based on keywords in the prompt."""
	lower_prompt = prompt.lower()

	if _contains_any(lower_prompt, PLAN_KEYWORDS):
		return (
			"Plan for the task:\n\n"
			f"1. Requirements analysis: {prompt[:100]}...\n"
			"2. Solution architecture design\n"
			"3. Implementation of the main components\n"
			"4. Testing and debugging\n"
			"5. Final quality check\n\n"
			"Do you want to execute this plan?"
		)

	if _contains_any(lower_prompt, CODE_KEYWORDS):
		return (
			"Creating code for your request:\n\n"
			"```python\n"
			f"# Example code for: {prompt[:50]}...\n"
			"def example_function():\n"
			"    print(\"Implementing your request\")\n"
			"    return \"Execution result\"\n"
			"```\n\n"
			"The code is ready to use!"
		)

	if _contains_any(lower_prompt, ERROR_KEYWORDS):
		return (
			"Analyzing the error and proposing a fix:\n\n"
			f"Detected problem: {prompt[:80]}...\n\n"
			"Recommended solution:\n"
			"1. Check the configuration\n"
			"2. Update dependencies\n"
			"3. Apply the fixes\n\n"
			"The error should be resolved!"
		)

	suffix = "..." if len(prompt) > 100 else ""
	return (
		f"Understood your request: \"{prompt[:100]}{suffix}\"\n\n"
		"Processing the task and will deliver a result that matches your requirements."
	)


class CompletionProvider(ABC):
	"""Turns a prompt into model-generated text."""

	default_model: str = DEFAULT_MODEL

	@abstractmethod
	async def complete(
		self,
		prompt: str,
		model: Optional[str] = None,
		options: Optional[CompletionOptions] = None,
	) -> CompletionResult:
		"""Return a completion for ``prompt``."""

	async def generate_completion(
		self,
		prompt: str,
		model: Optional[str] = None,
		*,
		max_tokens: int = 1000,
		temperature: float = 0.7,
		system_message: str = DEFAULT_SYSTEM_MESSAGE,
	) -> str:
		"""Plain-text variant of ``complete``."""
		options = CompletionOptions(
			max_tokens=max_tokens,
			temperature=temperature,
			system_message=system_message,
		)
		result = await self.complete(prompt, model, options)
		return result.text


class OpenRouterProvider(CompletionProvider):
	"""
	OpenRouter (or any OpenAI-compatible) chat completion client.

	Usage:
		provider = OpenRouterProvider(api_key="sk-or-...")
		text = await provider.generate_completion("Summarise this", temperature=0.3)
	"""

	def __init__(
		self,
		api_key: str = "",
		base_url: str = DEFAULT_BASE_URL,
		default_model: str = DEFAULT_MODEL,
		timeout: float = 60.0,
		app_url: str = "http://localhost",
		app_title: str = "AI Agent Workspace",
	):
		self.api_key = api_key or ""
		self.base_url = base_url.rstrip("/")
		self.default_model = default_model
		self.timeout = timeout
		self.app_url = app_url
		self.app_title = app_title

	@classmethod
	def from_config(cls, config) -> "OpenRouterProvider":
		"""Build a provider from a ``Config``."""
		return cls(
			api_key=config.openrouter_api_key,
			base_url=config.openrouter_base_url,
			default_model=config.default_model,
			timeout=config.request_timeout,
			app_url=config.app_url,
			app_title=config.app_title,
		)

	def is_configured(self) -> bool:
		return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY

	def _headers(self) -> dict:
		return {
			"Authorization": f"Bearer {self.api_key}",
			"Content-Type": "application/json",
			"HTTP-Referer": self.app_url,
			"X-Title": self.app_title,
		}

	def _payload(self, prompt: str, model: str, options: CompletionOptions, stream: bool) -> dict:
		return {
			"model": model,
			"messages": [
				{"role": "system", "content": options.system_message},
				{"role": "user", "content": prompt},
			],
			"max_tokens": options.max_tokens,
			"temperature": options.temperature,
			"stream": stream,
		}

	def _simulated(self, prompt: str, model: str, source: CompletionSource, error: Optional[str] = None) -> CompletionResult:
		return CompletionResult(
			text=simulate_completion(prompt),
			source=source,
			model=model,
			error=error,
		)

	async def complete(
		self,
		prompt: str,
		model: Optional[str] = None,
		options: Optional[CompletionOptions] = None,
	) -> CompletionResult:
		model = model or self.default_model
		options = options or CompletionOptions()

		if not self.is_configured():
			logger.debug("OpenRouter API key not configured, simulating completion")
			return self._simulated(prompt, model, CompletionSource.SIMULATED)

		try:
			data = await self._post_completion(prompt, model, options)
			text, usage = self._extract_content(data)
		except Exception as e:
			logger.error(f"OpenRouter completion failed for model {model}: {e}")
			return self._simulated(prompt, model, CompletionSource.FALLBACK, error=str(e))

		return CompletionResult(text=text, source=CompletionSource.REMOTE, model=model, usage=usage)

	async def _post_completion(self, prompt: str, model: str, options: CompletionOptions) -> dict:
		"""Single POST to /chat/completions. Raises on any non-usable response."""
		async with aiohttp.ClientSession(
			timeout=aiohttp.ClientTimeout(total=self.timeout),
		) as session:
			async with session.post(
				f"{self.base_url}/chat/completions",
				headers=self._headers(),
				json=self._payload(prompt, model, options, stream=False),
			) as response:
				if response.status < 200 or response.status >= 300:
					detail = await self._error_detail(response)
					raise CompletionError(f"OpenRouter API error: {response.status} - {detail}")
				try:
					return await response.json(content_type=None)
				except json.JSONDecodeError as e:
					raise CompletionError(f"Malformed response body: {e}") from e

	@staticmethod
	async def _error_detail(response: aiohttp.ClientResponse) -> str:
		try:
			body = await response.json(content_type=None)
			return body.get("error", {}).get("message") or "Unknown error"
		except (json.JSONDecodeError, AttributeError, aiohttp.ClientError):
			return "Unknown error"

	@staticmethod
	def _extract_content(data) -> tuple[str, dict]:
		if not isinstance(data, dict):
			raise CompletionError("Response body is not a JSON object")
		choices = data.get("choices") or []
		if not isinstance(choices, list) or not choices:
			raise CompletionError("Empty choices in API response")
		choice = choices[0] if isinstance(choices[0], dict) else {}
		message = choice.get("message") or {}
		if not isinstance(message, dict):
			raise CompletionError("Malformed message in API response")
		content = message.get("content")
		if content is not None and not isinstance(content, str):
			raise CompletionError("Non-text content in API response")
		return content or EMPTY_RESPONSE, data.get("usage") or {}

	async def stream_completion(
		self,
		prompt: str,
		model: Optional[str] = None,
		options: Optional[CompletionOptions] = None,
		on_chunk: Optional[ChunkCallback] = None,
	) -> CompletionResult:
		"""
		Stream a completion, forwarding each content delta to ``on_chunk``.

		Falls back to ``complete`` if the streaming request fails.
		"""
		model = model or self.default_model
		options = options or CompletionOptions()

		if not self.is_configured():
			result = self._simulated(prompt, model, CompletionSource.SIMULATED)
			if on_chunk:
				for word in result.text.split(" "):
					await _emit(on_chunk, word + " ")
			return result

		try:
			text = await self._stream_request(prompt, model, options, on_chunk)
		except Exception as e:
			logger.error(f"OpenRouter stream failed for model {model}: {e}")
			return await self.complete(prompt, model, options)

		return CompletionResult(text=text, source=CompletionSource.REMOTE, model=model)

	async def _stream_request(
		self,
		prompt: str,
		model: str,
		options: CompletionOptions,
		on_chunk: Optional[ChunkCallback],
	) -> str:
		full_response = []
		async with aiohttp.ClientSession(
			timeout=aiohttp.ClientTimeout(total=self.timeout),
		) as session:
			async with session.post(
				f"{self.base_url}/chat/completions",
				headers=self._headers(),
				json=self._payload(prompt, model, options, stream=True),
			) as response:
				if response.status < 200 or response.status >= 300:
					raise CompletionError(f"OpenRouter API error: {response.status}")

				async for raw_line in response.content:
					line = raw_line.decode("utf-8", errors="replace").strip()
					if not line.startswith("data: "):
						continue
					payload = line[6:]
					if payload == "[DONE]":
						break
					try:
						parsed = json.loads(payload)
					except json.JSONDecodeError:
						# Partial chunk
						continue
					choices = parsed.get("choices") or [{}]
					content = (choices[0].get("delta") or {}).get("content")
					if isinstance(content, str) and content:
						full_response.append(content)
						if on_chunk:
							await _emit(on_chunk, content)

		return "".join(full_response)


async def _emit(callback: ChunkCallback, chunk: str) -> None:
	result = callback(chunk)
	if result is not None and hasattr(result, "__await__"):
		await result


class SimulatedProvider(CompletionProvider):
	"""Provider that always answers with ``simulate_completion``."""

	async def complete(
		self,
		prompt: str,
		model: Optional[str] = None,
		options: Optional[CompletionOptions] = None,
	) -> CompletionResult:
		return CompletionResult(
			text=simulate_completion(prompt),
			source=CompletionSource.SIMULATED,
			model=model or self.default_model,
		)
