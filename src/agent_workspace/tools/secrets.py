"""API key management tools."""

import json

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..secrets import describe_secrets, set_secret


def register_secrets_tools(mcp: FastMCP, config: Config) -> None:
	"""Register API key tools. Values are never returned."""

	@mcp.tool()
	async def list_api_keys() -> str:
		"""
		List stored API keys with their status. Does NOT show actual values.
		"""
		return json.dumps({
			"secrets": describe_secrets(config.secrets_file),
			"file": str(config.secrets_file),
		}, indent=2)

	@mcp.tool()
	async def set_api_key(key_name: str, value: str, notes: str = "") -> str:
		"""
		Store an API key (e.g. "openrouter").

		The OpenRouter key is picked up on the next server start unless
		OPENROUTER_API_KEY is set in the environment.

		Args:
			key_name: Name of the key
			value: The key itself
			notes: Optional notes
		"""
		set_secret(config.secrets_file, key_name, value, notes)
		return json.dumps({
			"success": True,
			"message": f"Secret '{key_name}' saved",
		})
