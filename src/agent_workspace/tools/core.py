"""Core health check tool."""

import json

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..llm.completion import OpenRouterProvider


def register_core_tools(mcp: FastMCP, config: Config) -> None:
	"""Register core tools."""

	@mcp.tool()
	async def health_check() -> str:
		"""
		Check the health of the agent-workspace server.
		Returns status of all components.
		"""
		provider = OpenRouterProvider.from_config(config)
		status = {
			"server": "running",
			"config_dir": str(config.config_dir),
			"data_dir": str(config.data_dir),
			"state_db_exists": config.state_db_path.exists(),
			"completion_provider": "openrouter" if provider.is_configured() else "simulated",
			"base_url": config.openrouter_base_url,
			"default_model": config.default_model,
		}
		return json.dumps(status, indent=2)
