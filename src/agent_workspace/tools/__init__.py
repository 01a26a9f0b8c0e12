"""MCP tool registration - modular tool definitions."""

import logging

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..orchestrator.workspace import WorkspaceRegistry
from .core import register_core_tools
from .secrets import register_secrets_tools
from .workspace import register_workspace_tools

logger = logging.getLogger(__name__)


def register_all_tools(mcp: FastMCP, config: Config, workspaces: WorkspaceRegistry) -> None:
	"""Register all MCP tools."""
	register_core_tools(mcp, config)
	register_secrets_tools(mcp, config)
	register_workspace_tools(mcp, config, workspaces)
