"""agent-workspace MCP server."""

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from .config import load_config
from .logging_config import setup_logging
from .orchestrator.workspace import WorkspaceRegistry
from .tools import register_all_tools

load_dotenv()

mcp = FastMCP("agent-workspace")
config = load_config()
setup_logging(config.log_level, config.log_dir)
workspaces = WorkspaceRegistry.from_config(config)
register_all_tools(mcp, config, workspaces)
