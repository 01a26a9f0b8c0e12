"""CLI for agent-workspace: serve, web, run, history, and doctor commands."""

import argparse
import asyncio
import json
import os
import platform
import sys
from pathlib import Path

from importlib.metadata import version as pkg_version

from dotenv import load_dotenv
from rich.console import Console

from .config import Config, load_config
from .logging_config import setup_logging


def cmd_serve(args: argparse.Namespace) -> None:
	"""Run the MCP server (stdio transport)."""
	log_level = getattr(args, "log_level", None)
	if log_level:
		# The server module loads config and sets up logging on import
		os.environ["AGENT_WORKSPACE_LOG_LEVEL"] = log_level
	from .server import mcp
	mcp.run()


def cmd_web(args: argparse.Namespace) -> None:
	"""Launch the web workspace."""
	from .web import run_web
	run_web(port=args.port, open_browser=not args.no_open)


async def _run_request(config: Config, args: argparse.Namespace, console: Console) -> int:
	from .orchestrator.workspace import WorkMode, WorkspaceRegistry
	from .visualizer import render_agent_roster, render_plan_progress, render_transcript

	workspaces = WorkspaceRegistry.from_config(config)
	if args.no_delay:
		workspaces.step_delay = 0.0
	try:
		workspace = await workspaces.get(args.session)
		mode = WorkMode(args.mode)

		messages = await workspace.submit(args.text, mode)
		if mode == WorkMode.PLAN and workspace.awaiting_confirmation and args.yes:
			messages.extend(await workspace.submit("yes", mode))

		render_transcript(messages, console)
		if workspace.current_plan is not None:
			render_plan_progress(workspace.current_plan, console, show_results=False)
		render_agent_roster(workspace.agents, console, current=workspace.current_agent)

		if workspace.awaiting_confirmation:
			console.print("[dim]Plan saved as draft. Re-run with --yes, or reply 'yes' with --mode plan.[/dim]")
		return 0
	finally:
		if workspaces.store is not None:
			await workspaces.store.close()


def cmd_run(args: argparse.Namespace) -> None:
	"""Submit a request to a workspace and print the transcript."""
	config = load_config()
	console = Console()
	sys.exit(asyncio.run(_run_request(config, args, console)))


async def _load_history(config: Config, session_id: str):
	from .plans.store import PlanStateStore

	store = PlanStateStore(str(config.state_db_path))
	try:
		return await store.load_plan_history(session_id), await store.load_current_plan(session_id)
	finally:
		await store.close()


def cmd_history(args: argparse.Namespace) -> None:
	"""Show the plan history for a session, or one plan in detail."""
	from .visualizer import render_plan_history, render_plan_progress, render_plan_summary

	config = load_config()
	console = Console()
	plans, current = asyncio.run(_load_history(config, args.session))

	if args.plan_id:
		candidates = list(plans) + ([current] if current else [])
		plan = next((p for p in candidates if p.id == args.plan_id), None)
		if plan is None:
			console.print(f"[red]Plan not found: {args.plan_id}[/red]")
			sys.exit(1)
		render_plan_summary(plan, console)
		render_plan_progress(plan, console, show_results=True)
		return

	render_plan_history(plans, console)
	if current is not None and all(p.id != current.id for p in plans):
		console.print(f"[dim]Current draft: {current.id} - {current.title}[/dim]")


def _check_optional_extras() -> list[tuple[str, str]]:
	"""Check optional extras installation status.

	Returns list of (extra_name, status_string) tuples.
	"""
	extras = {
		"web": ["starlette", "uvicorn"],
	}
	results = []
	for extra_name, packages in extras.items():
		installed = []
		for pkg in packages:
			try:
				ver = pkg_version(pkg)
				installed.append(f"{pkg} {ver}")
			except Exception:
				pass
		if installed:
			results.append((extra_name, ", ".join(installed)))
		else:
			results.append((extra_name, f"NOT INSTALLED (pip install agent-workspace[{extra_name}])"))
	return results


def _check_config_toml(config_dir: Path) -> tuple[str, str | None]:
	"""Validate config.toml. Returns (status, issue_or_none)."""
	import tomllib

	toml_path = config_dir / "config.toml"
	if not toml_path.exists():
		return "not found (optional)", None
	try:
		with open(toml_path, "rb") as f:
			tomllib.load(f)
		return "valid", None
	except tomllib.TOMLDecodeError as e:
		return f"INVALID ({e})", f"config.toml parse error: {e}"


def _check_secrets_json(secrets_file: Path) -> tuple[str, str | None]:
	"""Validate secrets.json. Returns (status, issue_or_none)."""
	if not secrets_file.exists():
		return "not found (optional)", None
	try:
		with open(secrets_file) as f:
			data = json.load(f)
		keys = data.get("keys", {})
		if not isinstance(keys, dict):
			return "INVALID (keys is not a dict)", "secrets.json: 'keys' field is not a dict"
		active = sum(1 for v in keys.values() if isinstance(v, dict) and v.get("active", True))
		return f"{len(keys)} secrets ({active} active)", None
	except (json.JSONDecodeError, IOError) as e:
		return f"INVALID ({e})", f"secrets.json unreadable: {e}"


def _check_provider(config: Config) -> tuple[str, str | None]:
	"""Report whether completions go to OpenRouter or the simulator."""
	from .llm.completion import OpenRouterProvider

	provider = OpenRouterProvider.from_config(config)
	if provider.is_configured():
		return f"openrouter ({config.default_model})", None
	return "simulated (no API key)", "No OpenRouter API key: responses will be simulated"


def _check_server_startup() -> tuple[str, str | None]:
	"""Try importing and counting registered tools. Returns (status, issue_or_none)."""
	try:
		from .server import mcp as server_instance
		tools = server_instance._tool_manager._tools
		return f"OK ({len(tools)} tools registered)", None
	except Exception as e:
		return f"FAILED ({e})", f"Server startup failed: {e}"


def cmd_doctor(args: argparse.Namespace) -> None:
	"""Health check - verify installation and configuration."""
	print("agent-workspace doctor")
	print(f"{'=' * 40}")

	config = load_config()
	issues: list[str] = []

	py_ver = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
	print(f"  Python:       {py_ver}")
	print(f"  Platform:     {platform.system()} {platform.machine()}")
	print()

	print("  Core deps:")
	core_deps = ["aiohttp", "aiosqlite", "mcp", "platformdirs", "pydantic", "python-dotenv", "rich"]
	for dep in core_deps:
		try:
			print(f"    {dep:22s} {pkg_version(dep)}")
		except Exception:
			print(f"    {dep:22s} NOT INSTALLED")
			issues.append(f"{dep} package not installed")
	print()

	print("  Optional extras:")
	for extra_name, status in _check_optional_extras():
		print(f"    {extra_name:22s} {status}")
	print()

	print("  Config:")
	toml_status, toml_issue = _check_config_toml(config.config_dir)
	print(f"    config.toml:         {toml_status}")
	if toml_issue:
		issues.append(toml_issue)

	secrets_status, secrets_issue = _check_secrets_json(config.secrets_file)
	print(f"    secrets.json:        {secrets_status}")
	if secrets_issue:
		issues.append(secrets_issue)

	provider_status, provider_issue = _check_provider(config)
	print(f"    completions:         {provider_status}")
	if provider_issue:
		issues.append(provider_issue)
	print(f"    state db:            {config.state_db_path}")
	print()

	print("  Server:")
	server_status, server_issue = _check_server_startup()
	print(f"    {server_status}")
	if server_issue:
		issues.append(server_issue)
	print()

	if issues:
		print(f"  {len(issues)} issue(s) found:")
		for issue in issues:
			print(f"    - {issue}")
		sys.exit(1)
	else:
		print("  All checks passed.")


def main() -> None:
	"""CLI entry point."""
	load_dotenv()

	parser = argparse.ArgumentParser(
		prog="agent-workspace",
		description="Multi-agent plan and execute workspace backed by OpenRouter",
	)
	parser.add_argument("--log-level", type=str, default=None, help="Override the log level")
	subparsers = parser.add_subparsers(dest="command")

	# serve
	serve_parser = subparsers.add_parser("serve", help="Run MCP server (stdio)")
	serve_parser.set_defaults(func=cmd_serve)

	# web
	web_parser = subparsers.add_parser("web", help="Launch web workspace")
	web_parser.add_argument("--port", type=int, default=8430, help="Server port (default: 8430)")
	web_parser.add_argument("--no-open", action="store_true", help="Don't auto-open browser")
	web_parser.set_defaults(func=cmd_web)

	# run
	run_parser = subparsers.add_parser("run", help="Submit a request and print the result")
	run_parser.add_argument("text", type=str, help="The request")
	run_parser.add_argument(
		"--mode", choices=["act", "plan", "ask"], default="act", help="Work mode (default: act)"
	)
	run_parser.add_argument("--yes", action="store_true", help="Confirm and execute a plan-mode draft")
	run_parser.add_argument("--session", type=str, default="default", help="Workspace session")
	run_parser.add_argument("--no-delay", action="store_true", help="Skip the pause between steps")
	run_parser.set_defaults(func=cmd_run)

	# history
	history_parser = subparsers.add_parser("history", help="Show confirmed plans")
	history_parser.add_argument("plan_id", nargs="?", default=None, help="Plan ID for detail view")
	history_parser.add_argument("--session", type=str, default="default", help="Workspace session")
	history_parser.set_defaults(func=cmd_history)

	# doctor
	doctor_parser = subparsers.add_parser("doctor", help="Health check")
	doctor_parser.set_defaults(func=cmd_doctor)

	args = parser.parse_args()

	if not args.command:
		parser.print_help()
		sys.exit(1)

	if args.command != "serve":
		config = load_config()
		setup_logging(args.log_level or config.log_level, config.log_dir)

	args.func(args)
