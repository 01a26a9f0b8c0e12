"""Web workspace for agent-workspace: JSON API plus a single-page view."""

from __future__ import annotations

import webbrowser


def create_app(workspaces=None) -> object:
	"""Create the Starlette ASGI application."""
	from .app import build_app

	return build_app(workspaces=workspaces)


def run_web(port: int = 8430, open_browser: bool = True) -> None:
	"""Run the web workspace server."""
	try:
		import uvicorn
	except ImportError:
		raise SystemExit(
			"Web extras not installed. Install with: pip install -e '.[web]'"
		)

	app = create_app()

	if open_browser:
		import threading

		def _open():
			import time
			time.sleep(0.8)
			webbrowser.open(f"http://localhost:{port}")

		threading.Thread(target=_open, daemon=True).start()

	print(f"Workspace running at http://localhost:{port}")
	print("Press Ctrl+C to stop.")
	uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")
