"""
Plan State Store - SQLite-backed key-value persistence for workspaces.

Each session owns two independently keyed values:
- ``agent-current-plan``: the current Plan (or null)
- ``agent-plans``: the plan history array

Every row carries a schema version; rows written by another version are
ignored on load.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import aiosqlite

from .models import Plan

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

CURRENT_PLAN_KEY = "agent-current-plan"
PLAN_HISTORY_KEY = "agent-plans"


class PlanStateStore:
	"""
	Per-session state storage.

	Usage:
		store = PlanStateStore("data/workspace.db")
		await store.init()

		await store.save_current_plan("default", plan)
		plan = await store.load_current_plan("default")
	"""

	def __init__(self, db_path: str):
		"""Initialize the store."""
		self.db_path = str(db_path)
		if self.db_path != ":memory:":
			Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
		self._db: Optional[aiosqlite.Connection] = None

	async def init(self):
		"""Initialize the database schema."""
		self._db = await aiosqlite.connect(self.db_path)
		self._db.row_factory = aiosqlite.Row

		await self._db.execute("""
			CREATE TABLE IF NOT EXISTS workspace_state (
				session_id TEXT NOT NULL,
				key TEXT NOT NULL,
				schema_version INTEGER NOT NULL,
				data TEXT NOT NULL,
				updated_at TEXT NOT NULL,
				PRIMARY KEY (session_id, key)
			)
		""")

		await self._db.commit()
		logger.info(f"Plan state store initialized: {self.db_path}")

	async def close(self):
		"""Close the database connection."""
		if self._db:
			await self._db.close()
			self._db = None

	async def _put(self, session_id: str, key: str, value: Any) -> None:
		if not self._db:
			await self.init()

		await self._db.execute(
			"""
			INSERT INTO workspace_state (session_id, key, schema_version, data, updated_at)
			VALUES (?, ?, ?, ?, ?)
			ON CONFLICT(session_id, key) DO UPDATE SET
				schema_version = excluded.schema_version,
				data = excluded.data,
				updated_at = excluded.updated_at
			""",
			(session_id, key, SCHEMA_VERSION, json.dumps(value), datetime.now().isoformat()),
		)
		await self._db.commit()

	async def _get(self, session_id: str, key: str) -> Any:
		if not self._db:
			await self.init()

		async with self._db.execute(
			"SELECT schema_version, data FROM workspace_state WHERE session_id = ? AND key = ?",
			(session_id, key),
		) as cursor:
			row = await cursor.fetchone()

		if not row:
			return None

		if row["schema_version"] != SCHEMA_VERSION:
			logger.warning(
				f"Ignoring {key} for session {session_id}: "
				f"schema version {row['schema_version']} != {SCHEMA_VERSION}"
			)
			return None

		return json.loads(row["data"])

	async def save_current_plan(self, session_id: str, plan: Optional[Plan]) -> None:
		value = plan.model_dump(mode="json") if plan else None
		await self._put(session_id, CURRENT_PLAN_KEY, value)

	async def load_current_plan(self, session_id: str) -> Optional[Plan]:
		data = await self._get(session_id, CURRENT_PLAN_KEY)
		if not data:
			return None
		return Plan.model_validate(data)

	async def save_plan_history(self, session_id: str, plans: list[Plan]) -> None:
		await self._put(session_id, PLAN_HISTORY_KEY, [p.model_dump(mode="json") for p in plans])

	async def load_plan_history(self, session_id: str) -> list[Plan]:
		data = await self._get(session_id, PLAN_HISTORY_KEY)
		if not data:
			return []
		return [Plan.model_validate(item) for item in data]

	async def clear(self, session_id: str) -> None:
		"""Delete all state for a session."""
		if not self._db:
			await self.init()

		await self._db.execute("DELETE FROM workspace_state WHERE session_id = ?", (session_id,))
		await self._db.commit()
		logger.info(f"Cleared state for session {session_id}")

	async def list_sessions(self) -> list[dict]:
		"""
		List all sessions with stored state.

		Returns:
			List of session info dictionaries, most recently updated first
		"""
		if not self._db:
			await self.init()

		async with self._db.execute(
			"""
			SELECT session_id, MAX(updated_at) AS last_updated
			FROM workspace_state
			GROUP BY session_id
			ORDER BY last_updated DESC
			"""
		) as cursor:
			rows = await cursor.fetchall()

		return [
			{"session_id": row["session_id"], "last_updated": row["last_updated"]}
			for row in rows
		]
