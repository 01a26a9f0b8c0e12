"""API key storage in a local secrets.json file."""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional


def load_secrets(secrets_file: Path) -> dict:
	"""Load secrets from file."""
	if not secrets_file.exists():
		return {"keys": {}, "last_updated": None}
	try:
		with open(secrets_file, "r") as f:
			return json.load(f)
	except (json.JSONDecodeError, IOError):
		return {"keys": {}, "last_updated": None}


def save_secrets(secrets_file: Path, data: dict) -> None:
	"""Save secrets to file."""
	data["last_updated"] = datetime.now().isoformat()
	secrets_file.parent.mkdir(parents=True, exist_ok=True)
	with open(secrets_file, "w") as f:
		json.dump(data, f, indent=2)


def get_secret(secrets_file: Path, key_name: str) -> Optional[str]:
	"""Return an active secret value, or None if missing or deactivated."""
	keys = load_secrets(secrets_file).get("keys", {})
	secret = keys.get(key_name)
	if secret is None:
		return None
	# Legacy format where value is a plain string
	if isinstance(secret, str):
		return secret or None
	if not secret.get("active", True):
		return None
	return secret.get("key") or None


def set_secret(secrets_file: Path, key_name: str, value: str, notes: str = "") -> None:
	"""Add or replace a secret, marking it active."""
	data = load_secrets(secrets_file)
	data.setdefault("keys", {})[key_name] = {
		"key": value,
		"active": True,
		"notes": notes,
	}
	save_secrets(secrets_file, data)


def describe_secrets(secrets_file: Path) -> list[dict]:
	"""List secret names and status without exposing values."""
	keys = load_secrets(secrets_file).get("keys", {})
	result = []
	for name, data in keys.items():
		if isinstance(data, str):
			result.append({"name": name, "active": True, "notes": "", "has_value": bool(data)})
		else:
			result.append({
				"name": name,
				"active": data.get("active", True),
				"notes": data.get("notes", ""),
				"has_value": bool(data.get("key")),
			})
	return result
