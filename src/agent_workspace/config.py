"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs

from .secrets import get_secret

APP_NAME = "agent-workspace"
APP_AUTHOR = "agent-workspace"

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "meta-llama/llama-3.1-8b-instruct:free"


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	secrets_file: Path = field(init=False)
	state_db_path: Path = field(init=False)
	log_dir: Path = field(init=False)

	# Completion provider
	openrouter_api_key: str = ""
	openrouter_base_url: str = DEFAULT_BASE_URL
	default_model: str = DEFAULT_MODEL
	request_timeout: float = 60.0
	app_url: str = "http://localhost"
	app_title: str = "AI Agent Workspace"

	# Orchestration
	step_delay: float = 1.0
	log_level: str = "INFO"

	def __post_init__(self) -> None:
		self.secrets_file = self.config_dir / "secrets.json"
		self.state_db_path = self.data_dir / "workspace.db"
		self.log_dir = self.data_dir / "logs"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)


PATH_FIELDS = {"config_dir", "data_dir"}
FLOAT_FIELDS = {"request_timeout", "step_delay"}


def _coerce(attr: str, val):
	if attr in PATH_FIELDS:
		return Path(os.path.expanduser(str(val)))
	if attr in FLOAT_FIELDS:
		return float(val)
	return val


def _apply_env_overrides(config: Config) -> Config:
	"""Apply AGENT_WORKSPACE_* environment variable overrides."""
	env_map = {
		"AGENT_WORKSPACE_CONFIG_DIR": "config_dir",
		"AGENT_WORKSPACE_DATA_DIR": "data_dir",
		"AGENT_WORKSPACE_BASE_URL": "openrouter_base_url",
		"AGENT_WORKSPACE_MODEL": "default_model",
		"AGENT_WORKSPACE_REQUEST_TIMEOUT": "request_timeout",
		"AGENT_WORKSPACE_STEP_DELAY": "step_delay",
		"AGENT_WORKSPACE_APP_URL": "app_url",
		"AGENT_WORKSPACE_LOG_LEVEL": "log_level",
		"OPENROUTER_API_KEY": "openrouter_api_key",
	}
	for env_key, attr in env_map.items():
		val = os.getenv(env_key)
		if val:
			setattr(config, attr, _coerce(attr, val))
	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	for key, val in data.items():
		if hasattr(config, key):
			setattr(config, key, _coerce(key, val))

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def _apply_secrets(config: Config) -> Config:
	"""Fill the OpenRouter key from secrets.json when nothing else set it."""
	if not config.openrouter_api_key:
		config.openrouter_api_key = get_secret(config.secrets_file, "openrouter") or ""
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > secrets.json > defaults."""
	config = Config()
	# config.toml lives in the config dir, so that override must come first
	config_dir = os.getenv("AGENT_WORKSPACE_CONFIG_DIR")
	if config_dir:
		config.config_dir = _coerce("config_dir", config_dir)
		config.__post_init__()
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config = _apply_secrets(config)
	config.ensure_dirs()
	return config


# Singleton
_config: Config | None = None


def get_config() -> Config:
	"""Get or create the global config instance."""
	global _config
	if _config is None:
		_config = load_config()
	return _config
