"""
Configuration management for Coffee Log.

Settings come from config.json next to the project root, overridden by
environment variables (a .env file is loaded by app.py at startup).

Environment variables:
- COFFEE_STORAGE_BACKEND: 'file' (default), 'memory' or 'supabase'
- COFFEE_INTAKE_TABLE: table name for the Supabase store (default coffee_intake)
- COFFEE_OWNER_ID: fixed owner key for all records
- COFFEE_API_URL: base URL the edit page uses to reach the API
- COFFEE_DATA_DIR: directory for the file store
- COFFEE_LOG_LEVEL, COFFEE_DEFAULT_LANGUAGE, COFFEE_PORT, STORAGE_SECRET
- SUPABASE_URL, SUPABASE_KEY
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Optional

from coffeelog.edit.constants import NAVIGATE_DELAY_SECONDS, NOTICE_TIMEOUT_MS
from coffeelog.paths import get_config_path

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Resolved application settings."""
    storage_backend: str = "file"
    table_name: str = "coffee_intake"
    owner_id: str = "default-user"
    api_url: str = "http://127.0.0.1:8080"
    data_dir: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    log_level: str = "INFO"
    default_language: str = "en"
    recent_limit: int = 10
    navigate_delay: float = NAVIGATE_DELAY_SECONDS
    notice_timeout_ms: int = NOTICE_TIMEOUT_MS
    request_timeout: float = 10.0
    port: int = 8080
    storage_secret: str = "coffee-log-dev-secret"


# Settings field -> environment variable
ENV_VARS = {
    "storage_backend": "COFFEE_STORAGE_BACKEND",
    "table_name": "COFFEE_INTAKE_TABLE",
    "owner_id": "COFFEE_OWNER_ID",
    "api_url": "COFFEE_API_URL",
    "data_dir": "COFFEE_DATA_DIR",
    "supabase_url": "SUPABASE_URL",
    "supabase_key": "SUPABASE_KEY",
    "log_level": "COFFEE_LOG_LEVEL",
    "default_language": "COFFEE_DEFAULT_LANGUAGE",
    "port": "COFFEE_PORT",
    "storage_secret": "STORAGE_SECRET",
}


def load_config() -> dict:
    """Load configuration from config.json."""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            return {}
    return {}


def _coerce(name: str, raw):
    """Convert a raw config/env value to the type of the Settings field."""
    default = getattr(Settings, name, None)
    if isinstance(default, bool):
        return str(raw).lower() in ("1", "true", "yes")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def get_settings(config: Optional[dict] = None) -> Settings:
    """
    Resolve settings.

    Priority:
    1. Environment variables
    2. config.json (or the `config` argument)
    3. Defaults
    """
    config = load_config() if config is None else config
    values = {}
    for f in fields(Settings):
        raw = os.environ.get(ENV_VARS[f.name]) if f.name in ENV_VARS else None
        if raw is None or raw == "":
            raw = config.get(f.name)
        if raw is None:
            continue
        try:
            values[f.name] = _coerce(f.name, raw)
        except ValueError:
            logger.warning(f"Ignoring invalid value for {f.name}: {raw!r}")
    return Settings(**values)
