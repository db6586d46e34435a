"""Application configuration loaded from the environment."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_BUCKET = "client-files"


def _env_bool(value: Optional[str], default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(value: Optional[str], default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"Expected an integer, got '{value}'") from e


@dataclass(frozen=True)
class Settings:
    """Recognized configuration options.

    Secrets are optional here; operations that need a missing one raise
    ConfigurationError when they run.
    """

    database_path: Optional[str] = None
    database_url: Optional[str] = None
    storage_url: Optional[str] = None
    storage_service_key: Optional[str] = None
    storage_bucket: str = DEFAULT_BUCKET
    webhook_secret: Optional[str] = None
    classifier_url: Optional[str] = None
    download_url_ttl: int = 300
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            database_path=env.get("CLIENTLEDGER_DB_PATH") or None,
            database_url=env.get("CLIENTLEDGER_DATABASE_URL") or None,
            storage_url=env.get("SUPABASE_URL") or None,
            storage_service_key=env.get("SUPABASE_SERVICE_ROLE_KEY") or None,
            storage_bucket=env.get("SUPABASE_BUCKET") or DEFAULT_BUCKET,
            webhook_secret=env.get("WEBHOOK_SECRET") or None,
            classifier_url=env.get("CLASSIFIER_URL") or None,
            download_url_ttl=_env_int(env.get("CLIENTLEDGER_DOWNLOAD_TTL"), 300),
            log_level=(env.get("CLIENTLEDGER_LOG_LEVEL") or "INFO").upper(),
            log_json=_env_bool(env.get("CLIENTLEDGER_LOG_JSON")),
        )


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Load a .env file (without overriding the environment) and read settings."""
    load_dotenv(dotenv_path)
    return Settings.from_env()
