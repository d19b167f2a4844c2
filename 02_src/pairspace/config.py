"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "pairspace.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_CONSULTATION_URL = "https://liff.line.me/XXXXXXXX"
LINE_API_BASE_URL = "https://api.line.me"

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path and make sure its directory exists."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    if not candidate.is_absolute():
        candidate = PROJECT_ROOT / candidate
    candidate.parent.mkdir(parents=True, exist_ok=True)
    return candidate


def _env_flag(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"", "0", "false", "no", "off"}


@dataclass
class Settings:
    """Runtime settings read from the environment.

    Secrets are not validated here; a missing secret surfaces as a failure
    of the call that needs it.
    """

    line_channel_secret: str | None = None
    line_channel_access_token: str | None = None
    anthropic_api_key: str | None = None
    anthropic_model: str = DEFAULT_MODEL
    database_url: str | None = None
    api_host: str = "localhost"
    api_port: int = 8000
    log_level: str = "INFO"
    log_file: str | None = None
    log_format: str = "json"
    serialize_user_events: bool = False
    consultation_url: str = DEFAULT_CONSULTATION_URL
    line_api_base_url: str = LINE_API_BASE_URL

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        return cls(
            line_channel_secret=os.getenv("LINE_CHANNEL_SECRET"),
            line_channel_access_token=os.getenv("LINE_CHANNEL_ACCESS_TOKEN"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            anthropic_model=os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL),
            database_url=os.getenv("DATABASE_URL"),
            api_host=os.getenv("API_HOST", "localhost"),
            api_port=int(os.getenv("API_PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE"),
            log_format=os.getenv("LOG_FORMAT", "json"),
            serialize_user_events=_env_flag(os.getenv("SERIALIZE_USER_EVENTS")),
            consultation_url=os.getenv("CONSULTATION_URL", DEFAULT_CONSULTATION_URL),
            line_api_base_url=os.getenv("LINE_API_BASE_URL", LINE_API_BASE_URL),
        )
