import os
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_NOTION_API_URL = "https://www.notion.so/api/v3/runInferenceTranscript"
DEFAULT_CLIENT_VERSION = "23.13.0.3604"
DEFAULT_AUTH_TOKEN = "default_token"
DEFAULT_REGISTRY_PATH = Path(__file__).parent.parent / "config" / "model_registry.yaml"


@dataclass(frozen=True)
class Settings:
    notion_cookie: str
    notion_space_id: str
    notion_active_user: Optional[str]
    expected_token: str
    notion_api_url: str = DEFAULT_NOTION_API_URL
    notion_client_version: str = DEFAULT_CLIENT_VERSION
    # Seconds; read_timeout bounds silence between upstream chunks, not total duration
    connect_timeout: float = 10.0
    read_timeout: float = 120.0
    write_timeout: float = 30.0
    pool_timeout: float = 30.0
    registry_path: str = str(DEFAULT_REGISTRY_PATH)
    host: str = "0.0.0.0"
    port: int = 7860

    @property
    def uses_default_token(self) -> bool:
        return self.expected_token == DEFAULT_AUTH_TOKEN


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def load_settings() -> Settings:
    """Read proxy configuration from the environment (and .env)."""
    return Settings(
        notion_cookie=os.getenv("NOTION_COOKIE", ""),
        notion_space_id=os.getenv("NOTION_SPACE_ID", ""),
        notion_active_user=os.getenv("NOTION_ACTIVE_USER_HEADER") or None,
        expected_token=os.getenv("PROXY_AUTH_TOKEN", DEFAULT_AUTH_TOKEN),
        notion_api_url=os.getenv("NOTION_API_URL", DEFAULT_NOTION_API_URL),
        notion_client_version=os.getenv("NOTION_CLIENT_VERSION", DEFAULT_CLIENT_VERSION),
        connect_timeout=_float_env("UPSTREAM_CONNECT_TIMEOUT", 10.0),
        read_timeout=_float_env("UPSTREAM_READ_TIMEOUT", 120.0),
        write_timeout=_float_env("UPSTREAM_WRITE_TIMEOUT", 30.0),
        pool_timeout=_float_env("UPSTREAM_POOL_TIMEOUT", 30.0),
        registry_path=os.getenv("MODEL_REGISTRY_PATH", str(DEFAULT_REGISTRY_PATH)),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "7860")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def log_settings_status(settings: Settings) -> None:
    if not settings.notion_cookie:
        logger.error("NOTION_COOKIE is not set; chat completions will fail with 500")
    if not settings.notion_space_id:
        logger.warning("NOTION_SPACE_ID is not set")

    def mark(ok: bool) -> str:
        return "ok" if ok else "missing"

    token_status = "default" if settings.uses_default_token else "ok"
    logger.info(
        f"Config: cookie {mark(bool(settings.notion_cookie))} | "
        f"space id {mark(bool(settings.notion_space_id))} | auth token {token_status}"
    )
