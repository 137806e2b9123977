import hmac
from functools import lru_cache
from typing import Callable

from fastapi import Depends, Request

from app.core.config import Settings, get_settings
from app.core.errors import AuthError, ConfigError
from app.core.registry import ModelRegistry
from app.core.router import ModelRouter
from app.core.upstream import NotionClient

ClientFactory = Callable[[Settings], NotionClient]


def require_bearer_token(request: Request, settings: Settings = Depends(get_settings)) -> None:
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthError("Missing authentication credentials")

    token = auth_header[len("Bearer "):]
    # Constant-time comparison
    if not hmac.compare_digest(token.encode("utf-8"), settings.expected_token.encode("utf-8")):
        raise AuthError("Invalid authentication credentials")


def require_notion_cookie(settings: Settings = Depends(get_settings)) -> None:
    if not settings.notion_cookie:
        raise ConfigError("Server configuration error: Notion cookie is not set")


@lru_cache(maxsize=4)
def _load_registry(path: str) -> ModelRegistry:
    return ModelRegistry(path)


def get_model_router(settings: Settings = Depends(get_settings)) -> ModelRouter:
    return ModelRouter(_load_registry(settings.registry_path))


def get_client_factory() -> ClientFactory:
    return NotionClient
