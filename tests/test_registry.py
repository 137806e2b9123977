import pytest

from app.core.config import DEFAULT_REGISTRY_PATH
from app.core.registry import ModelRegistry
from app.core.router import ModelRouter


@pytest.fixture
def registry(tmp_path):
    path = tmp_path / "registry.yaml"
    path.write_text(
        "available:\n"
        "  - anthropic-opus-4\n"
        "  - anthropic-sonnet-4\n"
        "default: anthropic-sonnet-4\n"
        "models:\n"
        "  opus: anthropic-opus-4\n"
    )
    return ModelRegistry(str(path))


def test_alias_resolves_to_backend_id(registry):
    assert registry.resolve("opus") == "anthropic-opus-4"


def test_unknown_name_passes_through(registry):
    assert registry.resolve("openai-gpt-4.1") == "openai-gpt-4.1"


def test_available_models(registry):
    assert registry.available() == ["anthropic-opus-4", "anthropic-sonnet-4"]


def test_router_uses_registry_default_for_empty_name(registry):
    assert ModelRouter(registry).select("") == "anthropic-sonnet-4"


def test_empty_registry_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    registry = ModelRegistry(str(path))
    assert registry.available() == []
    assert ModelRouter(registry).select("") == "anthropic-opus-4"


def test_shipped_registry():
    registry = ModelRegistry(str(DEFAULT_REGISTRY_PATH))
    assert registry.available() == ["openai-gpt-4.1", "anthropic-opus-4", "anthropic-sonnet-4"]
    assert registry.default == "anthropic-opus-4"
