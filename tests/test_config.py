import pytest

from app.core.config import load_settings
from app.core.upstream import build_timeout

TIMEOUT_VARS = [
    "UPSTREAM_CONNECT_TIMEOUT",
    "UPSTREAM_READ_TIMEOUT",
    "UPSTREAM_WRITE_TIMEOUT",
    "UPSTREAM_POOL_TIMEOUT",
]


@pytest.fixture
def clean_timeouts(monkeypatch):
    for name in TIMEOUT_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_default_timeouts(clean_timeouts):
    timeout = build_timeout(load_settings())
    assert timeout.connect == 10.0
    assert timeout.read == 120.0
    assert timeout.write == 30.0
    assert timeout.pool == 30.0


def test_timeouts_from_environment(clean_timeouts):
    clean_timeouts.setenv("UPSTREAM_CONNECT_TIMEOUT", "2.5")
    clean_timeouts.setenv("UPSTREAM_READ_TIMEOUT", "300")
    clean_timeouts.setenv("UPSTREAM_WRITE_TIMEOUT", "5")
    clean_timeouts.setenv("UPSTREAM_POOL_TIMEOUT", "7")

    timeout = build_timeout(load_settings())
    assert timeout.connect == 2.5
    assert timeout.read == 300.0
    assert timeout.write == 5.0
    assert timeout.pool == 7.0


def test_empty_timeout_falls_back_to_default(clean_timeouts):
    clean_timeouts.setenv("UPSTREAM_READ_TIMEOUT", "")
    assert load_settings().read_timeout == 120.0


def test_non_numeric_timeout_is_rejected(clean_timeouts):
    clean_timeouts.setenv("UPSTREAM_POOL_TIMEOUT", "soon")
    with pytest.raises(ValueError, match="UPSTREAM_POOL_TIMEOUT"):
        load_settings()


def test_credentials_from_environment(monkeypatch):
    monkeypatch.setenv("NOTION_COOKIE", "token_v2=xyz")
    monkeypatch.setenv("NOTION_SPACE_ID", "space-9")
    monkeypatch.delenv("NOTION_ACTIVE_USER_HEADER", raising=False)
    monkeypatch.delenv("PROXY_AUTH_TOKEN", raising=False)

    settings = load_settings()
    assert settings.notion_cookie == "token_v2=xyz"
    assert settings.notion_space_id == "space-9"
    assert settings.notion_active_user is None
    assert settings.uses_default_token
