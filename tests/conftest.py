"""Pytest configuration for notion-proxy tests.

Upstream Notion calls are replaced by httpx.MockTransport; no network access
or real credentials are needed.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Keep a developer's .env from leaking into tests
os.environ.setdefault("NOTION_COOKIE", "test-cookie")
os.environ.setdefault("NOTION_SPACE_ID", "test-space")
os.environ.setdefault("PROXY_AUTH_TOKEN", "test-token")
