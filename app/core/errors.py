"""Error taxonomy for the proxy.

Every error a request can end with is a ``ProxyError``; the server turns it
into an OpenAI-style ``{"error": {"message", "type"}}`` body. Malformed NDJSON
lines from upstream are not errors: the decoder logs and skips them.
"""

from typing import Optional


class ProxyError(Exception):
    status_code = 500
    error_type = "server_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": {"message": self.message, "type": self.error_type}}


class ValidationError(ProxyError):
    status_code = 400
    error_type = "invalid_request_error"


class AuthError(ProxyError):
    status_code = 401
    error_type = "unauthorized"


class ConfigError(ProxyError):
    status_code = 500
    error_type = "server_error"


class UpstreamConnectionError(ProxyError):
    status_code = 500
    error_type = "connection_error"


class UpstreamAPIError(ProxyError):
    """Upstream answered with a non-2xx status; the status is mirrored."""

    error_type = "api_error"

    def __init__(self, message: str, status_code: int, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamStreamError(ProxyError):
    status_code = 500
    error_type = "server_error"
