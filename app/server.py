import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.chat import router as chat_router
from app.api.models import router as models_router
from app.core.config import get_settings, log_settings_status
from app.core.errors import ProxyError, ValidationError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 1000


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_settings_status(get_settings())
    yield


class RequestLogMiddleware:
    """Log method, path, status and duration once the response has finished.

    Plain ASGI so that a streamed body is timed until its last frame, not
    until the headers go out.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.monotonic()
        status = {"code": 500}

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                status["code"] = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = int((time.monotonic() - start) * 1000)
            slow = " [slow]" if duration_ms > SLOW_REQUEST_MS else ""
            logger.info(
                f"[{scope['method']}] {scope['path']} {status['code']} {duration_ms}ms{slow}"
            )


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app() -> FastAPI:
    app = FastAPI(title="Notion Proxy", version="0.1.0", lifespan=lifespan)

    app.add_middleware(RequestLogMiddleware)

    @app.exception_handler(ProxyError)
    async def handle_proxy_error(request: Request, exc: ProxyError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        error = ValidationError(f"Request processing error: {_format_validation_errors(exc)}")
        logger.warning(f"Rejected {request.url.path}: {error.message}")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    app.include_router(chat_router, prefix="/v1")
    app.include_router(models_router, prefix="/v1")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run("app.server:app", host=settings.host, port=settings.port)
