import logging
import os
import time
from typing import Callable, List

from fastapi import Request
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .config import Config
from .context import Context, context_scope
from .exceptions import AppExitException
from .http import as_json
from .loader import Loader


logger = logging.getLogger(__name__)

SLOW_REQUEST_SECONDS = 1.0


def cors_allowed_origins(config: Config) -> List[str]:
    env_origins = [o.strip() for o in os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
    merged = env_origins + list(config.get("cors.allowed_origins", []))
    # Deduplicate while preserving order
    seen = set()
    result: List[str] = []
    for origin in merged:
        if origin not in seen:
            seen.add(origin)
            result.append(origin)
    return result


class ContextMiddleware:
    """Run each HTTP request inside its own Context.

    Every request gets a private copy of ``config``. The context stays bound
    until the downstream app returns, which is after the response body is
    sent and background tasks have run; only then are its instances
    released. A rejected host ends the request with the response carried by
    :class:`DomainNotAllowedError`.
    """

    def __init__(self, app: ASGIApp, config: Config, loader: Loader) -> None:
        self.app = app
        self.config = config
        self.loader = loader

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        try:
            ctx = Context(self.loader, request, config=self.config.copy())
        except AppExitException as exc:
            await exc.response(scope, receive, send)
            return

        response_started = False

        async def send_with_request_id(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
                MutableHeaders(scope=message)["X-Request-ID"] = ctx.session_id()
            await send(message)

        with context_scope(ctx):
            try:
                await self.app(scope, receive, send_with_request_id)
            except Exception as exc:
                if response_started:
                    raise
                logger.error(f"[{ctx.session_id()}] Unhandled exception in {request.method} {request.url.path}: {str(exc)}", exc_info=True)
                response = as_json({"detail": "Internal server error"}, status_code=500)
                await response(scope, receive, send_with_request_id)


async def log_requests(request: Request, call_next: Callable):
    start_time = time.time()
    ctx = Context.current()
    request_id = ctx.session_id() if ctx else f"{int(time.time() * 1000)}-{id(request)}"

    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        # Only log slow requests or errors
        if process_time > SLOW_REQUEST_SECONDS or response.status_code >= 400:
            logger.info(f"[{request_id}] {request.method} {request.url.path} - {response.status_code} - {process_time:.2f}s")
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"[{request_id}] {request.method} {request.url.path} - ERROR: {str(e)} - {process_time:.2f}s")
        raise


async def app_exit_handler(request: Request, exc: AppExitException):
    ctx = Context.current()
    request_id = ctx.session_id() if ctx else "-"
    logger.info(f"[{request_id}] {request.method} {request.url.path} exited early: {exc}")
    return exc.response


async def global_exception_handler(request: Request, exc: Exception):
    ctx = Context.current()
    request_id = ctx.session_id() if ctx else f"{int(time.time() * 1000)}-{id(request)}"
    logger.error(f"[{request_id}] Unhandled exception in {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return as_json({"detail": "Internal server error"}, status_code=500)
