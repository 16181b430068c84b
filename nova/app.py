from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nova import __version__

from .core.config import Config
from .core.context import Context
from .core.exceptions import AppExitException
from .core.loader import Loader
from .core.middleware import (
    ContextMiddleware,
    app_exit_handler,
    cors_allowed_origins,
    global_exception_handler,
    log_requests,
)
from .core.paths import define_paths


def create_app(config: Optional[Config] = None, loader: Optional[Loader] = None) -> FastAPI:
    """Build the FastAPI application.

    ``config`` is loaded once from the config directory when omitted; each
    request then works on its own copy inside a fresh Context.
    """
    if config is None:
        config = Config.load(define_paths().config)
    loader = loader or Loader()

    app = FastAPI(title="Nova", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_allowed_origins(config),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Registered last so it wraps log_requests and the context is bound first
    app.middleware("http")(log_requests)
    app.add_middleware(ContextMiddleware, config=config, loader=loader)

    app.add_exception_handler(AppExitException, app_exit_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    @app.get("/health")
    async def health_check():
        """Basic liveness check with the request's session id."""
        ctx = Context.instance()
        return {
            "status": "healthy",
            "service": "nova",
            "session_id": ctx.session_id(),
            "timestamp": ctx.now().isoformat(),
            "response_time_ms": round(ctx.calc_app_time() * 1000, 2),
        }

    @app.get("/")
    async def root():
        """Return basic service information."""
        return {
            "service": "Nova",
            "version": __version__,
            "endpoints": {
                "health": "/health",
            },
            "timestamp": datetime.now().isoformat(),
        }

    return app
