from html import escape
from typing import Any

from fastapi.responses import Response

from .http import as_text


class NovaError(Exception):
    """Base exception for all framework errors."""


class ContextNotInitializedError(NovaError, RuntimeError):
    """Raised when the context accessor is used before bootstrap."""

    def __init__(self, message: str = "Context is not initialized") -> None:
        super().__init__(message)


class ContextAlreadyInitializedError(NovaError):
    """Raised when a second context is bound into an occupied slot."""

    def __init__(self, message: str = "Context is already initialized") -> None:
        super().__init__(message)


class ConfigError(NovaError):
    """Raised when configuration is missing or malformed."""


class LoaderError(NovaError):
    """Raised when a namespaced module cannot be resolved or imported."""


class AppExitException(NovaError):
    """Stop request processing and answer with ``response`` instead.

    The top-level handler never treats this as a failure: it writes the
    carried response and ends the request.
    """

    def __init__(self, response: Response, message: str = "") -> None:
        self.response = response
        super().__init__(message)


class DomainNotAllowedError(AppExitException):
    """Raised when the inbound host is missing from ``config.domain``."""

    def __init__(self, host: str) -> None:
        self.host = host
        message = f"[ Nova ] Domain Error : {escape(host)} not in config.domain list."
        super().__init__(as_text(message, status_code=403), message)


class JsonEncodeException(NovaError):
    """Raised when data cannot be converted to a JSON string."""

    def __init__(self, message: str = "", data: Any = None) -> None:
        self.data = data
        super().__init__(message)
