import os
import uuid
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl

from fastapi import Request as StarletteRequest
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse


class Request:
    """The inbound request as seen by the framework core.

    Built either from a Starlette request (web mode) or from a CGI-style
    environ mapping (command line and tests).
    """

    def __init__(
        self,
        headers: Optional[Mapping[str, str]] = None,
        method: str = "GET",
        path: str = "/",
        query: Optional[Mapping[str, str]] = None,
        client: Optional[str] = None,
        is_web: bool = False,
    ) -> None:
        self.headers: Dict[str, str] = {k.lower(): v for k, v in (headers or {}).items()}
        self.method = method.upper()
        self.path = path or "/"
        self.query: Dict[str, str] = dict(query or {})
        self.client = client
        self.is_web = is_web
        self._id: Optional[str] = None

    @classmethod
    def from_starlette(cls, request: StarletteRequest) -> "Request":
        return cls(
            headers=dict(request.headers),
            method=request.method,
            path=request.url.path,
            query=dict(request.query_params),
            client=request.client.host if request.client else None,
            is_web=True,
        )

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "Request":
        environ = os.environ if environ is None else environ
        headers = {
            key[5:].replace("_", "-").lower(): value
            for key, value in environ.items()
            if key.startswith("HTTP_")
        }
        return cls(
            headers=headers,
            method=environ.get("REQUEST_METHOD", "GET"),
            path=environ.get("PATH_INFO", "/"),
            query=dict(parse_qsl(environ.get("QUERY_STRING", ""))),
            client=environ.get("REMOTE_ADDR"),
            is_web=False,
        )

    @classmethod
    def from_incoming(cls, incoming: Any = None) -> "Request":
        if isinstance(incoming, StarletteRequest):
            return cls.from_starlette(incoming)
        return cls.from_environ(incoming)

    def id(self) -> str:
        """Stable identifier of this request, reused as the session id."""
        if self._id is None:
            self._id = self.headers.get("x-request-id") or uuid.uuid4().hex
        return self._id

    def host(self) -> str:
        return self.headers.get("host", "")

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)


def inbound_host(incoming: Any = None) -> str:
    """Read the ``Host`` of the inbound transport without building a Request."""
    if isinstance(incoming, StarletteRequest):
        return incoming.headers.get("host", "")
    environ = os.environ if incoming is None else incoming
    return environ.get("HTTP_HOST", "")


def as_html(body: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(content=body, status_code=status_code)


def as_text(body: str, status_code: int = 200) -> PlainTextResponse:
    return PlainTextResponse(content=body, status_code=status_code)


def as_json(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=data, status_code=status_code)
