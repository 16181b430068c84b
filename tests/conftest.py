"""Shared test fixtures."""

import pytest
from fastapi import Request as StarletteRequest

from nova.core.config import Config
from nova.core.context import Context, context_scope
from nova.core.loader import Loader
from nova.core.paths import reset_paths


@pytest.fixture(autouse=True)
def fresh_paths():
    reset_paths()
    yield
    reset_paths()


@pytest.fixture
def loader():
    return Loader()


@pytest.fixture
def config():
    return Config({
        "debug": False,
        "timezone": "UTC",
        "domain": ["example.com"],
        "namespace": {},
    })


@pytest.fixture
def environ():
    return {
        "HTTP_HOST": "example.com",
        "HTTP_X_REQUEST_ID": "req-123",
        "REQUEST_METHOD": "GET",
        "PATH_INFO": "/",
    }


@pytest.fixture
def ctx(loader, environ, config):
    return Context(loader, environ, config=config)


@pytest.fixture
def active_ctx(ctx):
    with context_scope(ctx):
        yield ctx


@pytest.fixture
def web_request():
    """Build Starlette requests as the HTTP layer would hand them over."""

    def _make(host="example.com", path="/"):
        return StarletteRequest({
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "path": path,
            "root_path": "",
            "query_string": b"",
            "headers": [(b"host", host.encode())],
        })

    return _make
