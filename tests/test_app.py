"""Tests for the FastAPI application and its middleware."""

import pytest
from fastapi import BackgroundTasks
from fastapi.responses import StreamingResponse
from fastapi.testclient import TestClient

from nova.app import create_app
from nova.core.config import Config
from nova.core.context import Context
from nova.core.loader import Loader
from nova.helpers import dump


class Resource:
    created = []

    def __init__(self):
        self.closed = False
        Resource.created.append(self)

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def reset_resources():
    Resource.created = []


@pytest.fixture
def app_config():
    return Config({
        "debug": True,
        "timezone": "UTC",
        "domain": ["testserver"],
        "cors": {"allowed_origins": ["https://nova.example"]},
    })


@pytest.fixture
def app(app_config):
    app = create_app(config=app_config, loader=Loader())

    @app.get("/dump")
    async def dump_endpoint():
        dump({"answer": 42})
        return {"dumped": False}

    @app.get("/instances")
    async def instances_endpoint():
        ctx = Context.instance()
        first = ctx.get_or_create_instance("counter", lambda: {"built": 1})
        second = ctx.get_or_create_instance("counter", lambda: {"built": 2})
        ctx.config().set("debug", False)
        return {"same": first is second, "built": second["built"]}

    @app.get("/stream")
    async def stream_endpoint():
        res = Context.instance().get_or_create_instance("res", Resource)

        async def body():
            yield b"a"
            yield b"closed" if res.closed else b"open"

        return StreamingResponse(body(), media_type="text/plain")

    @app.get("/background")
    async def background_endpoint(background_tasks: BackgroundTasks):
        async def late_work():
            Context.instance().get_or_create_instance("late", Resource)

        background_tasks.add_task(late_work)
        return {"queued": True}

    @app.get("/boom")
    async def boom_endpoint():
        raise RuntimeError("boom")

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def test_health(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-1"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["session_id"] == "abc-1"
    assert response.headers["X-Request-ID"] == "abc-1"


def test_root(client):
    body = client.get("/").json()
    assert body["service"] == "Nova"
    assert body["version"] == Context.VERSION


def test_unlisted_host_rejected(client):
    response = client.get("/health", headers={"Host": "evil.com"})

    assert response.status_code == 403
    assert response.headers["content-type"].startswith("text/plain")
    assert "evil.com" in response.text
    assert "not in config.domain list" in response.text


def test_rejected_host_escaped(client):
    response = client.get("/health", headers={"Host": "<b>x</b>"})
    assert response.status_code == 403
    assert "&lt;b&gt;x&lt;/b&gt;" in response.text


def test_each_request_gets_its_own_context(client, app_config):
    first = client.get("/instances").json()
    second = client.get("/instances").json()

    assert first == {"same": True, "built": 1}
    assert second == {"same": True, "built": 1}
    assert app_config.get("debug") is True


def test_session_ids_differ_between_requests(client):
    first = client.get("/health").json()["session_id"]
    second = client.get("/health").json()["session_id"]
    assert first != second


def test_dump_exits_early_with_html(client):
    response = client.get("/dump")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "int(42)" in response.text


def test_unhandled_exception_returns_500(app, caplog):
    client = TestClient(app, raise_server_exceptions=False)
    with caplog.at_level("ERROR", logger="nova.core.middleware"):
        response = client.get("/boom", headers={"X-Request-ID": "sid-777"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert response.headers["X-Request-ID"] == "sid-777"
    assert "[sid-777] Unhandled exception in GET /boom: boom" in caplog.text


def test_instances_live_until_streaming_body_is_sent(client):
    response = client.get("/stream")

    assert response.text == "aopen"
    assert len(Resource.created) == 1
    assert Resource.created[0].closed is True


def test_background_task_instances_are_released(client):
    response = client.get("/background")

    assert response.json() == {"queued": True}
    assert len(Resource.created) == 1
    assert Resource.created[0].closed is True


def test_no_context_left_behind(client):
    client.get("/health")
    assert Context.current() is None
