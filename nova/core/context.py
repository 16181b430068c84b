"""Application context.

One :class:`Context` is built per request-handling unit and owns the
configuration, the current request, a memoizing instance cache and a small
scratch store. Handler code reaches it through :meth:`Context.instance`::

    ctx = Context(loader, incoming)
    with context_scope(ctx):
        db = Context.instance().get_or_create_instance("db", Database)
"""

import logging
import threading
import time
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import datetime
from typing import Any, Callable, Dict, Generic, Iterator, Optional, TypeVar, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from nova import __version__

from .config import DEFAULT_TIMEZONE, Config
from .exceptions import (
    ConfigError,
    ContextAlreadyInitializedError,
    ContextNotInitializedError,
    DomainNotAllowedError,
)
from .http import Request, inbound_host
from .loader import Loader
from .paths import Paths, define_paths
from .validation import is_host_allowed, validate_domains, validate_namespace


logger = logging.getLogger(__name__)

T = TypeVar("T")


class Key(Generic[T]):
    """Typed name for the instance cache and the scratch store."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Key({self.name!r})"


_current: ContextVar[Optional["Context"]] = ContextVar("nova_context", default=None)


def _key_name(key: Union[str, Key]) -> str:
    return key.name if isinstance(key, Key) else key


class Context:
    """Per-request application context.

    Construction runs in a fixed order and fails fast:

    1. record the start time
    2. establish the path layout (kept if already defined)
    3. load configuration, derive ``debug`` and the timezone
    4. check the inbound host against ``config.domain``
    5. build the request and derive the session id
    6. hand ``config.namespace`` to the loader

    Step 4 raises :class:`DomainNotAllowedError` and nothing after it runs.

    Args:
        loader: namespace loader configured in step 6.
        incoming: inbound transport, a Starlette request or a CGI-style
            environ mapping. ``None`` reads ``os.environ``.
        config: configuration to own. Loaded from the config directory
            when omitted.
    """

    VERSION = __version__

    def __init__(self, loader: Loader, incoming: Any = None, config: Optional[Config] = None) -> None:
        self._start_time = time.perf_counter()
        self._instances: Dict[str, Any] = {}
        self._instances_lock = threading.RLock()
        self._vars: Dict[str, Any] = {}

        self._paths = define_paths()
        self._init_config(config)
        self._check_domain(inbound_host(incoming))
        self._init_request(incoming)
        self._init_loader(loader)

    @classmethod
    def instance(cls) -> "Context":
        ctx = _current.get()
        if ctx is None:
            raise ContextNotInitializedError()
        return ctx

    @classmethod
    def current(cls) -> Optional["Context"]:
        return _current.get()

    def activate(self) -> Token:
        """Bind this context into the slot read by :meth:`instance`."""
        existing = _current.get()
        if existing is not None and existing is not self:
            raise ContextAlreadyInitializedError()
        return _current.set(self)

    @staticmethod
    def deactivate(token: Token) -> None:
        _current.reset(token)

    def _init_config(self, config: Optional[Config]) -> None:
        self._config = config if config is not None else Config.load(self._paths.config)
        self._debug = bool(self._config.get("debug", False))
        timezone_name = self._config.get("timezone", DEFAULT_TIMEZONE)
        try:
            self._timezone = ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
            raise ConfigError(f"Unknown timezone: {timezone_name!r}") from e

    def _check_domain(self, host: str) -> None:
        domains = validate_domains(self._config.get("domain"))
        if not is_host_allowed(host, domains):
            logger.warning(f"Rejected request for host {host!r}, allowed: {domains}")
            raise DomainNotAllowedError(host)

    def _init_request(self, incoming: Any) -> None:
        self._request = Request.from_incoming(incoming)
        self._session_id = self._request.id()

    def _init_loader(self, loader: Loader) -> None:
        self._loader = loader
        self._loader.set_namespace(validate_namespace(self._config.get("namespace", {})))

    def get_or_create_instance(self, name: Union[str, Key[T]], create: Callable[[], T]) -> T:
        """Return the instance cached under ``name``, creating it on first use.

        ``create`` runs at most once per name for the lifetime of the
        context. Its exceptions propagate and nothing is cached.
        """
        key = _key_name(name)
        with self._instances_lock:
            if key not in self._instances:
                self._instances[key] = create()
            return self._instances[key]

    def has_instance(self, name: Union[str, Key]) -> bool:
        return _key_name(name) in self._instances

    def destroy_instances(self) -> None:
        with self._instances_lock:
            instances = list(self._instances.items())
            self._instances.clear()

        for name, instance in instances:
            # classes are values here, never closed
            if isinstance(instance, type):
                continue
            close = getattr(instance, "close", None)
            if not callable(close):
                continue
            try:
                close()
            except Exception as e:
                logger.warning(f"[{self._session_id}] Failed to close instance {name}: {e}", exc_info=True)

    def close(self) -> None:
        self.destroy_instances()

    def __enter__(self) -> "Context":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def config(self) -> Config:
        return self._config

    def request(self) -> Request:
        return self._request

    def loader(self) -> Loader:
        return self._loader

    def paths(self) -> Paths:
        return self._paths

    def is_debug(self) -> bool:
        return self._debug

    def session_id(self) -> str:
        return self._session_id

    def timezone(self) -> ZoneInfo:
        return self._timezone

    def now(self) -> datetime:
        return datetime.now(self._timezone)

    def calc_app_time(self) -> float:
        """Seconds elapsed since the context was constructed."""
        return time.perf_counter() - self._start_time

    def set(self, name: Union[str, Key[T]], value: T) -> None:
        self._vars[_key_name(name)] = value

    def get(self, name: Union[str, Key[T]], default: Any = None) -> Any:
        return self._vars.get(_key_name(name), default)


@contextmanager
def context_scope(ctx: Context) -> Iterator[Context]:
    """Bind ``ctx`` for the duration of the block, then release its instances."""
    token = ctx.activate()
    try:
        yield ctx
    finally:
        Context.deactivate(token)
        ctx.destroy_instances()
