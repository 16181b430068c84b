import re
from typing import Any, Iterable, List, Mapping

from .config import ANY_HOST
from .exceptions import ConfigError


MODULE_NAME_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$')


def is_host_allowed(host: str, domains: Iterable[str]) -> bool:
    """True when ``domains`` holds the any-host sentinel or ``host`` exactly."""
    domains = list(domains)
    return ANY_HOST in domains or host in domains


def validate_domains(domains: Any) -> List[str]:
    if domains is None:
        return []
    if isinstance(domains, str) or not isinstance(domains, (list, tuple)):
        raise ConfigError("config.domain must be a list of host names")
    for domain in domains:
        if not isinstance(domain, str):
            raise ConfigError(f"Invalid config.domain entry: {domain!r}")
    return list(domains)


def validate_namespace(namespace: Any) -> dict:
    if namespace is None:
        return {}
    if not isinstance(namespace, Mapping):
        raise ConfigError("config.namespace must be a mapping of module prefix to path")
    for prefix, path in namespace.items():
        if not isinstance(prefix, str) or not MODULE_NAME_PATTERN.match(prefix):
            raise ConfigError(f"Invalid namespace prefix: {prefix!r}")
        if not isinstance(path, str) or not path:
            raise ConfigError(f"Invalid path for namespace {prefix}: {path!r}")
    return dict(namespace)
