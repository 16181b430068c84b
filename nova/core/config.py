import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigError


load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yml"
DEFAULT_TIMEZONE = "Asia/Shanghai"
ANY_HOST = "0.0.0.0"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _split_env_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    """Application configuration addressed by dotted keys.

    Values come from ``config.yml`` in the config directory, with a few
    settings overridable from the environment (``NOVA_DEBUG``,
    ``NOVA_TIMEZONE``, ``NOVA_DOMAIN``).
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(data) if data else {}

    @classmethod
    def load(cls, config_dir: Path) -> "Config":
        path = Path(config_dir) / CONFIG_FILENAME
        data: Dict[str, Any] = {}
        if path.is_file():
            with path.open("r", encoding="utf-8") as fh:
                loaded = yaml.safe_load(fh)
            if loaded is not None and not isinstance(loaded, dict):
                raise ConfigError(f"{path} must contain a mapping at the top level")
            data = loaded or {}
        else:
            logger.warning(f"Config file {path} not found, using environment only")

        config = cls(data)
        config.apply_environment()
        return config

    def apply_environment(self) -> None:
        debug = os.getenv("NOVA_DEBUG")
        if debug is not None:
            self.set("debug", debug.strip().lower() in _TRUE_VALUES)
        timezone = os.getenv("NOVA_TIMEZONE")
        if timezone:
            self.set("timezone", timezone.strip())
        domains = os.getenv("NOVA_DOMAIN")
        if domains:
            self.set("domain", _split_env_list(domains))

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for segment in key.split("."):
            if not isinstance(node, dict) or segment not in node:
                return default
            node = node[segment]
        return node

    def set(self, key: str, value: Any) -> None:
        segments = key.split(".")
        node = self._data
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        node[segments[-1]] = value

    def has(self, key: str) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def all(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def copy(self) -> "Config":
        return Config(self._data)
