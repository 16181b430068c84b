"""Namespace loader.

Maps dotted module prefixes to directories so application code can live
outside ``sys.path``::

    loader.set_namespace({"app": "/srv/site/app"})
    loader.load("app.controllers.home")  # imports /srv/site/app/controllers/home.py
"""

import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Dict, Mapping, Optional

from .exceptions import LoaderError


logger = logging.getLogger(__name__)


class Loader:
    def __init__(self) -> None:
        self._namespace: Dict[str, Path] = {}
        self._modules: Dict[str, ModuleType] = {}

    def set_namespace(self, namespace: Mapping[str, str]) -> None:
        self._namespace = {prefix: Path(path) for prefix, path in namespace.items()}
        logger.debug(f"Loader namespace set: {sorted(self._namespace)}")

    def namespace(self) -> Dict[str, Path]:
        return dict(self._namespace)

    def resolve_path(self, name: str) -> Optional[Path]:
        """Return the file backing ``name`` using the longest matching prefix."""
        for prefix in sorted(self._namespace, key=len, reverse=True):
            if name != prefix and not name.startswith(prefix + "."):
                continue
            base = self._namespace[prefix]
            rest = name[len(prefix) + 1:].split(".") if name != prefix else []
            target = base.joinpath(*rest)
            module_file = target.with_suffix(".py") if rest else None
            if module_file is not None and module_file.is_file():
                return module_file
            package_init = target / "__init__.py"
            if package_init.is_file():
                return package_init
            return None
        return None

    def load(self, name: str) -> ModuleType:
        if name in self._modules:
            return self._modules[name]

        path = self.resolve_path(name)
        if path is None:
            raise LoaderError(f"No namespace entry resolves module: {name}")

        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise LoaderError(f"Cannot create module spec: {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(name, None)
            raise LoaderError(f"Failed to load {name} from {path}: {e}") from e

        self._modules[name] = module
        return module
