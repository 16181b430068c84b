import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from nova import __version__


FRAMEWORK_PATH = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class Paths:
    """Filesystem layout of the running application, computed once."""

    root: Path
    app: Path
    runtime: Path
    config: Path
    log: Path
    temp: Path
    cache: Path
    public: Path
    vendor: Path
    framework: Path = FRAMEWORK_PATH
    version: str = __version__


_paths: Optional[Paths] = None


def _env_path(name: str, default: Path) -> Path:
    value = os.getenv(f"NOVA_{name}_PATH")
    return Path(value) if value else default


def define_paths(root: Optional[Path] = None) -> Paths:
    """Return the process path layout, computing it on the first call only.

    A path already defined in the environment (``NOVA_<NAME>_PATH``) is
    kept as is. Later calls return the stored layout unchanged.
    """
    global _paths
    if _paths is not None:
        return _paths

    root_path = _env_path("ROOT", Path(root) if root else Path.cwd())
    runtime = _env_path("RUNTIME", root_path / "runtime")
    _paths = Paths(
        root=root_path,
        app=_env_path("APP", root_path / "app"),
        runtime=runtime,
        config=_env_path("CONFIG", root_path / "config"),
        log=_env_path("LOG", runtime / "logs"),
        temp=_env_path("TEMP", runtime / "temp"),
        cache=_env_path("CACHE", runtime / "cache"),
        public=_env_path("PUBLIC", root_path / "public"),
        vendor=_env_path("VENDOR", root_path / "vendor"),
    )
    return _paths


def reset_paths() -> None:
    """Forget the computed layout. Only meant for tests."""
    global _paths
    _paths = None
