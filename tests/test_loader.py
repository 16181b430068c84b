"""Tests for the namespace loader."""

import pytest

from nova.core.exceptions import LoaderError
from nova.core.loader import Loader


@pytest.fixture
def site(tmp_path):
    controllers = tmp_path / "site" / "controllers"
    controllers.mkdir(parents=True)
    (controllers / "__init__.py").write_text("KIND = 'package'\n", encoding="utf-8")
    (controllers / "home.py").write_text("def index():\n    return 'home'\n", encoding="utf-8")
    (controllers / "broken.py").write_text("raise RuntimeError('bad module')\n", encoding="utf-8")
    return tmp_path / "site"


def test_set_namespace_replaces_map(site):
    loader = Loader()
    loader.set_namespace({"old": "/nowhere"})
    loader.set_namespace({"nsite": str(site)})
    assert list(loader.namespace()) == ["nsite"]


def test_resolve_module_and_package(site):
    loader = Loader()
    loader.set_namespace({"nsite": str(site)})

    assert loader.resolve_path("nsite.controllers.home") == site / "controllers" / "home.py"
    assert loader.resolve_path("nsite.controllers") == site / "controllers" / "__init__.py"
    assert loader.resolve_path("nsite.missing") is None
    assert loader.resolve_path("other.controllers") is None


def test_longest_prefix_wins(site, tmp_path):
    loader = Loader()
    loader.set_namespace({"nsite": str(tmp_path / "empty"), "nsite.controllers": str(site / "controllers")})
    assert loader.resolve_path("nsite.controllers.home") == site / "controllers" / "home.py"


def test_load_imports_and_caches(site):
    loader = Loader()
    loader.set_namespace({"nsite_a": str(site)})

    module = loader.load("nsite_a.controllers.home")

    assert module.index() == "home"
    assert loader.load("nsite_a.controllers.home") is module


def test_load_unknown_name(site):
    loader = Loader()
    loader.set_namespace({"nsite_b": str(site)})
    with pytest.raises(LoaderError, match="No namespace entry"):
        loader.load("nsite_b.controllers.nope")


def test_load_failure_wrapped(site):
    loader = Loader()
    loader.set_namespace({"nsite_c": str(site)})
    with pytest.raises(LoaderError, match="bad module"):
        loader.load("nsite_c.controllers.broken")
