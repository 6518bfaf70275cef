"""Shared test fixtures for actioncheck."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import pytest

from actioncheck.discovery.models import Action, Controller

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


class StaticSource:
    """In-memory discovery source for tests."""

    def __init__(self, controllers: list[Controller], module_name: str = "tests.app") -> None:
        self.controllers = controllers
        self.module_name = module_name
        self.calls = 0

    def discover(self) -> list[Controller]:
        self.calls += 1
        return list(self.controllers)


@pytest.fixture()
def shop_controllers() -> list[Controller]:
    """Three controllers: one clean, one protected at controller level, one unprotected."""
    return [
        Controller(
            name="Home",
            actions=(Action("Index", {"http-get"}), Action("About")),
        ),
        Controller(
            name="Orders",
            tags={"authorize"},
            actions=(
                Action("List", {"http-get"}),
                Action("Create", {"http-post"}),
                Action("Delete", {"http-delete", "validate-anti-forgery-token"}),
            ),
        ),
        Controller(
            name="Account",
            actions=(
                Action("Login", {"http-get"}),
                Action("Login", {"http-post", "validate-anti-forgery-token"}),
                Action("Update", {"http-put"}),
            ),
        ),
    ]


@pytest.fixture()
def make_source() -> type[StaticSource]:
    """Factory for in-memory discovery sources."""
    return StaticSource


@pytest.fixture()
def shop_source(shop_controllers: list[Controller]) -> StaticSource:
    return StaticSource(shop_controllers, module_name="shop.web")


@pytest.fixture()
def manifest_path(tmp_path: Path) -> Path:
    """A YAML manifest equivalent to ``shop_controllers``."""
    path = tmp_path / "controllers.yml"
    path.write_text(
        "version: 1\n"
        "module: shop.web\n"
        "controllers:\n"
        "  - name: Home\n"
        "    actions:\n"
        "      - { name: Index, tags: [http-get] }\n"
        "      - About\n"
        "  - name: Orders\n"
        "    tags: [authorize]\n"
        "    actions:\n"
        "      - { name: List, tags: [http-get] }\n"
        "      - { name: Create, tags: [http-post] }\n"
        "      - { name: Delete, tags: [http-delete, validate-anti-forgery-token] }\n"
        "  - name: Account\n"
        "    actions:\n"
        "      - { name: Login, tags: [http-get] }\n"
        "      - { name: Login, tags: [http-post, validate-anti-forgery-token] }\n"
        "      - { name: Update, tags: [http-put] }\n"
    )
    return path


@pytest.fixture()
def controller_package(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Write an importable ``shopapp`` package with decorated controllers."""
    pkg = tmp_path / "shopapp"
    (pkg / "web").mkdir(parents=True)
    (pkg / "__init__.py").write_text("")
    (pkg / "base.py").write_text(
        "from actioncheck.discovery import tags\n"
        "\n"
        "@tags('authorize')\n"
        "class SecureController:\n"
        "    @tags('http-get')\n"
        "    def health(self):\n"
        "        pass\n"
    )
    (pkg / "web" / "__init__.py").write_text("")
    (pkg / "web" / "orders.py").write_text(
        "from actioncheck.discovery import action_name, non_action, tags\n"
        "from shopapp.base import SecureController\n"
        "\n"
        "class OrdersController(SecureController):\n"
        "    @tags('http-post')\n"
        "    def create(self):\n"
        "        pass\n"
        "\n"
        "    @non_action\n"
        "    def helper(self):\n"
        "        pass\n"
        "\n"
        "class PaymentsController:\n"
        "    @action_name('Refund')\n"
        "    @tags('http-post', 'validate-anti-forgery-token')\n"
        "    def refund_payment(self):\n"
        "        pass\n"
        "\n"
        "    def _private(self):\n"
        "        pass\n"
        "\n"
        "class OrderHelper:\n"
        "    @tags('http-post')\n"
        "    def submit(self):\n"
        "        pass\n"
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    yield tmp_path
    for name in [m for m in sys.modules if m == "shopapp" or m.startswith("shopapp.")]:
        del sys.modules[name]


@pytest.fixture()
def write_package(tmp_path: Path) -> Iterator[Callable[[str, dict[str, str]], Path]]:
    """Return a factory writing a package of ``relative path -> source`` under tmp_path.

    Written packages are not put on ``sys.path``; their modules are dropped
    from ``sys.modules`` afterwards.
    """
    names: list[str] = []

    def factory(name: str, files: dict[str, str]) -> Path:
        names.append(name)
        for relative, source in files.items():
            path = tmp_path / name / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source)
        return tmp_path

    yield factory
    for name in names:
        for module in [m for m in sys.modules if m == name or m.startswith(f"{name}.")]:
            del sys.modules[module]
