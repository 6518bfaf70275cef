"""Reflective discovery: find controllers and their tags in live Python modules.

Controllers are classes whose name ends in ``Controller`` (or that are marked
with :func:`controller`).  Public functions defined on them are actions.
Metadata is attached with decorators::

    @tags("authorize")
    class OrdersController:
        @tags("http-post", "validate-anti-forgery-token")
        def create(self): ...

Tags are inherited: a controller carries the tags of its base classes, and an
overridden action carries the tags declared on every definition it overrides.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
import sys
from typing import TYPE_CHECKING, Any, TypeVar

from actioncheck.discovery.models import Action, Controller, DiscoveryError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path
    from types import ModuleType

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

TAGS_ATTR = "__actioncheck_tags__"
CONTROLLER_ATTR = "__actioncheck_controller__"
ACTION_NAME_ATTR = "__actioncheck_action_name__"
NON_ACTION_ATTR = "__actioncheck_non_action__"

CONTROLLER_SUFFIX = "Controller"


# ---------------------------------------------------------------------------
# Decorators
# ---------------------------------------------------------------------------


def tags(*names: str) -> Callable[[_T], _T]:
    """Attach metadata tags to a controller class or an action function."""

    def decorate(obj: _T) -> _T:
        # Read from __dict__ so a subclass does not re-declare its base's tags.
        existing: tuple[str, ...] = vars(obj).get(TAGS_ATTR, ())
        setattr(obj, TAGS_ATTR, existing + tuple(names))
        return obj

    return decorate


def controller(cls: type[_T]) -> type[_T]:
    """Mark *cls* as a controller regardless of its name."""
    setattr(cls, CONTROLLER_ATTR, True)
    return cls


def action_name(name: str) -> Callable[[_T], _T]:
    """Report the decorated function under *name* instead of its own name."""

    def decorate(func: _T) -> _T:
        setattr(func, ACTION_NAME_ATTR, name)
        return func

    return decorate


def non_action(func: _T) -> _T:
    """Exclude a public method from discovery."""
    setattr(func, NON_ACTION_ATTR, True)
    return func


# ---------------------------------------------------------------------------
# Introspection helpers
# ---------------------------------------------------------------------------


def _own_tags(obj: object) -> tuple[str, ...]:
    return tuple(vars(obj).get(TAGS_ATTR, ())) if hasattr(obj, "__dict__") else ()


def is_controller(obj: object) -> bool:
    """Return True if *obj* is a concrete controller class."""
    if not inspect.isclass(obj) or inspect.isabstract(obj):
        return False
    if vars(obj).get(CONTROLLER_ATTR, False):
        return True
    return obj.__name__.endswith(CONTROLLER_SUFFIX) and obj.__name__ != CONTROLLER_SUFFIX


def controller_name(cls: type) -> str:
    """Controller name as reported: the class name without ``Controller``."""
    name = cls.__name__
    if name.endswith(CONTROLLER_SUFFIX) and name != CONTROLLER_SUFFIX:
        return name[: -len(CONTROLLER_SUFFIX)]
    return name


def controller_tags(cls: type) -> frozenset[str]:
    """Union of tags declared on *cls* and every base class."""
    collected: set[str] = set()
    for klass in cls.__mro__:
        collected.update(_own_tags(klass))
    return frozenset(collected)


def controller_actions(cls: type) -> list[Action]:
    """Actions of *cls* in first-declaration order, base classes first."""
    functions: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name.startswith("_") or not inspect.isfunction(value):
                continue
            functions[name] = value

    actions: list[Action] = []
    for name, func in functions.items():
        if getattr(func, NON_ACTION_ATTR, False):
            continue
        collected: set[str] = set()
        for klass in cls.__mro__:
            defined = vars(klass).get(name)
            if defined is not None and inspect.isfunction(defined):
                collected.update(_own_tags(defined))
        actions.append(
            Action(name=getattr(func, ACTION_NAME_ATTR, name), tags=frozenset(collected))
        )
    return actions


def describe_controller(cls: type) -> Controller:
    """Build the :class:`Controller` model for a controller class."""
    return Controller(
        name=controller_name(cls),
        tags=controller_tags(cls),
        actions=tuple(controller_actions(cls)),
    )


# ---------------------------------------------------------------------------
# Discovery source
# ---------------------------------------------------------------------------


class ModuleSource:
    """Discovery source that imports a module (or package) and reflects over it."""

    def __init__(self, module_name: str, *, search_path: Path | None = None) -> None:
        self.module_name = module_name
        self.search_path = search_path

    def _import(self, name: str) -> ModuleType:
        try:
            return importlib.import_module(name)
        except Exception as exc:
            msg = f"Cannot import module '{name}': {type(exc).__name__}: {exc}"
            raise DiscoveryError(msg) from exc

    def _iter_modules(self) -> Iterator[ModuleType]:
        root = self._import(self.module_name)
        yield root
        if not hasattr(root, "__path__"):
            return
        # walk_packages imports subpackages itself; a failed one is retried
        # through _import so the error surfaces as DiscoveryError.
        packages = pkgutil.walk_packages(
            root.__path__, prefix=f"{root.__name__}.", onerror=self._import
        )
        for info in packages:
            yield self._import(info.name)

    def discover(self) -> list[Controller]:
        added = self.search_path is not None and str(self.search_path) not in sys.path
        if added:
            sys.path.insert(0, str(self.search_path))
        try:
            return self._collect()
        finally:
            if added:
                sys.path.remove(str(self.search_path))

    def _collect(self) -> list[Controller]:
        controllers: list[Controller] = []
        seen: set[type] = set()
        for module in self._iter_modules():
            for obj in vars(module).values():
                # Only classes defined in this module, not re-exports.
                if not is_controller(obj) or obj.__module__ != module.__name__:
                    continue
                if obj in seen:
                    continue
                seen.add(obj)
                controllers.append(describe_controller(obj))
                logger.debug("Found controller %s in %s", obj.__qualname__, module.__name__)
        return controllers
