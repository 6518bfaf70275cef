"""Controller/action data model shared by discovery sources and the checker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from actioncheck import ActionCheckError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class DiscoveryError(ActionCheckError):
    """Raised when controllers or actions cannot be enumerated."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Action:
    """A single operation exposed by a controller."""

    name: str
    tags: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))


@dataclass(frozen=True)
class Controller:
    """A named group of actions sharing controller-level tags."""

    name: str
    tags: frozenset[str] = field(default_factory=frozenset)
    actions: tuple[Action, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))
        if not isinstance(self.actions, tuple):
            object.__setattr__(self, "actions", tuple(self.actions))

    def action_refs(self) -> Iterator[ActionRef]:
        """Yield one ActionRef per canonical action, in declaration order."""
        for act in canonical_actions(self.actions):
            yield ActionRef(
                controller_name=self.name,
                action_name=act.name,
                own_tags=act.tags,
                controller_tags=self.tags,
            )


@dataclass(frozen=True)
class ActionRef:
    """One action as seen by the rule evaluator.

    ``controller_tags`` is the owning controller's tag set, shared with the
    :class:`Controller` it came from rather than copied.
    """

    controller_name: str
    action_name: str
    own_tags: frozenset[str]
    controller_tags: frozenset[str] = frozenset()


class DiscoverySource(Protocol):
    """Anything that can enumerate controllers for one scanned module."""

    module_name: str

    def discover(self) -> list[Controller]: ...


# ---------------------------------------------------------------------------
# Canonicalization
# ---------------------------------------------------------------------------


def canonical_actions(actions: Iterable[Action]) -> list[Action]:
    """Collapse duplicate declarations of the same action.

    Entries with the same name *and* the same tag set collapse to the first
    one.  Overloads that share a name but declare different tags (a GET form
    and its POST handler, say) are kept apart so each is evaluated on its own
    tags; their messages end up under the shared action name.
    """
    seen: set[tuple[str, frozenset[str]]] = set()
    result: list[Action] = []
    for act in actions:
        key = (act.name, act.tags)
        if key in seen:
            continue
        seen.add(key)
        result.append(act)
    return result
