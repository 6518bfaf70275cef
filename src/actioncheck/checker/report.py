"""Report aggregation: group violation messages by controller, then action."""

from __future__ import annotations

import threading
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from actioncheck.checker.evaluator import Violation


class Report:
    """Read-only controller -> action -> messages mapping.

    Iteration follows insertion order at both levels.  Controllers and
    actions only appear when they carry at least one message.
    """

    __slots__ = ("_issues",)

    def __init__(self, issues: Mapping[str, Mapping[str, tuple[str, ...]]] | None = None) -> None:
        frozen: dict[str, Mapping[str, tuple[str, ...]]] = {}
        for controller, actions in (issues or {}).items():
            kept = {action: tuple(msgs) for action, msgs in actions.items() if msgs}
            if kept:
                frozen[controller] = MappingProxyType(kept)
        self._issues: Mapping[str, Mapping[str, tuple[str, ...]]] = MappingProxyType(frozen)

    @property
    def controllers(self) -> tuple[str, ...]:
        return tuple(self._issues)

    def actions(self, controller: str) -> Mapping[str, tuple[str, ...]]:
        """Return the action -> messages mapping for *controller*."""
        return self._issues[controller]

    def messages(self, controller: str, action: str) -> tuple[str, ...]:
        return self._issues[controller][action]

    def items(self) -> Iterator[tuple[str, Mapping[str, tuple[str, ...]]]]:
        return iter(self._issues.items())

    @property
    def violation_count(self) -> int:
        return sum(len(msgs) for actions in self._issues.values() for msgs in actions.values())

    @property
    def is_empty(self) -> bool:
        return not self._issues

    def to_dict(self) -> dict[str, dict[str, list[str]]]:
        """Return a plain, JSON-serializable copy."""
        return {
            controller: {action: list(msgs) for action, msgs in actions.items()}
            for controller, actions in self._issues.items()
        }

    def __len__(self) -> int:
        return len(self._issues)

    def __iter__(self) -> Iterator[str]:
        return iter(self._issues)

    def __contains__(self, controller: object) -> bool:
        return controller in self._issues

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Report):
            return NotImplemented
        # Order is part of the contract, so compare as ordered lists.
        return _ordered(self) == _ordered(other)

    def __hash__(self) -> int:
        return hash(_ordered(self))

    def __repr__(self) -> str:
        return f"Report({self.to_dict()!r})"


def _ordered(report: Report) -> tuple[tuple[str, tuple[tuple[str, tuple[str, ...]], ...]], ...]:
    return tuple(
        (controller, tuple(actions.items())) for controller, actions in report.items()
    )


class ReportBuilder:
    """Accumulates violations into a :class:`Report`.

    ``add`` is safe to call from several threads; the order of the finished
    report is the order in which messages were added.
    """

    def __init__(self) -> None:
        self._issues: dict[str, dict[str, list[str]]] = {}
        self._lock = threading.Lock()

    def add(self, violation: Violation) -> None:
        with self._lock:
            actions = self._issues.setdefault(violation.controller_name, {})
            actions.setdefault(violation.action_name, []).append(violation.message)

    def extend(self, violations: Iterable[Violation]) -> None:
        for violation in violations:
            self.add(violation)

    def merge(self, other: ReportBuilder) -> None:
        """Append everything collected by *other*, in its order."""
        with other._lock:
            snapshot = [
                (controller, action, list(msgs))
                for controller, actions in other._issues.items()
                for action, msgs in actions.items()
            ]
        with self._lock:
            for controller, action, msgs in snapshot:
                self._issues.setdefault(controller, {}).setdefault(action, []).extend(msgs)

    def finalize(self) -> Report:
        with self._lock:
            return Report(
                {
                    controller: {action: tuple(msgs) for action, msgs in actions.items()}
                    for controller, actions in self._issues.items()
                }
            )
