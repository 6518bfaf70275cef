"""Rule evaluator: run the policy set against one action at a time."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from actioncheck import ActionCheckError
from actioncheck.checker.policies import DEFAULT_POLICIES

if TYPE_CHECKING:
    from collections.abc import Sequence, Set

    from actioncheck.checker.policies import Policy
    from actioncheck.discovery.models import ActionRef, Controller

logger = logging.getLogger(__name__)


class EvaluationError(ActionCheckError):
    """Raised when a policy predicate cannot be evaluated for an action."""


@dataclass(frozen=True)
class Violation:
    """A single policy match for one action."""

    controller_name: str
    action_name: str
    policy_key: str
    message: str


def evaluate(
    action: ActionRef,
    *,
    ignore: Set[str] = frozenset(),
    policies: Sequence[Policy] = DEFAULT_POLICIES,
) -> list[Violation]:
    """Return the violations *action* produces, in policy order.

    Policies whose key is in *ignore* are skipped.  A predicate that raises
    aborts the evaluation with :class:`EvaluationError`; no policy is silently
    dropped.
    """
    violations: list[Violation] = []
    for policy in policies:
        if policy.key in ignore:
            continue
        try:
            violated = policy.violated_by(action)
        except ActionCheckError:
            raise
        except (AttributeError, TypeError, ValueError) as exc:
            msg = (
                f"policy '{policy.key}' failed on "
                f"{action.controller_name}.{action.action_name}: {exc}"
            )
            raise EvaluationError(msg) from exc
        if violated:
            logger.debug(
                "%s.%s violates %s", action.controller_name, action.action_name, policy.key
            )
            violations.append(
                Violation(
                    controller_name=action.controller_name,
                    action_name=action.action_name,
                    policy_key=policy.key,
                    message=policy.message,
                )
            )
    return violations


def evaluate_controller(
    controller: Controller,
    *,
    ignore: Set[str] = frozenset(),
    policies: Sequence[Policy] = DEFAULT_POLICIES,
) -> list[Violation]:
    """Evaluate every canonical action of *controller* in declaration order."""
    violations: list[Violation] = []
    for ref in controller.action_refs():
        violations.extend(evaluate(ref, ignore=ignore, policies=policies))
    return violations
