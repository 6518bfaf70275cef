"""The fixed, ordered set of security policies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from actioncheck import ActionCheckError
from actioncheck.checker.tags import (
    PROTECTION_TAGS,
    has_protection,
    is_mutating_verb,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from actioncheck.discovery.models import ActionRef

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ANTIFORGERY = "antiforgery"
AUTHORIZATION = "authorization"

ANTIFORGERY_MESSAGE = (
    "HTTP verb that could mutate a resource does not have anti-forgery token "
    "validation applied."
)
AUTHORIZATION_MESSAGE = (
    "HTTP verb that could mutate a resource does not have authorization applied "
    "to the action or its controller. You may also want to protect the GET "
    "action (if any) that corresponds to this action."
)


class PolicyConfigurationError(ActionCheckError):
    """Raised when the policy set references unknown tags or repeats a key."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Policy:
    """A named rule: predicate over an action's tags plus a fixed message."""

    key: str  # ignore key
    message: str
    predicate: Callable[[ActionRef], bool]
    protections: tuple[str, ...] = ()  # protection kinds the predicate consults

    def violated_by(self, action: ActionRef) -> bool:
        return bool(self.predicate(action))


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _missing_antiforgery(action: ActionRef) -> bool:
    return is_mutating_verb(action.own_tags) and not has_protection(
        action.own_tags, "anti-forgery"
    )


def _missing_authorization(action: ActionRef) -> bool:
    # Authorization declared on the controller covers all of its actions.
    return (
        is_mutating_verb(action.own_tags)
        and not has_protection(action.own_tags, "authorization")
        and not has_protection(action.controller_tags, "authorization")
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_policies(policies: Sequence[Policy]) -> None:
    """Check that every policy has a unique key and only known protection kinds.

    Raises
    ------
    PolicyConfigurationError
        On the first problem found.
    """
    keys: set[str] = set()
    for policy in policies:
        if not policy.key:
            msg = "policy key must be a non-empty string"
            raise PolicyConfigurationError(msg)
        if policy.key in keys:
            msg = f"duplicate policy key '{policy.key}'"
            raise PolicyConfigurationError(msg)
        keys.add(policy.key)
        for kind in policy.protections:
            if kind not in PROTECTION_TAGS:
                msg = f"policy '{policy.key}' references unknown protection kind '{kind}'"
                raise PolicyConfigurationError(msg)


DEFAULT_POLICIES: tuple[Policy, ...] = (
    Policy(
        key=ANTIFORGERY,
        message=ANTIFORGERY_MESSAGE,
        predicate=_missing_antiforgery,
        protections=("anti-forgery",),
    ),
    Policy(
        key=AUTHORIZATION,
        message=AUTHORIZATION_MESSAGE,
        predicate=_missing_authorization,
        protections=("authorization",),
    ),
)

validate_policies(DEFAULT_POLICIES)

POLICY_KEYS: tuple[str, ...] = tuple(p.key for p in DEFAULT_POLICIES)


def get_policy(key: str) -> Policy:
    """Return the default policy registered under *key*."""
    for policy in DEFAULT_POLICIES:
        if policy.key == key:
            return policy
    msg = f"no policy with key '{key}', must be one of {list(POLICY_KEYS)}"
    raise KeyError(msg)
