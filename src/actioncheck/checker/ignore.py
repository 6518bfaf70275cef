"""Ignore filter: turn caller input into the set of policy keys to suppress."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from actioncheck.checker.policies import POLICY_KEYS

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r"[,\s]+")


def parse_ignore(raw: str | Iterable[str] | None) -> frozenset[str]:
    """Parse suppression input into a set of ignore keys.

    *raw* may be ``None``, a free-form string such as
    ``"antiforgery,authorization"``, or an iterable of such strings.  Keys are
    matched exactly and case-sensitively.  Unknown keys are kept; they simply
    never match a policy.
    """
    if raw is None:
        return frozenset()
    chunks = [raw] if isinstance(raw, str) else list(raw)
    keys = frozenset(
        token for chunk in chunks for token in _SEPARATOR_RE.split(chunk) if token
    )
    unknown = keys.difference(POLICY_KEYS)
    if unknown:
        logger.debug("Ignoring unknown ignore keys: %s", ", ".join(sorted(unknown)))
    return keys


def ignore_query(keys: Iterable[str]) -> str:
    """Render *keys* as a query value that :func:`parse_ignore` reads back unchanged."""
    return ",".join(sorted(set(keys)))
