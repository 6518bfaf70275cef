"""Tag vocabulary and the predicates policies are built from."""

from __future__ import annotations

from typing import TYPE_CHECKING

from actioncheck import ActionCheckError

if TYPE_CHECKING:
    from collections.abc import Set

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

HTTP_GET = "http-get"
HTTP_POST = "http-post"
HTTP_PUT = "http-put"
HTTP_DELETE = "http-delete"
HTTP_PATCH = "http-patch"
HTTP_HEAD = "http-head"
HTTP_OPTIONS = "http-options"

VALIDATE_ANTI_FORGERY_TOKEN = "validate-anti-forgery-token"
AUTHORIZE = "authorize"
ALLOW_ANONYMOUS = "allow-anonymous"

VERB_TAGS: frozenset[str] = frozenset(
    {HTTP_GET, HTTP_POST, HTTP_PUT, HTTP_DELETE, HTTP_PATCH, HTTP_HEAD, HTTP_OPTIONS}
)
MUTATING_VERB_TAGS: frozenset[str] = frozenset({HTTP_POST, HTTP_PUT, HTTP_DELETE, HTTP_PATCH})

# Protection kind -> tag that grants it.
PROTECTION_TAGS: dict[str, str] = {
    "anti-forgery": VALIDATE_ANTI_FORGERY_TOKEN,
    "authorization": AUTHORIZE,
}

KNOWN_TAGS: frozenset[str] = VERB_TAGS | frozenset(PROTECTION_TAGS.values()) | {ALLOW_ANONYMOUS}


class UnknownTagError(ActionCheckError, ValueError):
    """Raised when a protection kind has no tag in the vocabulary."""


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def protection_tag(kind: str) -> str:
    """Return the tag that grants protection *kind*."""
    try:
        return PROTECTION_TAGS[kind]
    except KeyError:
        msg = f"unknown protection kind '{kind}', must be one of {sorted(PROTECTION_TAGS)}"
        raise UnknownTagError(msg) from None


def is_mutating_verb(tags: Set[str]) -> bool:
    """Return True if *tags* declare POST, PUT, DELETE or PATCH."""
    return not MUTATING_VERB_TAGS.isdisjoint(tags)


def has_protection(tags: Set[str], kind: str) -> bool:
    """Return True if *tags* carry the tag for protection *kind*."""
    return protection_tag(kind) in tags
