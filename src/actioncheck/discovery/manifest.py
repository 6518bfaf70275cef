"""YAML manifest discovery: controllers and tags declared in a file."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import yaml

from actioncheck.discovery.models import Action, Controller, DiscoveryError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_MANIFEST_VERSIONS: frozenset[int] = frozenset({1})


def _parse_tags(raw: object, context: str) -> frozenset[str]:
    """Accept a list of strings or a single string; ``None`` means no tags."""
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        return frozenset({raw})
    if not isinstance(raw, list):
        msg = f"{context}: tags must be a list of strings"
        raise DiscoveryError(msg)
    return frozenset(str(t) for t in raw)


def _parse_action(data: object, context: str) -> Action:
    if isinstance(data, str):
        return Action(name=data)
    if not isinstance(data, dict):
        msg = f"{context}: action must be a mapping or a name"
        raise DiscoveryError(msg)
    name = data.get("name")
    if not name:
        msg = f"{context}: action is missing 'name'"
        raise DiscoveryError(msg)
    return Action(name=str(name), tags=_parse_tags(data.get("tags"), f"{context} '{name}'"))


def _parse_controller(data: object, index: int) -> Controller:
    if not isinstance(data, dict):
        msg = f"controllers[{index}]: must be a mapping"
        raise DiscoveryError(msg)
    name = data.get("name")
    if not name:
        msg = f"controllers[{index}]: missing 'name'"
        raise DiscoveryError(msg)
    context = f"Controller '{name}'"

    actions_raw = data.get("actions", [])
    if actions_raw is None:
        actions_raw = []
    if not isinstance(actions_raw, list):
        msg = f"{context}: actions must be a list"
        raise DiscoveryError(msg)

    return Controller(
        name=str(name),
        tags=_parse_tags(data.get("tags"), context),
        actions=tuple(_parse_action(a, f"{context} action") for a in actions_raw),
    )


class ManifestSource:
    """Discovery source backed by a YAML manifest.

    Example::

        version: 1
        module: shop.web
        controllers:
          - name: Orders
            tags: [authorize]
            actions:
              - name: Create
                tags: [http-post, validate-anti-forgery-token]
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.module_name = path.stem

    def discover(self) -> list[Controller]:
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            msg = f"Cannot read manifest {self.path}: {exc}"
            raise DiscoveryError(msg) from exc
        except yaml.YAMLError as exc:
            msg = f"Invalid YAML in manifest {self.path}: {exc}"
            raise DiscoveryError(msg) from exc

        if data is None:
            logger.warning("Manifest %s is empty", self.path)
            return []
        if not isinstance(data, dict):
            msg = f"Manifest {self.path}: top level must be a mapping"
            raise DiscoveryError(msg)

        version = data.get("version", 1)
        if version not in SUPPORTED_MANIFEST_VERSIONS:
            msg = (
                f"Manifest {self.path}: unsupported version {version!r}, "
                f"must be one of {sorted(SUPPORTED_MANIFEST_VERSIONS)}"
            )
            raise DiscoveryError(msg)

        if data.get("module"):
            self.module_name = str(data["module"])

        controllers_raw = data.get("controllers") or []
        if not isinstance(controllers_raw, list):
            msg = f"Manifest {self.path}: 'controllers' must be a list"
            raise DiscoveryError(msg)

        controllers = [_parse_controller(c, i) for i, c in enumerate(controllers_raw)]
        logger.debug("Loaded %d controllers from %s", len(controllers), self.path)
        return controllers
