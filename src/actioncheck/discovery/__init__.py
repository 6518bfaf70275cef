"""Discovery domain: enumerate controllers, actions and their tags."""

from actioncheck.discovery.introspect import (
    ModuleSource,
    action_name,
    controller,
    describe_controller,
    non_action,
    tags,
)
from actioncheck.discovery.manifest import ManifestSource
from actioncheck.discovery.models import (
    Action,
    ActionRef,
    Controller,
    DiscoveryError,
    DiscoverySource,
    canonical_actions,
)

__all__ = [
    "Action",
    "ActionRef",
    "Controller",
    "DiscoveryError",
    "DiscoverySource",
    "ManifestSource",
    "ModuleSource",
    "action_name",
    "canonical_actions",
    "controller",
    "describe_controller",
    "non_action",
    "tags",
]
