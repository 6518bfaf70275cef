"""Project configuration: optional ``actioncheck.yml`` in the project root."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import yaml

from actioncheck import ActionCheckError
from actioncheck.checker.ignore import parse_ignore

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "actioncheck.yml"

VALID_FORMATS: frozenset[str] = frozenset({"rich", "json", "porcelain", "html"})
_KNOWN_KEYS: frozenset[str] = frozenset(
    {"module", "manifest", "ignore", "format", "workers", "trusted_hosts", "host", "port"}
)


class ConfigError(ActionCheckError):
    """Raised when ``actioncheck.yml`` contains invalid configuration."""


@dataclass(frozen=True)
class CheckConfig:
    """Resolved settings for a check run and the HTTP endpoint."""

    module: str | None = None
    manifest: Path | None = None
    ignore: frozenset[str] = frozenset()
    format: str | None = None  # None = pick by TTY
    workers: int = 1
    trusted_hosts: tuple[str, ...] = ()
    host: str = "127.0.0.1"
    port: int = 8765
    project_root: Path | None = field(default=None, compare=False)

    def override(self, **changes: object) -> CheckConfig:
        """Return a copy with every non-``None`` value in *changes* applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _require_int(data: dict[str, object], key: str, default: int, *, minimum: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        msg = f"'{key}' must be an integer >= {minimum}, got {value!r}"
        raise ConfigError(msg)
    return value


def load_config(project_root: Path) -> CheckConfig:
    """Read ``actioncheck.yml`` from *project_root*; defaults when absent."""
    path = project_root / CONFIG_FILENAME
    if not path.is_file():
        return CheckConfig(project_root=project_root)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigError(msg) from exc

    if data is None:
        return CheckConfig(project_root=project_root)
    if not isinstance(data, dict):
        msg = f"{path}: top level must be a mapping"
        raise ConfigError(msg)

    for key in sorted(set(data) - _KNOWN_KEYS):
        logger.warning("Unknown key '%s' in %s", key, path)

    fmt = data.get("format")
    if fmt is not None and fmt not in VALID_FORMATS:
        msg = f"'format' must be one of {sorted(VALID_FORMATS)}, got {fmt!r}"
        raise ConfigError(msg)

    ignore_raw = data.get("ignore")
    if ignore_raw is not None and not isinstance(ignore_raw, (str, list)):
        msg = "'ignore' must be a string or a list of strings"
        raise ConfigError(msg)

    trusted_raw = data.get("trusted_hosts", [])
    if not isinstance(trusted_raw, list):
        msg = "'trusted_hosts' must be a list"
        raise ConfigError(msg)

    if isinstance(ignore_raw, list):
        ignore_raw = [str(k) for k in ignore_raw]

    manifest_raw = data.get("manifest")
    manifest = project_root / str(manifest_raw) if manifest_raw else None

    return CheckConfig(
        module=str(data["module"]) if data.get("module") else None,
        manifest=manifest,
        ignore=parse_ignore(ignore_raw),
        format=fmt,
        workers=_require_int(data, "workers", 1, minimum=1),
        trusted_hosts=tuple(str(h) for h in trusted_raw),
        host=str(data.get("host", "127.0.0.1")),
        port=_require_int(data, "port", 8765, minimum=1),
        project_root=project_root,
    )
