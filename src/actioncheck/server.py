"""
HTTP endpoint -- FastAPI application factory for the System Check page.

Serve it with the CLI::

    actioncheck serve --module shop.web

or directly with uvicorn::

    uvicorn actioncheck.server:create_default_app --factory --host 127.0.0.1

Security:
  - Every route runs the local-access gate before any discovery or evaluation
  - Callers outside the gate get a plain 404, whatever the internal state
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse

from actioncheck import ActionCheckError, __version__
from actioncheck.checker.runner import run_check
from actioncheck.config import CheckConfig, load_config
from actioncheck.gate import AccessDenied, require_local
from actioncheck.render import format_html, result_to_dict

if TYPE_CHECKING:
    from actioncheck.checker.runner import CheckResult
    from actioncheck.discovery.models import DiscoverySource

logger = logging.getLogger(__name__)


def _local_only(request: Request) -> None:
    """Dependency: refuse non-local callers with 404."""
    config: CheckConfig = request.app.state.config
    host = request.client.host if request.client else None
    try:
        require_local(host, config.trusted_hosts)
    except AccessDenied:
        raise HTTPException(status_code=404, detail="Not Found") from None


def _run(request: Request, ignore: str) -> CheckResult:
    config: CheckConfig = request.app.state.config
    source: DiscoverySource = request.app.state.source
    try:
        return run_check(
            source,
            ignore=[ignore, *config.ignore] if ignore else config.ignore,
            workers=config.workers,
        )
    except ActionCheckError as exc:
        logger.error("System check failed: %s", exc)
        raise HTTPException(status_code=500, detail="System check failed") from exc


def create_app(source: DiscoverySource, *, config: CheckConfig | None = None) -> FastAPI:
    """
    Application factory -- builds the FastAPI app around one discovery source.

    Args:
        source: Where controllers are discovered on each request.
        config: Resolved settings (trusted hosts, default ignore keys, workers).
    """
    application = FastAPI(
        title="actioncheck",
        description="Security policy check for HTTP controller actions",
        version=__version__,
        docs_url=None,
        redoc_url=None,
    )
    application.state.source = source
    application.state.config = config or CheckConfig()

    @application.get(
        "/system", response_class=HTMLResponse, dependencies=[Depends(_local_only)]
    )
    def system_check(request: Request, ignore: str = Query("")) -> HTMLResponse:
        return HTMLResponse(format_html(_run(request, ignore)))

    @application.get("/system.json", dependencies=[Depends(_local_only)])
    def system_check_json(request: Request, ignore: str = Query("")) -> JSONResponse:
        return JSONResponse(content=result_to_dict(_run(request, ignore)))

    logger.info("System check endpoint ready for %s", source.module_name)
    return application


def create_default_app() -> FastAPI:
    """Factory for uvicorn ``--factory``: configure from ``actioncheck.yml`` in the cwd."""
    from actioncheck.cli import build_source

    config = load_config(Path.cwd())
    return create_app(build_source(config), config=config)
