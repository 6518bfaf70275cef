"""Formatters for check results: text, JSON, porcelain and the HTML page."""

from __future__ import annotations

import html
import json
from typing import TYPE_CHECKING

from actioncheck.checker.ignore import ignore_query
from actioncheck.checker.policies import ANTIFORGERY, AUTHORIZATION

if TYPE_CHECKING:
    from actioncheck.checker.runner import CheckResult


def format_rich(result: CheckResult) -> str:
    """Format a CheckResult as human-readable text.

    Example output with violations::

        Module: shop.web
        Controllers: 3 scanned, 11 actions

        OrdersController
          Create
            - HTTP verb that could mutate a resource does not have ...

        2 violations found in 1 controller
    """
    lines: list[str] = []

    lines.append(f"Module: {result.module_name}")
    lines.append(
        f"Controllers: {result.controllers_scanned} scanned, {result.actions_scanned} actions"
    )
    if result.ignored:
        lines.append(f"Ignoring: {', '.join(sorted(result.ignored))}")
    lines.append("")

    report = result.report
    if report.is_empty:
        lines.append(f"✓ No issues found ({result.controllers_scanned} controllers scanned)")
        return "\n".join(lines)

    for controller, actions in report.items():
        lines.append(f"✗ {controller}Controller")
        for action, messages in actions.items():
            lines.append(f"  {action}")
            for message in messages:
                lines.append(f"    - {message}")
        lines.append("")

    count = report.violation_count
    noun = "controller" if len(report) == 1 else "controllers"
    lines.append(f"{count} violations found in {len(report)} {noun}")
    return "\n".join(lines)


def result_to_dict(result: CheckResult) -> dict[str, object]:
    """Return a JSON-serializable view of *result*."""
    return {
        "module": result.module_name,
        "controllers_scanned": result.controllers_scanned,
        "actions_scanned": result.actions_scanned,
        "ignored": sorted(result.ignored),
        "issues": result.report.to_dict(),
        "summary": {
            "controllers_scanned": result.controllers_scanned,
            "actions_scanned": result.actions_scanned,
            "controllers_with_issues": len(result.report),
            "violations_count": result.report.violation_count,
            "elapsed_ms": result.elapsed_ms,
        },
    }


def format_json(result: CheckResult) -> str:
    """Format a CheckResult as structured JSON."""
    return json.dumps(result_to_dict(result), indent=2)


def format_porcelain(result: CheckResult) -> str:
    """One ``controller:action:policy_key`` line per violation.

    Returns empty string when there are no violations.
    """
    return "\n".join(
        f"{v.controller_name}:{v.action_name}:{v.policy_key}" for v in result.violations
    )


_HTML_STYLE = (
    "body {font-family: arial,helvetica,sans-serif; font-size: 0.9em;}"
    "h3 {padding-left: 8px;}"
)


def _ignore_link(keys: list[str], label: str) -> str:
    query = html.escape(ignore_query(keys), quote=True)
    return f'<p>{label} <a href="?ignore={query}">click here</a>.</p>'


def format_html(result: CheckResult) -> str:
    """Render the System Check page.

    Lists issues per controller and action, and links that re-run the check
    with one policy category ignored, or with no suppression at all.
    """
    esc = html.escape
    parts: list[str] = [
        "<html><head>",
        "<title>System Check</title>",
        f"<style>{_HTML_STYLE}</style>",
        "</head><body>",
        "<div><h1>System Check: Potential Issues Found</h1>",
        (
            f"<p>Reflecting over {result.controllers_scanned} controllers and their actions "
            f"in <code>{esc(result.module_name)}</code> found the following potential issues. "
            "Some of these may be by design. For example, you probably do not want "
            "authorization on a <code>Login</code> action.</p>"
        ),
        _ignore_link([ANTIFORGERY], "To ignore antiforgery issues"),
        _ignore_link([AUTHORIZATION], "To ignore authorization issues"),
        _ignore_link([], "To clear the ignore filters"),
    ]

    if result.report.is_empty:
        parts.append("<p>No issues found.</p>")

    for controller, actions in result.report.items():
        parts.append(f"<h2><code>{esc(controller)}Controller</code></h2>")
        for action, messages in actions.items():
            parts.append(f"<h3><code>{esc(action)}</code></h3>")
            parts.append("<ul>")
            parts.extend(f"<li>{esc(message)}</li>" for message in messages)
            parts.append("</ul>")

    parts.append("</div></body></html>")
    return "".join(parts)


FORMATTERS = {
    "rich": format_rich,
    "json": format_json,
    "porcelain": format_porcelain,
    "html": format_html,
}
