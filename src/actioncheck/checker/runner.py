"""Check orchestrator: discover controllers, evaluate policies, build the report."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING

from actioncheck.checker.evaluator import Violation, evaluate_controller
from actioncheck.checker.ignore import parse_ignore
from actioncheck.checker.policies import DEFAULT_POLICIES
from actioncheck.checker.report import Report, ReportBuilder
from actioncheck.discovery.models import canonical_actions

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from actioncheck.checker.policies import Policy
    from actioncheck.discovery.models import DiscoverySource

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Result of one check run."""

    report: Report = field(default_factory=Report)
    violations: list[Violation] = field(default_factory=list)
    module_name: str = ""
    controllers_scanned: int = 0
    actions_scanned: int = 0
    ignored: frozenset[str] = frozenset()
    elapsed_ms: float = 0.0


def run_check(
    source: DiscoverySource,
    *,
    ignore: str | Iterable[str] | None = None,
    policies: Sequence[Policy] = DEFAULT_POLICIES,
    workers: int = 1,
) -> CheckResult:
    """Run every policy over every action *source* discovers.

    Parameters
    ----------
    source:
        Discovery source; its errors propagate unchanged.
    ignore:
        Raw suppression input, parsed with :func:`parse_ignore`.
    policies:
        Ordered policy set.
    workers:
        When greater than one, controllers are evaluated on a thread pool.
        Results are merged in discovery order, so the report is the same
        for any worker count.

    Returns
    -------
    CheckResult
        The finished report plus scan counts.
    """
    if workers < 1:
        msg = f"workers must be >= 1, got {workers}"
        raise ValueError(msg)

    start = time.monotonic()
    ignored = parse_ignore(ignore)

    controllers = source.discover()
    logger.info(
        "Discovered %d controllers in %s", len(controllers), source.module_name
    )

    check_one = partial(evaluate_controller, ignore=ignored, policies=policies)
    if workers > 1 and len(controllers) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            per_controller = list(pool.map(check_one, controllers))
    else:
        per_controller = [check_one(c) for c in controllers]

    builder = ReportBuilder()
    violations: list[Violation] = []
    for found in per_controller:
        builder.extend(found)
        violations.extend(found)

    result = CheckResult(
        report=builder.finalize(),
        violations=violations,
        module_name=source.module_name,
        controllers_scanned=len(controllers),
        actions_scanned=sum(len(canonical_actions(c.actions)) for c in controllers),
        ignored=ignored,
        elapsed_ms=(time.monotonic() - start) * 1000,
    )
    logger.info(
        "Checked %d actions: %d violations in %d controllers",
        result.actions_scanned,
        len(violations),
        len(result.report),
    )
    return result
