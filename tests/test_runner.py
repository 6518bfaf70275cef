"""Tests for actioncheck.checker.runner: the full check pass."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from actioncheck.checker.policies import ANTIFORGERY_MESSAGE, AUTHORIZATION_MESSAGE
from actioncheck.checker.runner import CheckResult, run_check
from actioncheck.discovery.models import Action, Controller, DiscoveryError

if TYPE_CHECKING:
    from conftest import StaticSource


class _FailingSource:
    module_name = "broken"

    def discover(self) -> list[Controller]:
        raise DiscoveryError("cannot enumerate controllers")


class TestRunCheck:
    def test_report_contents(self, shop_source: StaticSource) -> None:
        result = run_check(shop_source)
        assert isinstance(result, CheckResult)
        assert result.report.to_dict() == {
            "Orders": {"Create": [ANTIFORGERY_MESSAGE]},
            "Account": {
                "Login": [AUTHORIZATION_MESSAGE],
                "Update": [ANTIFORGERY_MESSAGE, AUTHORIZATION_MESSAGE],
            },
        }

    def test_counts_and_module(self, shop_source: StaticSource) -> None:
        result = run_check(shop_source)
        assert result.module_name == "shop.web"
        assert result.controllers_scanned == 3
        assert result.actions_scanned == 8
        assert len(result.violations) == 4
        assert result.elapsed_ms >= 0

    def test_only_violating_controllers_reported(self, shop_source: StaticSource) -> None:
        result = run_check(shop_source)
        assert "Home" not in result.report
        assert set(result.report) == {v.controller_name for v in result.violations}

    def test_idempotent(self, shop_source: StaticSource) -> None:
        first = run_check(shop_source)
        second = run_check(shop_source)
        assert first.report == second.report
        assert repr(first.report) == repr(second.report)
        assert shop_source.calls == 2

    @pytest.mark.parametrize("workers", [2, 4, 16])
    def test_workers_do_not_change_report(
        self, shop_source: StaticSource, workers: int
    ) -> None:
        assert run_check(shop_source, workers=workers).report == run_check(shop_source).report

    def test_ignore_string(self, shop_source: StaticSource) -> None:
        result = run_check(shop_source, ignore="antiforgery")
        assert result.ignored == frozenset({"antiforgery"})
        assert result.report.to_dict() == {
            "Account": {"Login": [AUTHORIZATION_MESSAGE], "Update": [AUTHORIZATION_MESSAGE]},
        }

    def test_ignore_everything(self, shop_source: StaticSource) -> None:
        result = run_check(shop_source, ignore=["antiforgery", "authorization"])
        assert result.report.is_empty

    def test_no_controllers(self, make_source: type[StaticSource]) -> None:
        result = run_check(make_source([]))
        assert result.report.is_empty
        assert result.controllers_scanned == 0

    def test_discovery_error_propagates(self) -> None:
        with pytest.raises(DiscoveryError, match="cannot enumerate"):
            run_check(_FailingSource())

    def test_invalid_workers(self, shop_source: StaticSource) -> None:
        with pytest.raises(ValueError, match="workers"):
            run_check(shop_source, workers=0)

    def test_scenario_post_only(self, make_source: type[StaticSource]) -> None:
        source = make_source([Controller("Items", actions=(Action("Add", {"http-post"}),))])
        report = run_check(source).report
        assert len(report.messages("Items", "Add")) == 2
