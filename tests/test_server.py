"""Tests for actioncheck.server: the local-only System Check endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

from actioncheck.config import CheckConfig
from actioncheck.discovery.models import DiscoveryError
from actioncheck.server import create_app

if TYPE_CHECKING:
    from conftest import StaticSource

    from actioncheck.discovery.models import Controller

# TestClient reports its peer as "testclient", which is not a loopback address.
TRUSTED = CheckConfig(trusted_hosts=("testclient",))


class _ExplodingSource:
    module_name = "boom"

    def __init__(self) -> None:
        self.calls = 0

    def discover(self) -> list[Controller]:
        self.calls += 1
        raise DiscoveryError("registry offline")


@pytest.fixture()
def client(shop_source: StaticSource) -> TestClient:
    return TestClient(create_app(shop_source, config=TRUSTED))


class TestGate:
    def test_remote_caller_gets_404(self, shop_source: StaticSource) -> None:
        remote = TestClient(create_app(shop_source))
        assert remote.get("/system").status_code == 404
        assert remote.get("/system.json").status_code == 404
        assert shop_source.calls == 0

    def test_remote_caller_404_even_when_discovery_fails(self) -> None:
        source = _ExplodingSource()
        remote = TestClient(create_app(source))
        assert remote.get("/system").status_code == 404
        assert source.calls == 0


class TestSystemPage:
    def test_html_report(self, client: TestClient) -> None:
        response = client.get("/system")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "<h2><code>OrdersController</code></h2>" in response.text
        assert "<h2><code>AccountController</code></h2>" in response.text

    def test_ignore_query(self, client: TestClient) -> None:
        response = client.get("/system", params={"ignore": "antiforgery"})
        assert "OrdersController" not in response.text
        assert "AccountController" in response.text

    def test_clear_filters(self, client: TestClient) -> None:
        response = client.get("/system?ignore=")
        assert "OrdersController" in response.text

    def test_json_report(self, client: TestClient) -> None:
        data = client.get("/system.json", params={"ignore": "authorization"}).json()
        assert data["ignored"] == ["authorization"]
        assert data["issues"] == {
            "Orders": {"Create": [data["issues"]["Orders"]["Create"][0]]},
            "Account": {"Update": [data["issues"]["Account"]["Update"][0]]},
        }

    def test_configured_ignore_applies(self, shop_source: StaticSource) -> None:
        config = CheckConfig(trusted_hosts=("testclient",), ignore=frozenset({"antiforgery"}))
        data = TestClient(create_app(shop_source, config=config)).get("/system.json").json()
        assert data["ignored"] == ["antiforgery"]

    def test_internal_error_is_500(self) -> None:
        client = TestClient(create_app(_ExplodingSource(), config=TRUSTED))
        response = client.get("/system")
        assert response.status_code == 500
        assert "registry offline" not in response.text
