"""Shared test fixtures for all test modules."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from eureka_exporter.adapters.http_client import HttpClient
from eureka_exporter.core.config import EurekaConfig, normalize_member

FIXTURES = Path(__file__).parent / "fixtures"

# A route answers with a body, raises an httpx error, or is a custom handler.
Route = bytes | Exception | Callable[[httpx.Request], httpx.Response]


def load_fixture(name: str) -> bytes:
    """Read a payload file from tests/fixtures."""
    return (FIXTURES / name).read_bytes()


@pytest.fixture
def apps_xml() -> bytes:
    """Node listing payload in XML."""
    return load_fixture("apps.xml")


@pytest.fixture
def apps_json() -> bytes:
    """Node listing payload in JSON."""
    return load_fixture("apps.json")


@pytest.fixture
def status_xml() -> bytes:
    """Server status payload in XML."""
    return load_fixture("status.xml")


@pytest.fixture
def status_json() -> bytes:
    """Server status payload in JSON."""
    return load_fixture("status.json")


@pytest.fixture
def config_path() -> Path:
    """Path to an enabled YAML configuration."""
    return FIXTURES / "application.yml"


@pytest.fixture
def registry_transport():
    """Factory fixture building an httpx.MockTransport from a URL route map.

    Unknown URLs raise httpx.ConnectError. Every request is appended to the
    returned list so tests can assert on what was sent.

    Usage:
        transport, requests = registry_transport({"http://a/eureka/status": body})
    """

    def _build(
        routes: dict[str, Route],
    ) -> tuple[httpx.MockTransport, list[httpx.Request]]:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            url = str(request.url).split("?")[0]
            route = routes.get(url)
            if route is None:
                raise httpx.ConnectError("Connection refused", request=request)
            if isinstance(route, Exception):
                raise route
            if isinstance(route, bytes):
                return httpx.Response(200, content=route)
            return route(request)

        return httpx.MockTransport(handler), seen

    return _build


@pytest.fixture
def make_config() -> Callable[..., EurekaConfig]:
    """Factory fixture for enabled EurekaConfig instances."""

    def _config(
        members: list[str] | None = None,
        port: int = 8761,
        cluster_name: str = "default",
        enabled: bool = True,
    ) -> EurekaConfig:
        return EurekaConfig(
            enabled=enabled,
            port=port,
            cluster=tuple(normalize_member(m) for m in members or []),
            cluster_name=cluster_name,
        )

    return _config


@pytest.fixture
def http_client(registry_transport):
    """Factory fixture returning (HttpClient, seen_requests) for a route map."""

    def _client(routes: dict[str, Route]) -> tuple[HttpClient, list[httpx.Request]]:
        transport, seen = registry_transport(routes)
        return HttpClient(transport=transport), seen

    return _client
