"""BDD step definitions for registry scrape features."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest
from pytest_bdd import given, parsers, then, when

from eureka_exporter.adapters.collector import EurekaCollector
from eureka_exporter.adapters.frameworks.asgi import create_asgi_app
from eureka_exporter.adapters.http_client import HttpClient
from eureka_exporter.core.config import EurekaConfig, normalize_member

APPS_URL = "http://127.0.0.1:8761/eureka/apps"
FIXTURES = Path(__file__).parents[2] / "fixtures"


def load_fixture(name: str) -> bytes:
    return (FIXTURES / name).read_bytes()


def _status_url(member: str) -> str:
    return f"{normalize_member(member).url}/eureka/status"


@dataclass
class ScrapeScenarioContext:
    """Mutable state shared between the steps of one scenario."""

    members: list[str] = field(default_factory=list)
    routes: dict[str, bytes] = field(default_factory=dict)
    enabled: bool = True
    requests: list[httpx.Request] = field(default_factory=list)
    response: httpx.Response | None = None

    def sample_lines(self, name: str) -> list[str]:
        assert self.response is not None
        return [
            line
            for line in self.response.text.splitlines()
            if line.startswith(name + "{")
        ]

    def server_line(self, member: str) -> str | None:
        needle = f'instance_id="{member}"'
        lines = self.sample_lines("eureka_server_info")
        return next((line for line in lines if needle in line), None)


@pytest.fixture
def ctx() -> ScrapeScenarioContext:
    """Fresh scenario context for each test."""
    return ScrapeScenarioContext()


def _handler(ctx: ScrapeScenarioContext):
    def handle(request: httpx.Request) -> httpx.Response:
        ctx.requests.append(request)
        body = ctx.routes.get(str(request.url))
        if body is None:
            raise httpx.ConnectError("Connection refused", request=request)
        return httpx.Response(200, content=body)

    return handle


async def _scrape(app) -> httpx.Response:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        return await client.get("/metrics")


# === Given ===
@given("the local registry lists the standard applications")
def step_standard_apps(ctx: ScrapeScenarioContext) -> None:
    ctx.routes[APPS_URL] = load_fixture("apps.xml")


@given("the local registry has no applications")
def step_no_apps(ctx: ScrapeScenarioContext) -> None:
    ctx.routes[APPS_URL] = b'{"applications": {"versions__delta": "1"}}'


@given(parsers.parse('the cluster members "{members}"'))
def step_members(ctx: ScrapeScenarioContext, members: str) -> None:
    ctx.members = [m.strip() for m in members.split(",")]


@given("every cluster member answers its status page")
def step_members_answer(ctx: ScrapeScenarioContext) -> None:
    status = load_fixture("status.json")
    for member in ctx.members:
        host = member.split(":")[0]
        ctx.routes[_status_url(member)] = status.replace(
            b"10.0.0.5:eureka-server:8761", member.encode()
        ).replace(b'"peer-1"', f'"{host}"'.encode())


@given(parsers.parse('cluster member "{member}" refuses connections'))
def step_member_refuses(ctx: ScrapeScenarioContext, member: str) -> None:
    del ctx.routes[_status_url(member)]


@given(parsers.parse('cluster member "{member}" answers "{body}"'))
def step_member_answers(ctx: ScrapeScenarioContext, member: str, body: str) -> None:
    ctx.routes[_status_url(member)] = body.encode()


@given("the collector is disabled")
def step_disabled(ctx: ScrapeScenarioContext) -> None:
    ctx.enabled = False


# === When ===
@when("the metrics endpoint is scraped")
def step_scrape(ctx: ScrapeScenarioContext) -> None:
    config = EurekaConfig(
        enabled=ctx.enabled,
        cluster=tuple(normalize_member(m) for m in ctx.members),
    )
    client = HttpClient(transport=httpx.MockTransport(_handler(ctx)))
    app = create_asgi_app(EurekaCollector(config, client))
    ctx.response = asyncio.run(_scrape(app))


# === Then ===
@then(parsers.parse("the response status is {code:d}"))
def step_status_code(ctx: ScrapeScenarioContext, code: int) -> None:
    assert ctx.response is not None
    assert ctx.response.status_code == code


@then("the response body is empty")
def step_empty_body(ctx: ScrapeScenarioContext) -> None:
    assert ctx.response is not None
    assert ctx.response.text == ""


@then("no registry requests were made")
def step_no_requests(ctx: ScrapeScenarioContext) -> None:
    assert ctx.requests == []


@then(parsers.parse('{count:d} "{name}" samples are exported'))
def step_sample_count(ctx: ScrapeScenarioContext, count: int, name: str) -> None:
    assert len(ctx.sample_lines(name)) == count


@then(parsers.parse('no "{name}" family is exported'))
def step_no_family(ctx: ScrapeScenarioContext, name: str) -> None:
    assert ctx.response is not None
    assert f"# TYPE {name} " not in ctx.response.text


@then(parsers.parse('the server sample for "{member}" has status "{status}"'))
def step_member_status(ctx: ScrapeScenarioContext, member: str, status: str) -> None:
    line = ctx.server_line(member)
    assert line is not None
    assert f'status="{status}"' in line


@then(parsers.parse('the server sample for "{member}" lists replicas "{replicas}"'))
def step_member_replicas(
    ctx: ScrapeScenarioContext, member: str, replicas: str
) -> None:
    line = ctx.server_line(member)
    assert line is not None
    assert f'replicas="{replicas}"' in line


@then(parsers.parse('no server sample exists for "{member}"'))
def step_no_member_sample(ctx: ScrapeScenarioContext, member: str) -> None:
    assert ctx.server_line(member) is None
