"""Scrape orchestrator for registry node and server metrics.

Each call to :meth:`EurekaCollector.collect` is one scrape cycle: the local
registry's app listing first, then every configured cluster member's status
page, one request at a time. Failures are isolated per target so one bad
member only removes (or degrades) its own contribution.
"""

import logging

import httpx

from eureka_exporter.adapters.http_client import HttpClient
from eureka_exporter.core.config import STATUS_PATH, EurekaConfig
from eureka_exporter.core.errors import ExporterError, UnreachableError
from eureka_exporter.core.metrics import (
    build_families,
    down_entry,
    node_info,
    server_info,
)
from eureka_exporter.core.models import MetricSample, ScrapeTarget, Snapshot
from eureka_exporter.core.ports import HttpRequesterPort, ResponseHandler
from eureka_exporter.core.registry import parse_node_listing, parse_server_status

logger = logging.getLogger(__name__)

SCRAPE_CONNECT_TIMEOUT_MS = 15000
SCRAPE_REQUEST_TIMEOUT_MS = 3000
SCRAPE_SOCKET_TIMEOUT_MS = 120000


class EurekaCollector:
    """Collects registry node info and registry server status on demand."""

    def __init__(
        self,
        config: EurekaConfig,
        client: HttpRequesterPort | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            config: Validated collector configuration.
            client: HTTP client used for scraping (default: HttpClient()).
        """
        self.config = config
        self.client = client if client is not None else HttpClient()

    def collect(self) -> Snapshot:
        """Run one scrape cycle.

        Returns:
            A fresh snapshot; empty when the collector is disabled.
        """
        if not self.config.enabled:
            return ()

        samples: list[MetricSample] = []
        samples.extend(self.scrape_nodes())
        for member in self.config.cluster:
            samples.extend(self.scrape_member(member))
        return build_families(samples)

    def _get(
        self, url: str, handler: ResponseHandler[list[MetricSample]]
    ) -> list[MetricSample] | None:
        return self.client.get(
            url,
            handler=handler,
            connect_timeout_ms=SCRAPE_CONNECT_TIMEOUT_MS,
            request_timeout_ms=SCRAPE_REQUEST_TIMEOUT_MS,
            socket_timeout_ms=SCRAPE_SOCKET_TIMEOUT_MS,
        )

    def scrape_nodes(self) -> list[MetricSample]:
        """Scrape eureka_nodes_info samples from the local registry.

        Any failure contributes zero samples.
        """
        url = self.config.apps_url
        cluster = self.config.cluster_name

        def handle(response: httpx.Response) -> list[MetricSample]:
            return [node_info(e) for e in parse_node_listing(response.content, cluster)]

        try:
            samples = self._get(url, handle) or []
        except ExporterError as exc:
            logger.warning(
                "Node listing scrape failed for %s: %s: %s",
                url,
                type(exc).__name__,
                exc,
            )
            return []
        logger.debug("Scraped %d node samples from %s", len(samples), url)
        return samples

    def scrape_member(self, member: ScrapeTarget) -> list[MetricSample]:
        """Scrape eureka_server_info samples from one cluster member.

        An unreachable member yields a single synthetic DOWN sample; any
        other failure yields nothing for that member.
        """
        url = member.url + STATUS_PATH
        cluster = self.config.cluster_name

        def handle(response: httpx.Response) -> list[MetricSample]:
            return [
                server_info(e) for e in parse_server_status(response.content, cluster)
            ]

        try:
            samples = self._get(url, handle) or []
        except UnreachableError as exc:
            logger.warning("Registry member %s unreachable: %s", member, exc)
            return [server_info(down_entry(cluster, member, self.config.cluster))]
        except ExporterError as exc:
            logger.warning(
                "Status scrape failed for %s: %s: %s",
                member,
                type(exc).__name__,
                exc,
            )
            return []
        logger.debug("Scraped %d server samples from %s", len(samples), url)
        return samples
