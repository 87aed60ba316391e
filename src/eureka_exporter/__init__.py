"""Prometheus exporter for Eureka service-registry clusters."""

from eureka_exporter.adapters.collector import EurekaCollector
from eureka_exporter.adapters.frameworks.asgi import create_asgi_app
from eureka_exporter.adapters.http_client import HttpClient
from eureka_exporter.core.config import EurekaConfig, load_config, load_config_file
from eureka_exporter.core.encoding.prometheus import encode_metrics
from eureka_exporter.core.errors import (
    ConfigError,
    ExporterError,
    HandlerError,
    NoResponseError,
    ParseError,
    RequestTimeoutError,
    TransportError,
    UnreachableError,
)
from eureka_exporter.core.models import (
    MetricFamily,
    MetricSample,
    NodeEntry,
    ScrapeTarget,
    ServerStatusEntry,
    Snapshot,
)

__all__ = [
    "ConfigError",
    "EurekaCollector",
    "EurekaConfig",
    "ExporterError",
    "HandlerError",
    "HttpClient",
    "MetricFamily",
    "MetricSample",
    "NoResponseError",
    "NodeEntry",
    "ParseError",
    "RequestTimeoutError",
    "ScrapeTarget",
    "ServerStatusEntry",
    "Snapshot",
    "TransportError",
    "UnreachableError",
    "create_asgi_app",
    "encode_metrics",
    "load_config",
    "load_config_file",
]
