"""Configuration model and loaders.

Configuration arrives as a nested mapping (usually a YAML document shared
with the registry server itself) and is addressed by dot-separated keys
such as ``metric.eureka.enabled``.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

from eureka_exporter.core.errors import ConfigError
from eureka_exporter.core.models import ScrapeTarget

ENABLED_KEY = "metric.eureka.enabled"
PORT_KEY = "server.port"
CLUSTER_KEY = "metric.eureka.cluster"
CLUSTER_NAME_KEY = "metric.eureka.clusterName"

DEFAULT_PORT = 8761
DEFAULT_CLUSTER_NAME = "default"
LOCALHOST = "127.0.0.1"
APPS_PATH = "/eureka/apps"
STATUS_PATH = "/eureka/status"

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*)://")
_ALLOWED_SCHEMES = {"http", "https"}


@dataclass(frozen=True)
class EurekaConfig:
    """Typed configuration for the registry collector.

    Attributes:
        enabled: Master switch; a disabled collector exports nothing.
        port: Port of the local registry server.
        cluster: Registry members whose status is scraped, in order.
        cluster_name: Value of the ``eureka_cluster`` label.
    """

    enabled: bool = False
    port: int = DEFAULT_PORT
    cluster: tuple[ScrapeTarget, ...] = field(default_factory=tuple)
    cluster_name: str = DEFAULT_CLUSTER_NAME

    @property
    def apps_url(self) -> str:
        """App-listing endpoint of the local registry server."""
        return f"http://{LOCALHOST}:{self.port}{APPS_PATH}"


def lookup(key: str, config: Mapping[str, Any]) -> Any:
    """Resolve a dot-separated key against a nested mapping.

    Args:
        key: Path such as ``"metric.eureka.enabled"``.
        config: Nested mapping to walk.

    Returns:
        The value at the path, or None when any segment is absent or an
        intermediate value is not a mapping.
    """
    node: Any = config
    for segment in key.split("."):
        if not isinstance(node, Mapping) or segment not in node:
            return None
        node = node[segment]
    return node


def _parse_enabled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _parse_port(value: Any) -> int:
    if value is None:
        return DEFAULT_PORT
    if isinstance(value, bool):
        raise ConfigError(f"{PORT_KEY}: expected a port number, got {value!r}")
    try:
        port = int(str(value).strip())
    except ValueError as exc:
        raise ConfigError(
            f"{PORT_KEY}: expected a port number, got {value!r}"
        ) from exc
    if not 0 < port < 65536:
        raise ConfigError(f"{PORT_KEY}: port {port} out of range")
    return port


def normalize_member(address: str) -> ScrapeTarget:
    """Turn a configured member address into a ScrapeTarget.

    Adds ``http://`` when no scheme is given and strips trailing slashes.

    Raises:
        ConfigError: If the scheme is not http/https, there is no host, or
            the port is not a number in 0..65535.
    """
    address = address.strip()
    match = _SCHEME_RE.match(address)
    if match is None:
        address = "http://" + address
    elif match.group(1).lower() not in _ALLOWED_SCHEMES:
        raise ConfigError(
            f"{CLUSTER_KEY}: unsupported scheme in member {address!r}"
        )
    address = address.rstrip("/")
    parts = urlsplit(address)
    if not parts.hostname:
        raise ConfigError(f"{CLUSTER_KEY}: member {address!r} has no host")
    try:
        parts.port
    except ValueError as exc:
        raise ConfigError(
            f"{CLUSTER_KEY}: member {address!r} has an invalid port"
        ) from exc
    return ScrapeTarget(url=address)


def _parse_cluster(value: Any) -> tuple[ScrapeTarget, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list) and all(isinstance(v, str) for v in value):
        items = value
    else:
        raise ConfigError(
            f"{CLUSTER_KEY}: expected a comma-separated string, got {value!r}"
        )
    return tuple(normalize_member(item) for item in items if item.strip())


def _parse_cluster_name(value: Any) -> str:
    if value is None:
        return DEFAULT_CLUSTER_NAME
    if not isinstance(value, str):
        raise ConfigError(f"{CLUSTER_NAME_KEY}: expected a string, got {value!r}")
    return value


def load_config(config: Mapping[str, Any] | None) -> EurekaConfig:
    """Build an EurekaConfig from a nested configuration mapping.

    Only the enable flag is read when the collector is disabled.

    Args:
        config: Parsed configuration document, or None for an empty one.

    Returns:
        Validated EurekaConfig.

    Raises:
        ConfigError: If any read value is malformed.
    """
    config = config or {}
    enabled = _parse_enabled(lookup(ENABLED_KEY, config))
    if not enabled:
        return EurekaConfig(enabled=False)
    return EurekaConfig(
        enabled=True,
        port=_parse_port(lookup(PORT_KEY, config)),
        cluster=_parse_cluster(lookup(CLUSTER_KEY, config)),
        cluster_name=_parse_cluster_name(lookup(CLUSTER_NAME_KEY, config)),
    )


def load_config_file(path: str | Path) -> EurekaConfig:
    """Read a YAML configuration file and build an EurekaConfig.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or its
            document is not a mapping.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if document is None:
        document = {}
    if not isinstance(document, Mapping):
        raise ConfigError(f"{path}: top-level YAML document must be a mapping")
    return load_config(document)
