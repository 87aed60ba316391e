"""Core domain models for registry scraping and metric export."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScrapeTarget:
    """A registry member address.

    Attributes:
        url: Normalized base URL (scheme, host and port, no trailing slash).
    """

    url: str

    @property
    def address(self) -> str:
        """The member address without its scheme (e.g. ``host:8761``)."""
        _, sep, rest = self.url.partition("://")
        return rest if sep else self.url

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True)
class NodeEntry:
    """One service instance registered on the registry.

    Attributes:
        cluster: Display name of the registry cluster.
        application: Registered application name.
        host: Host name the instance registered with.
        instance_id: Instance identifier as reported by the registry.
        status: Free-form status string (UP, DOWN, STARTING, ...).
    """

    cluster: str
    application: str
    host: str
    instance_id: str
    status: str


@dataclass(frozen=True)
class ServerStatusEntry:
    """One registry server's self-reported status.

    Attributes:
        cluster: Display name of the registry cluster.
        replicas: Comma-joined registered replica addresses.
        instance_id: Normalized instance identifier.
        status: Server status string.
        renewal_interval_in_secs: Lease renewal interval, in seconds.
        duration_in_secs: Lease duration before expiry, in seconds.
    """

    cluster: str
    replicas: str
    instance_id: str
    status: str
    renewal_interval_in_secs: str
    duration_in_secs: str


@dataclass(frozen=True)
class MetricSample:
    """A single metric measurement with positionally paired labels.

    Attributes:
        name: Metric name (e.g., eureka_nodes_info).
        label_names: Ordered label names.
        label_values: Label values, paired with label_names by position.
        value: The metric value.
    """

    name: str
    label_names: tuple[str, ...]
    label_values: tuple[str, ...]
    value: float

    def __post_init__(self) -> None:
        if len(self.label_names) != len(self.label_values):
            raise ValueError(
                f"{self.name}: {len(self.label_names)} label names but "
                f"{len(self.label_values)} label values"
            )

    @property
    def labels(self) -> dict[str, str]:
        """Labels as a name -> value mapping, in declaration order."""
        return dict(zip(self.label_names, self.label_values, strict=True))


@dataclass(frozen=True)
class MetricFamily:
    """A named group of samples sharing a label schema.

    Attributes:
        name: Family name.
        type: Prometheus type tag.
        help: Help text.
        samples: Samples in the order they were produced.
    """

    name: str
    type: str
    help: str
    samples: tuple[MetricSample, ...] = field(default_factory=tuple)


# One scrape cycle's output, handed to the serving boundary read-only.
Snapshot = tuple[MetricFamily, ...]
