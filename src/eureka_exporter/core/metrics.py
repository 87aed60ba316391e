"""Projection of registry records onto metric samples and families."""

from collections.abc import Iterable, Sequence

from eureka_exporter.core.models import (
    MetricFamily,
    MetricSample,
    NodeEntry,
    ScrapeTarget,
    ServerStatusEntry,
)

GAUGE = "gauge"

NODES_INFO = "eureka_nodes_info"
NODES_INFO_HELP = (
    "A metric shows that the service node info which registried on the eureka server."
)
NODES_INFO_LABELS = ("eureka_cluster", "application", "host", "instance_id", "status")

SERVER_INFO = "eureka_server_info"
SERVER_INFO_HELP = "A metric shows that eureka servers info."
SERVER_INFO_LABELS = (
    "eureka_cluster",
    "replicas",
    "instance_id",
    "status",
    "renewal_interval_in_secs",
    "duration_in_secs",
)

STATUS_DOWN = "DOWN"
DEFAULT_RENEWAL_INTERVAL_IN_SECS = "30"
DEFAULT_DURATION_IN_SECS = "90"

# Info metrics mark presence; the information lives in the labels.
PRESENT = 1.0

_FAMILY_META = {
    NODES_INFO: NODES_INFO_HELP,
    SERVER_INFO: SERVER_INFO_HELP,
}


def node_info(entry: NodeEntry) -> MetricSample:
    """Create the eureka_nodes_info sample for one registered instance."""
    return MetricSample(
        name=NODES_INFO,
        label_names=NODES_INFO_LABELS,
        label_values=(
            entry.cluster,
            entry.application,
            entry.host,
            entry.instance_id,
            entry.status,
        ),
        value=PRESENT,
    )


def server_info(entry: ServerStatusEntry) -> MetricSample:
    """Create the eureka_server_info sample for one registry server."""
    return MetricSample(
        name=SERVER_INFO,
        label_names=SERVER_INFO_LABELS,
        label_values=(
            entry.cluster,
            entry.replicas,
            entry.instance_id,
            entry.status,
            entry.renewal_interval_in_secs,
            entry.duration_in_secs,
        ),
        value=PRESENT,
    )


def join_replicas(members: Sequence[ScrapeTarget]) -> str:
    """Render configured members the way the registry lists its replicas.

    Example:
        ``http://a, http://b`` becomes ``"http://a/, http://b/"``.
    """
    return ", ".join(f"{member.url}/" for member in members)


def down_entry(
    cluster: str, member: ScrapeTarget, members: Sequence[ScrapeTarget]
) -> ServerStatusEntry:
    """Synthesize the status of a registry member that could not be reached.

    Args:
        cluster: Cluster display name.
        member: The unreachable member.
        members: Every configured member, used for the replicas label.

    Returns:
        A DOWN entry carrying the registry's default lease settings.
    """
    return ServerStatusEntry(
        cluster=cluster,
        replicas=join_replicas(members),
        instance_id=member.address,
        status=STATUS_DOWN,
        renewal_interval_in_secs=DEFAULT_RENEWAL_INTERVAL_IN_SECS,
        duration_in_secs=DEFAULT_DURATION_IN_SECS,
    )


def build_families(samples: Iterable[MetricSample]) -> tuple[MetricFamily, ...]:
    """Group samples into families, keeping first-seen family order.

    Sample order within a family is preserved. Families without samples
    are not emitted.

    Raises:
        ValueError: If a sample belongs to an unknown family.
    """
    grouped: dict[str, list[MetricSample]] = {}
    for sample in samples:
        if sample.name not in _FAMILY_META:
            raise ValueError(f"unknown metric family: {sample.name}")
        grouped.setdefault(sample.name, []).append(sample)
    return tuple(
        MetricFamily(
            name=name,
            type=GAUGE,
            help=_FAMILY_META[name],
            samples=tuple(family_samples),
        )
        for name, family_samples in grouped.items()
    )
