"""Prometheus text format encoder for metric snapshots."""

from collections.abc import Iterable

from eureka_exporter.core.models import MetricFamily, MetricSample

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _format_value(value: float) -> str:
    if value != value:
        return "NaN"
    if value == float("inf"):
        return "+Inf"
    if value == float("-inf"):
        return "-Inf"
    return repr(float(value))


def encode_sample(sample: MetricSample) -> str:
    """Encode one sample as an exposition line (without newline)."""
    if not sample.label_names:
        return f"{sample.name} {_format_value(sample.value)}"
    labels = ",".join(
        f'{name}="{_escape_label_value(value)}"'
        for name, value in zip(sample.label_names, sample.label_values, strict=True)
    )
    return f"{sample.name}{{{labels}}} {_format_value(sample.value)}"


def encode_metrics(families: Iterable[MetricFamily]) -> str:
    """Encode metric families to Prometheus text exposition format.

    Args:
        families: Families in export order.

    Returns:
        Exposition text with HELP and TYPE lines per family, one line per
        sample. Empty string if there are no families.
    """
    lines: list[str] = []
    for family in families:
        lines.append(f"# HELP {family.name} {_escape_help(family.help)}")
        lines.append(f"# TYPE {family.name} {family.type}")
        lines.extend(encode_sample(sample) for sample in family.samples)

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
