"""Output encoders for metric snapshots."""

from eureka_exporter.core.encoding.prometheus import CONTENT_TYPE, encode_metrics

__all__ = ["CONTENT_TYPE", "encode_metrics"]
