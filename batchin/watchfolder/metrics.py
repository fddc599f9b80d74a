"""Prometheus metrics for batch runs.

A run is a short-lived process, so the registry is written out once at exit
in the text exposition format, for the node exporter textfile collector.
"""

from pathlib import Path

from prometheus_client import REGISTRY, CollectorRegistry, Counter, write_to_textfile

MESSAGES_PUBLISHED = Counter(
    "batchin_messages_published_total",
    "Total number of watchfolder messages handed to the transport",
    ["queue", "status"],  # success, failure
)

BATCH_RUNS = Counter(
    "batchin_runs_total",
    "Total number of batch runs by outcome",
    ["outcome"],  # completed, declined, empty, failed
)


def register_metrics() -> None:
    """Register metrics with Prometheus."""
    metrics = [
        MESSAGES_PUBLISHED,
        BATCH_RUNS,
    ]
    for metric in metrics:
        try:
            REGISTRY.register(metric)
        except ValueError:
            # Metric already registered
            pass


def export_metrics(path: str | Path, registry: CollectorRegistry = REGISTRY) -> None:
    """Write the registry to a textfile, replacing it atomically.

    Args:
        path: Destination .prom file; its directory must exist
        registry: Registry to export
    """
    write_to_textfile(str(path), registry)


# Register metrics on module import
register_metrics()
