# src/memwatch/core/factory.py
"""
Factory functions to instantiate the monitor and its output handlers from a
configuration.
"""

import logging

from ..collectors.pod_collector import PodMemoryCollector
from ..exporters.base_exporter import BaseExporter
from ..exporters.csv_exporter import CSVExporter
from ..exporters.json_exporter import JSONExporter
from ..reporters.console_reporter import ConsoleReporter
from .config import Config
from .monitor import MemoryMonitor

logger = logging.getLogger(__name__)


def get_monitor(cfg: Config) -> MemoryMonitor:
    collector = PodMemoryCollector(kubeconfig=cfg.KUBECONFIG or None, in_cluster=cfg.IN_CLUSTER)
    return MemoryMonitor(cfg, collector)


def get_console_reporter(cfg: Config) -> ConsoleReporter:
    return ConsoleReporter(
        labels=cfg.LABELS,
        annotations=cfg.ANNOTATIONS,
        warning_percent=cfg.MEMORY_WARNING_PERCENT,
    )


def get_exporter(cfg: Config) -> BaseExporter:
    """Returns the exporter for a machine-readable OUTPUT (csv or json)."""
    if cfg.OUTPUT == "csv":
        return CSVExporter(
            labels=cfg.LABELS,
            annotations=cfg.ANNOTATIONS,
            warning_percent=cfg.MEMORY_WARNING_PERCENT,
        )
    if cfg.OUTPUT == "json":
        return JSONExporter()
    raise ValueError(f"No exporter for output format '{cfg.OUTPUT}'")
