# src/memwatch/core/monitor.py
import logging
from typing import Optional

from ..collectors.base_collector import BaseCollector
from ..models.memory import AnalysisResult, CollectionResult, MemoryReport
from ..utils.k8s_utils import format_memory
from .analyzer import MemoryAnalyzer
from .config import Config
from .exceptions import ClusterConnectionError

logger = logging.getLogger(__name__)


class MemoryMonitor:
    """Runs collection cycles against the cluster and analyzes their reports."""

    def __init__(self, cfg: Config, collector: BaseCollector, analyzer: Optional[MemoryAnalyzer] = None):
        self.config = cfg
        self.collector = collector
        self.analyzer = analyzer or MemoryAnalyzer(warning_percent=cfg.MEMORY_WARNING_PERCENT)

    @property
    def namespace(self) -> Optional[str]:
        """The namespace to watch, or None for all namespaces."""
        if self.config.ALL_NAMESPACES:
            return None
        return self.config.NAMESPACE or None

    async def health_check(self):
        """Raises ClusterConnectionError when the API server cannot be reached."""
        if not await self.collector.health_check():
            raise ClusterConnectionError("Kubernetes cluster is not reachable")

    async def collect(self) -> CollectionResult:
        result = await self.collector.collect(namespace=self.namespace)
        for error in result.errors:
            logger.warning("Namespace %s skipped: %s", error.namespace, error.error)
        return result

    def analyze(self, report: MemoryReport) -> AnalysisResult:
        return self.analyzer.analyze(report)

    async def run_cycle(self) -> AnalysisResult:
        """Collects one snapshot and analyzes it."""
        result = await self.collect()
        analysis = self.analyze(result.report)

        summary = result.report.summary
        logger.info(
            "Memory check completed: total_pods=%d running_pods=%d problems_found=%d "
            "high_usage_pods=%d warning_pods=%d total_memory_usage=%s",
            summary.total_pods,
            summary.running_pods,
            len(analysis.problems_found),
            len(analysis.high_usage_pods),
            len(analysis.warning_pods),
            format_memory(summary.total_memory_usage),
        )
        return analysis

    async def close(self):
        await self.collector.close()
