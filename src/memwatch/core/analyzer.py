# src/memwatch/core/analyzer.py

import logging
from typing import List, Optional, Union

from ..models.memory import AnalysisResult, ContainerMemorySample, MemoryReport, PodMemorySample
from ..utils.k8s_utils import format_memory
from .limits import LimitState, limit_state
from .status import CRITICAL_LIMIT_PERCENT, CRITICAL_REQUEST_PERCENT

LOG = logging.getLogger(__name__)


def _add_unique(pods: List[PodMemorySample], pod: PodMemorySample):
    if not any(p.identity == pod.identity for p in pods):
        pods.append(pod)


def filter_all_limited(pods: List[PodMemorySample]) -> List[PodMemorySample]:
    """Keep only pods whose containers all declare a memory limit."""
    return [pod for pod in pods if limit_state(pod)[0] == LimitState.ALL]


def displayed_high_usage_pods(analysis: AnalysisResult) -> List[PodMemorySample]:
    return filter_all_limited(analysis.high_usage_pods)


def displayed_warning_pods(analysis: AnalysisResult) -> List[PodMemorySample]:
    """Limit-consistent warning pods that are not already listed as high usage."""
    shown = {pod.identity for pod in displayed_high_usage_pods(analysis)}
    return [pod for pod in filter_all_limited(analysis.warning_pods) if pod.identity not in shown]


class MemoryAnalyzer:
    """
    Scans pod and container samples against the usage thresholds and
    collects the findings.
    """

    def __init__(self, warning_percent: float = 80.0):
        """
        :param warning_percent: Usage of the memory request (0-100) at or
                                above which a pod or container is a warning.
        """
        self.warning_percent = warning_percent
        LOG.debug(
            "MemoryAnalyzer initialized with thresholds: Warning=%s CriticalRequest=%s CriticalLimit=%s",
            self.warning_percent,
            CRITICAL_REQUEST_PERCENT,
            CRITICAL_LIMIT_PERCENT,
        )

    def analyze(self, report: MemoryReport) -> AnalysisResult:
        analysis = AnalysisResult(report=report)

        for pod in report.pods:
            self._check_entity(analysis, pod, pod, f"Pod {pod.namespace}/{pod.name}")
            for container in pod.containers:
                subject = f"Pod {pod.namespace}/{pod.name} container {container.name}"
                self._check_entity(analysis, pod, container, subject)

        LOG.info(
            "Memory analysis completed: warning_pods=%d high_usage_pods=%d problems_found=%d",
            len(analysis.warning_pods),
            len(analysis.high_usage_pods),
            len(analysis.problems_found),
        )
        return analysis

    def _check_entity(
        self,
        analysis: AnalysisResult,
        pod: PodMemorySample,
        entity: Union[PodMemorySample, ContainerMemorySample],
        subject: str,
    ):
        """
        Apply the threshold checks to a pod or one of its containers.
        Sets are made of pods: a container crossing a threshold marks its pod.
        """
        if entity.current_usage is None:
            return

        usage_percent: Optional[float] = entity.usage_percent
        if usage_percent is not None and usage_percent >= self.warning_percent:
            _add_unique(analysis.warning_pods, pod)
            if usage_percent >= CRITICAL_REQUEST_PERCENT:
                _add_unique(analysis.high_usage_pods, pod)
                analysis.problems_found.append(
                    f"{subject} is using {usage_percent:.1f}% of its memory request "
                    f"({format_memory(entity.current_usage)} / {format_memory(entity.memory_request)})"
                )

        limit_usage_percent: Optional[float] = entity.limit_usage_percent
        if limit_usage_percent is not None and limit_usage_percent >= CRITICAL_LIMIT_PERCENT:
            _add_unique(analysis.high_usage_pods, pod)
            analysis.problems_found.append(
                f"{subject} is using {limit_usage_percent:.1f}% of its memory limit "
                f"({format_memory(entity.current_usage)} / {format_memory(entity.memory_limit)})"
            )

        if entity.memory_limit is None:
            analysis.problems_found.append(f"{subject} has no memory limit defined")

        if entity.memory_request is None:
            analysis.problems_found.append(f"{subject} has no memory request defined")


def build_recommendations(analysis: AnalysisResult, warning_percent: float) -> List[str]:
    """Derive the advisory lines printed after the analysis."""
    recommendations: List[str] = []
    pods = analysis.report.pods
    summary = analysis.report.summary

    pods_without_limits = sum(1 for pod in pods if pod.memory_limit is None)
    pods_without_requests = sum(1 for pod in pods if pod.memory_request is None)

    if pods_without_limits > 0:
        recommendations.append(
            f"Set memory limits for {pods_without_limits} pods to prevent OOM kills and resource contention"
        )
    if pods_without_requests > 0:
        recommendations.append(f"Set memory requests for {pods_without_requests} pods to enable proper scheduling")
    if analysis.high_usage_pods:
        recommendations.append(
            f"Monitor {len(analysis.high_usage_pods)} high-usage pods closely - consider scaling or optimization"
        )
    if summary.pods_with_metrics < summary.running_pods:
        recommendations.append("Consider installing/checking metrics-server for complete memory monitoring")

    recommendations.append(f"Regular monitoring recommended with current threshold: {warning_percent:.1f}%")
    return recommendations
