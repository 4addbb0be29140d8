# src/memwatch/reporters/console_reporter.py
"""
A reporter that displays the memory report and its analysis as indented text
in the console.

The line builders are plain functions returning strings so that the pod line
layout can be reused by other renderers and checked without a console.
"""

import logging
from itertools import groupby
from typing import Dict, List, Optional, Sequence

from rich.console import Console

from ..core.aggregation import sort_pods
from ..core.analyzer import build_recommendations, displayed_high_usage_pods, displayed_warning_pods
from ..core.limits import limit_state
from ..core.status import status_indicator
from ..models.memory import AnalysisResult, ContainerMemorySample, MemoryReport, PodMemorySample
from ..utils.date_utils import to_rfc3339
from ..utils.k8s_utils import format_memory, format_percent
from .base_reporter import BaseReporter

logger = logging.getLogger(__name__)

MAX_ANNOTATION_LENGTH = 80
NAMESPACE_RULE = "-" * 80


def _usage_fields(entity) -> str:
    return (
        f"Usage: {format_memory(entity.current_usage)} | "
        f"Request: {format_memory(entity.memory_request)} ({format_percent(entity.usage_percent)}) | "
        f"Limit: {format_memory(entity.memory_limit)} ({format_percent(entity.limit_usage_percent)})"
    )


def format_pod_base_info(pod: PodMemorySample) -> str:
    """One-line pod summary: indicator, identity, state, usage figures and limit consistency."""
    indicator = status_indicator(pod.current_usage, pod.ready, pod.phase)
    ready = "Ready" if pod.ready else "NotReady"
    limits, requests = limit_state(pod)
    return (
        f"{indicator.value} {pod.namespace}/{pod.name} [{pod.phase}/{ready}] | {_usage_fields(pod)} | "
        f"Limits: {limits.value} | Requests: {requests.value}"
    )


def format_container_line(container: ContainerMemorySample) -> str:
    return f"    - {container.name} | {_usage_fields(container)}"


def format_container_section(pod: PodMemorySample) -> str:
    return "\n".join(format_container_line(c) for c in pod.containers)


def format_requested_labels(labels: Dict[str, str], requested: Sequence[str]) -> List[str]:
    """`key: value` pairs for the requested labels the pod has, sorted."""
    return sorted(f"{key}: {labels[key]}" for key in requested if key in labels)


def format_requested_annotations(annotations: Dict[str, str], requested: Sequence[str]) -> List[str]:
    """Like format_requested_labels, with long values cut to MAX_ANNOTATION_LENGTH characters."""
    pairs = []
    for key in requested:
        if key not in annotations:
            continue
        value = annotations[key]
        if len(value) > MAX_ANNOTATION_LENGTH:
            value = value[: MAX_ANNOTATION_LENGTH - 3] + "..."
        pairs.append(f"{key}: {value}")
    return sorted(pairs)


def format_pod_metadata(pod: PodMemorySample, labels: Sequence[str], annotations: Sequence[str]) -> str:
    """Labels and annotations block, limited to the requested keys. Empty when there is nothing to show."""
    blocks = []

    requested_labels = format_requested_labels(pod.labels, labels)
    if requested_labels:
        blocks.append("      📏 Labels:" + "".join(f"\n        - {pair}" for pair in requested_labels))

    requested_annotations = format_requested_annotations(pod.annotations, annotations)
    if requested_annotations:
        blocks.append("      📝 Annotations:" + "".join(f"\n        - {pair}" for pair in requested_annotations))

    return "\n".join(blocks)


def format_pod_info(
    pod: PodMemorySample,
    labels: Sequence[str] = (),
    annotations: Sequence[str] = (),
    show_containers: bool = True,
) -> str:
    """Full pod entry: the base line, then its containers, then its metadata block."""
    parts = [format_pod_base_info(pod)]
    if show_containers and pod.containers:
        parts.append(format_container_section(pod))
    metadata = format_pod_metadata(pod, labels, annotations)
    if metadata:
        parts.append(metadata)
    return "\n".join(parts)


class ConsoleReporter(BaseReporter):
    """
    Renders memory reports to the console using the 'rich' library.
    Markup, emoji codes and highlighting are disabled so that pod names and
    label values are printed exactly as they are.
    """

    def __init__(
        self,
        labels: Optional[Sequence[str]] = None,
        annotations: Optional[Sequence[str]] = None,
        warning_percent: float = 80.0,
        console: Optional[Console] = None,
    ):
        self.labels = list(labels or [])
        self.annotations = list(annotations or [])
        self.warning_percent = warning_percent
        self.console = console or Console(markup=False, emoji=False, highlight=False, soft_wrap=True)

    def _pod_info(self, pod: PodMemorySample) -> str:
        return format_pod_info(pod, self.labels, self.annotations)

    def report_summary(self, report: MemoryReport):
        summary = report.summary
        self.console.print()
        self.console.print("=== Kubernetes Memory Report ===", style="bold")
        self.console.print(f"Generated at: {to_rfc3339(summary.timestamp)}")
        self.console.print()
        self.console.print("Cluster Overview:")
        self.console.print(f"  Namespaces: {summary.namespace_count}")
        self.console.print(f"  Total Pods: {summary.total_pods}")
        self.console.print(f"  Running Pods: {summary.running_pods}")
        self.console.print(f"  Pods with Metrics: {summary.pods_with_metrics}")
        self.console.print(f"  Pods with Limits: {summary.pods_with_limits}")
        self.console.print(f"  Pods with Requests: {summary.pods_with_requests}")
        self.console.print()
        self.console.print("Memory Totals:")
        self.console.print(f"  Total Usage: {format_memory(summary.total_memory_usage)}")
        self.console.print(f"  Total Requests: {format_memory(summary.total_memory_request)}")
        self.console.print(f"  Total Limits: {format_memory(summary.total_memory_limit)}")
        self.console.print()

    def report(self, report: MemoryReport):
        """
        Displays the summary, then every pod grouped by namespace.
        """
        self.report_summary(report)

        if not report.pods:
            self.console.print("No pods found.", style="yellow")
            return

        self.console.print("=== Detailed Pod Memory Information ===", style="bold")
        for namespace, pods in groupby(sort_pods(report.pods), key=lambda pod: pod.namespace):
            self.console.print()
            self.console.print(f"Namespace: {namespace}", style="cyan")
            self.console.print(NAMESPACE_RULE)
            for pod in pods:
                self.console.print(f"  {self._pod_info(pod)}")
        self.console.print()

    def report_analysis(self, analysis: AnalysisResult):
        """
        Displays the findings, the limit-consistent high usage and warning
        pods, and the recommendations.
        """
        self.console.print()
        self.console.print("=== Memory Usage Analysis ===", style="bold")

        if not analysis.problems_found:
            self.console.print("✅ No memory issues detected.", style="green")
        else:
            self.console.print(f"🚨 Found {len(analysis.problems_found)} potential issues:", style="red")
            self.console.print()
            for index, problem in enumerate(analysis.problems_found, start=1):
                self.console.print(f"{index}. {problem}")

        high_usage = displayed_high_usage_pods(analysis)
        if high_usage:
            self.console.print()
            self.console.print(f"🔥 High Memory Usage Pods ({len(high_usage)}):", style="bold red")
            for pod in high_usage:
                self.console.print(f"  {self._pod_info(pod)}")

        warning = displayed_warning_pods(analysis)
        if warning:
            self.console.print()
            self.console.print(f"⚠️  Warning Level Pods ({len(warning)}):", style="bold yellow")
            for pod in warning:
                self.console.print(f"  {self._pod_info(pod)}")

        self.console.print()
        self.report_recommendations(analysis)

    def report_recommendations(self, analysis: AnalysisResult):
        self.console.print("📋 Recommendations:", style="bold")
        for line in build_recommendations(analysis, self.warning_percent):
            self.console.print(f"• {line}")
