# src/memwatch/core/aggregation.py
"""
Builds pod memory samples from raw pods and usage samples, and rolls pod
samples up into namespace and cluster summaries.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models.memory import ContainerMemorySample, MemorySummary, PodMemorySample
from ..models.raw import RawPod, UsageSample
from .status import RUNNING_PHASE


def aggregate_pod_resources(
    containers: Sequence[ContainerMemorySample],
) -> Tuple[Optional[int], Optional[int]]:
    """Return the pod-level (request, limit).

    Each total is only set when every container declares the value; a single
    container without a request voids the pod-level request even if all the
    others have one. A pod without containers declares nothing to miss, so both
    totals are 0.
    """
    requests = [c.memory_request for c in containers]
    limits = [c.memory_limit for c in containers]

    memory_request = sum(requests) if all(r is not None for r in requests) else None
    memory_limit = sum(limits) if all(lim is not None for lim in limits) else None
    return memory_request, memory_limit


def aggregate_pod_usage(containers: Sequence[ContainerMemorySample]) -> Optional[int]:
    """Sum of the container usages that are present; None when no container reported."""
    reported = [c.current_usage for c in containers if c.current_usage is not None]
    if not reported:
        return None
    return sum(reported)


def build_pod_sample(raw_pod: RawPod, usage: Optional[UsageSample] = None) -> PodMemorySample:
    """Build the PodMemorySample for one raw pod and its (optional) usage sample."""
    containers = [
        ContainerMemorySample(
            name=container.name,
            current_usage=usage.usage_for(container.name) if usage else None,
            memory_request=container.resources.request,
            memory_limit=container.resources.limit,
        )
        for container in raw_pod.containers
    ]
    memory_request, memory_limit = aggregate_pod_resources(containers)

    return PodMemorySample(
        namespace=raw_pod.namespace,
        name=raw_pod.name,
        phase=raw_pod.phase,
        ready=raw_pod.ready,
        containers=containers,
        current_usage=aggregate_pod_usage(containers),
        memory_request=memory_request,
        memory_limit=memory_limit,
        labels=dict(raw_pod.labels),
        annotations=dict(raw_pod.annotations),
    )


def summarize_pods(
    pods: Iterable[PodMemorySample],
    namespace_count: int = 0,
    timestamp: Optional[datetime] = None,
) -> MemorySummary:
    """Fold pod samples into a MemorySummary.

    A pod only contributes to a byte total when it has the matching pod-level
    value: usage for pods with metrics, request for pods with a pod-level
    request, limit for pods with a pod-level limit.
    """
    summary = MemorySummary(namespace_count=namespace_count)
    if timestamp is not None:
        summary.timestamp = timestamp

    for pod in pods:
        summary.total_pods += 1
        if pod.phase == RUNNING_PHASE:
            summary.running_pods += 1
        if pod.current_usage is not None:
            summary.pods_with_metrics += 1
            summary.total_memory_usage += pod.current_usage
        if pod.memory_request is not None:
            summary.pods_with_requests += 1
            summary.total_memory_request += pod.memory_request
        if pod.memory_limit is not None:
            summary.pods_with_limits += 1
            summary.total_memory_limit += pod.memory_limit

    return summary


def combine_summaries(
    summaries: Iterable[MemorySummary],
    namespace_count: int,
    timestamp: Optional[datetime] = None,
) -> MemorySummary:
    """Add namespace summaries together into a cluster summary.

    `namespace_count` is the number of namespaces queried, which may exceed
    the number of summaries when some namespaces failed to load.
    """
    total = MemorySummary(namespace_count=namespace_count)
    if timestamp is not None:
        total.timestamp = timestamp

    for summary in summaries:
        total.total_pods += summary.total_pods
        total.running_pods += summary.running_pods
        total.pods_with_metrics += summary.pods_with_metrics
        total.pods_with_limits += summary.pods_with_limits
        total.pods_with_requests += summary.pods_with_requests
        total.total_memory_usage += summary.total_memory_usage
        total.total_memory_limit += summary.total_memory_limit
        total.total_memory_request += summary.total_memory_request

    return total


def sort_pods(pods: Iterable[PodMemorySample]) -> List[PodMemorySample]:
    """Sort pods by namespace, then name, for stable output."""
    return sorted(pods, key=lambda pod: pod.identity)
