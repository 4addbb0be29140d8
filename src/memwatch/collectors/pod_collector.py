# src/memwatch/collectors/pod_collector.py
"""
Collects pod specs from the Kubernetes API and live memory usage from the
metrics-server (metrics.k8s.io), namespace by namespace.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from kubernetes_asyncio.client.rest import ApiException

from ..core.aggregation import build_pod_sample, combine_summaries, sort_pods, summarize_pods
from ..core.exceptions import ClusterConnectionError, CollectionError
from ..core.k8s_client import get_core_v1_api, get_custom_objects_api, get_version_api
from ..models.memory import CollectionResult, MemoryReport, MemorySummary, NamespaceError, PodMemorySample
from ..models.raw import ContainerResources, RawContainer, RawPod, UsageSample
from ..utils.k8s_utils import parse_memory_bytes
from .base_collector import BaseCollector

logger = logging.getLogger(__name__)

METRICS_GROUP = "metrics.k8s.io"
METRICS_VERSION = "v1beta1"
METRICS_PLURAL = "pods"


def is_pod_ready(pod) -> bool:
    """A pod is ready when its 'Ready' condition has status 'True'."""
    conditions = (pod.status.conditions if pod.status else None) or []
    for condition in conditions:
        if condition.type == "Ready":
            return condition.status == "True"
    return False


def to_raw_pod(pod) -> RawPod:
    """Convert a V1Pod into the engine's RawPod."""
    containers: List[RawContainer] = []
    spec_containers = (pod.spec.containers if pod.spec else None) or []
    for container in spec_containers:
        resources = container.resources
        requests = (resources.requests if resources else None) or {}
        limits = (resources.limits if resources else None) or {}
        containers.append(
            RawContainer(
                name=container.name,
                resources=ContainerResources(
                    request=parse_memory_bytes(requests.get("memory")),
                    limit=parse_memory_bytes(limits.get("memory")),
                ),
            )
        )

    return RawPod(
        namespace=pod.metadata.namespace,
        name=pod.metadata.name,
        phase=(pod.status.phase if pod.status else None) or "Unknown",
        ready=is_pod_ready(pod),
        labels=dict(pod.metadata.labels or {}),
        annotations=dict(pod.metadata.annotations or {}),
        containers=containers,
    )


def to_usage_sample(pod_metrics: Dict[str, Any]) -> UsageSample:
    """Convert one metrics.k8s.io PodMetrics item into a UsageSample keyed by container name."""
    usage: Dict[str, Optional[int]] = {}
    for container in pod_metrics.get("containers") or []:
        name = container.get("name")
        if not name:
            continue
        usage[name] = parse_memory_bytes((container.get("usage") or {}).get("memory"))
    return UsageSample(containers=usage)


class PodMemoryCollector(BaseCollector):
    """
    Connects to the K8s API to build a PodMemorySample for every pod, one
    namespace at a time. A namespace that cannot be read is skipped and
    reported in the result's errors; the other namespaces are still collected.
    """

    def __init__(self, kubeconfig: Optional[str] = None, in_cluster: bool = False):
        self.kubeconfig = kubeconfig
        self.in_cluster = in_cluster
        self._core_api = None
        self._custom_api = None

    async def _ensure_client(self):
        """Lazily initialize the Kubernetes clients."""
        if self._core_api:
            return self._core_api

        self._core_api = await get_core_v1_api(self.kubeconfig, self.in_cluster)
        if self._core_api:
            self._custom_api = await get_custom_objects_api(self.kubeconfig, self.in_cluster)
            logger.debug("PodMemoryCollector initialized.")
        else:
            logger.warning("PodMemoryCollector could not initialize Kubernetes client.")

        return self._core_api

    async def health_check(self) -> bool:
        """Checks that the API server answers a version request."""
        api = await get_version_api(self.kubeconfig, self.in_cluster)
        if not api:
            return False
        try:
            version = await api.get_code()
            logger.info("Connected to Kubernetes %s", getattr(version, "git_version", "unknown"))
            return True
        except Exception as e:
            logger.error(f"Failed to connect to Kubernetes cluster: {e}")
            return False
        finally:
            await api.api_client.close()

    async def _list_namespaces(self, api) -> List[str]:
        try:
            namespaces = await api.list_namespace(watch=False)
        except ApiException as e:
            raise CollectionError(f"Failed to list namespaces: {e.reason}") from e
        names = [ns.metadata.name for ns in namespaces.items]
        logger.info("Found %d namespaces", len(names))
        return names

    async def _fetch_usage(self, namespace: str) -> Dict[str, UsageSample]:
        """Usage samples by pod name. A metrics-server failure yields no usage, not an error."""
        if not self._custom_api:
            return {}
        try:
            metrics = await self._custom_api.list_namespaced_custom_object(
                group=METRICS_GROUP,
                version=METRICS_VERSION,
                namespace=namespace,
                plural=METRICS_PLURAL,
            )
        except Exception as e:
            logger.warning("Failed to get pod metrics for namespace %s: %s", namespace, e)
            return {}

        usage_by_pod: Dict[str, UsageSample] = {}
        for item in metrics.get("items") or []:
            pod_name = (item.get("metadata") or {}).get("name")
            if pod_name:
                usage_by_pod[pod_name] = to_usage_sample(item)
        return usage_by_pod

    async def collect_namespace(self, namespace: str) -> List[PodMemorySample]:
        """Builds the pod samples of a single namespace. API errors propagate to the caller."""
        api = await self._ensure_client()
        if not api:
            raise ClusterConnectionError("Kubernetes client not configured")

        pod_list = await api.list_namespaced_pod(namespace, watch=False)
        usage_by_pod = await self._fetch_usage(namespace)

        return [build_pod_sample(to_raw_pod(pod), usage_by_pod.get(pod.metadata.name)) for pod in pod_list.items]

    async def collect(self, namespace: Optional[str] = None) -> CollectionResult:
        """
        Collects every pod of the given namespace, or of all namespaces when
        none is given.

        Raises:
            ClusterConnectionError: If no Kubernetes configuration could be loaded.
            CollectionError: If the namespaces cannot be listed.
        """
        api = await self._ensure_client()
        if not api:
            raise ClusterConnectionError("Kubernetes client not configured")

        timestamp = datetime.now(timezone.utc)
        namespaces = [namespace] if namespace else await self._list_namespaces(api)

        pods: List[PodMemorySample] = []
        summaries: List[MemorySummary] = []
        errors: List[NamespaceError] = []

        for ns in namespaces:
            logger.debug("Processing namespace %s", ns)
            try:
                ns_pods = await self.collect_namespace(ns)
            except Exception as e:
                logger.warning("Failed to get pods for namespace %s: %s", ns, e)
                errors.append(NamespaceError(namespace=ns, error=str(e)))
                continue

            pods.extend(ns_pods)
            summaries.append(summarize_pods(ns_pods, namespace_count=1))

        summary = combine_summaries(summaries, namespace_count=len(namespaces), timestamp=timestamp)
        logger.info(
            "Memory collection completed: total_pods=%d running_pods=%d pods_with_metrics=%d failed_namespaces=%d",
            summary.total_pods,
            summary.running_pods,
            summary.pods_with_metrics,
            len(errors),
        )
        return CollectionResult(report=MemoryReport(summary=summary, pods=sort_pods(pods)), errors=errors)

    async def close(self):
        """Close the Kubernetes API clients if they exist."""
        for api in (self._core_api, self._custom_api):
            if api:
                await api.api_client.close()
        self._core_api = None
        self._custom_api = None
        logger.debug("PodMemoryCollector Kubernetes clients closed.")
