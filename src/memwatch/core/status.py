# src/memwatch/core/status.py
"""
Health classification of pods and containers.

Pods and containers are classified separately: a pod's own request/limit
totals can be missing (see core.aggregation) while each of its containers is
fully configured, so container status is computed from container data only.
"""

from enum import Enum
from typing import Optional

from ..models.memory import ContainerMemorySample, PodMemorySample, usage_percent_of

CRITICAL_REQUEST_PERCENT = 95.0
CRITICAL_LIMIT_PERCENT = 90.0

RUNNING_PHASE = "Running"
PENDING_PHASE = "Pending"


class MemoryStatus(str, Enum):
    """Memory status, listed in evaluation order: the first matching state wins."""

    NO_DATA = "no_data"
    NO_CONFIG = "no_config"
    NO_REQUEST = "no_request"
    NO_LIMIT = "no_limit"
    CRITICAL = "critical"
    WARNING = "warning"
    NOT_READY = "not_ready"
    OK = "ok"


class StatusIndicator(str, Enum):
    """Visual marker shown next to a pod in the text report."""

    NEUTRAL = "⚪"
    POSITIVE = "🟢"
    CAUTION = "🟡"
    NEGATIVE = "🔴"


def classify_memory_status(
    current_usage: Optional[int],
    memory_request: Optional[int],
    memory_limit: Optional[int],
    warning_percent: float,
    ready: bool,
    phase: str,
) -> MemoryStatus:
    """Classify one entity from its usage, request, limit and readiness."""
    if current_usage is None:
        return MemoryStatus.NO_DATA
    if memory_request is None and memory_limit is None:
        return MemoryStatus.NO_CONFIG
    if memory_request is None:
        return MemoryStatus.NO_REQUEST
    if memory_limit is None:
        return MemoryStatus.NO_LIMIT

    usage_percent = usage_percent_of(current_usage, memory_request)
    limit_usage_percent = usage_percent_of(current_usage, memory_limit)

    if (usage_percent is not None and usage_percent >= CRITICAL_REQUEST_PERCENT) or (
        limit_usage_percent is not None and limit_usage_percent >= CRITICAL_LIMIT_PERCENT
    ):
        return MemoryStatus.CRITICAL
    if usage_percent is not None and usage_percent >= warning_percent:
        return MemoryStatus.WARNING
    if not ready or phase != RUNNING_PHASE:
        return MemoryStatus.NOT_READY
    return MemoryStatus.OK


def pod_memory_status(pod: PodMemorySample, warning_percent: float) -> MemoryStatus:
    return classify_memory_status(
        pod.current_usage,
        pod.memory_request,
        pod.memory_limit,
        warning_percent,
        pod.ready,
        pod.phase,
    )


def container_memory_status(
    pod: PodMemorySample, container: ContainerMemorySample, warning_percent: float
) -> MemoryStatus:
    """Containers have no readiness of their own; the owning pod's readiness and phase apply."""
    return classify_memory_status(
        container.current_usage,
        container.memory_request,
        container.memory_limit,
        warning_percent,
        pod.ready,
        pod.phase,
    )


def status_indicator(current_usage: Optional[int], ready: bool, phase: str) -> StatusIndicator:
    """Coarse four-way indicator. Missing usage data always wins over phase and readiness."""
    if current_usage is None:
        return StatusIndicator.NEUTRAL
    if ready and phase == RUNNING_PHASE:
        return StatusIndicator.POSITIVE
    if phase == PENDING_PHASE:
        return StatusIndicator.CAUTION
    return StatusIndicator.NEGATIVE
