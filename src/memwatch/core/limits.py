# src/memwatch/core/limits.py
"""Checks whether memory limits and requests are declared on all, some or none of a pod's containers."""

from enum import Enum
from typing import Iterable, Optional, Tuple

from ..models.memory import PodMemorySample


class LimitState(str, Enum):
    ALL = "All"
    PARTIAL = "Partial"
    NONE = "None"


def _state_of(declared: Iterable[bool]) -> LimitState:
    flags = list(declared)
    if flags and all(flags):
        return LimitState.ALL
    if any(flags):
        return LimitState.PARTIAL
    return LimitState.NONE


def _state_of_pod_value(value: Optional[int]) -> LimitState:
    return LimitState.ALL if value is not None else LimitState.NONE


def limit_state(pod: PodMemorySample) -> Tuple[LimitState, LimitState]:
    """
    Return the (limits, requests) consistency of a pod.

    Without a container breakdown only the pod-level values are looked at,
    so Partial cannot occur in that case.
    """
    if not pod.containers:
        return _state_of_pod_value(pod.memory_limit), _state_of_pod_value(pod.memory_request)

    limits = _state_of(c.memory_limit is not None for c in pod.containers)
    requests = _state_of(c.memory_request is not None for c in pod.containers)
    return limits, requests
