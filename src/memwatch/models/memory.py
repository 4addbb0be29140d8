# src/memwatch/models/memory.py
"""
Pydantic models for the memory samples built on every collection cycle and
for the reports and analysis results derived from them.

Usage percentages are computed properties: they are derived from the usage,
request and limit fields each time they are read and are never stored on
their own. They still appear in serialized output.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field


def usage_percent_of(usage: Optional[int], denominator: Optional[int]) -> Optional[float]:
    """Return usage / denominator * 100, or None when either side is missing or the denominator is 0."""
    if usage is None or denominator is None or denominator <= 0:
        return None
    return usage / denominator * 100


class ContainerMemorySample(BaseModel):
    """Memory data of a single container."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Container name, unique within its pod.")
    current_usage: Optional[int] = Field(None, ge=0, description="Current usage in bytes; None without metrics.")
    memory_request: Optional[int] = Field(None, ge=0, description="Declared request in bytes.")
    memory_limit: Optional[int] = Field(None, ge=0, description="Declared limit in bytes.")

    @computed_field
    @property
    def usage_percent(self) -> Optional[float]:
        return usage_percent_of(self.current_usage, self.memory_request)

    @computed_field
    @property
    def limit_usage_percent(self) -> Optional[float]:
        return usage_percent_of(self.current_usage, self.memory_limit)


class PodMemorySample(BaseModel):
    """
    Memory data of a pod and its containers for one collection cycle.

    Pod-level request and limit are only set when every container declares
    them (see memwatch.core.aggregation.build_pod_sample).
    """

    model_config = ConfigDict(frozen=True)

    namespace: str
    name: str
    phase: str = "Unknown"
    ready: bool = False
    containers: List[ContainerMemorySample] = Field(default_factory=list)
    current_usage: Optional[int] = Field(None, ge=0)
    memory_request: Optional[int] = Field(None, ge=0)
    memory_limit: Optional[int] = Field(None, ge=0)
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)

    @computed_field
    @property
    def usage_percent(self) -> Optional[float]:
        return usage_percent_of(self.current_usage, self.memory_request)

    @computed_field
    @property
    def limit_usage_percent(self) -> Optional[float]:
        return usage_percent_of(self.current_usage, self.memory_limit)

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.namespace, self.name)


class MemorySummary(BaseModel):
    """Cluster- or namespace-wide rollup of pod memory samples."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    total_pods: int = 0
    running_pods: int = 0
    pods_with_metrics: int = 0
    pods_with_limits: int = 0
    pods_with_requests: int = 0
    total_memory_usage: int = Field(0, description="Sum of pod usage in bytes, over pods with metrics.")
    total_memory_limit: int = Field(0, description="Sum of pod limits in bytes, over pods with a pod-level limit.")
    total_memory_request: int = Field(
        0, description="Sum of pod requests in bytes, over pods with a pod-level request."
    )
    namespace_count: int = 0


class MemoryReport(BaseModel):
    summary: MemorySummary = Field(default_factory=MemorySummary)
    pods: List[PodMemorySample] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Outcome of the problem detector for one report."""

    report: MemoryReport
    high_usage_pods: List[PodMemorySample] = Field(default_factory=list)
    warning_pods: List[PodMemorySample] = Field(default_factory=list)
    problems_found: List[str] = Field(default_factory=list)


class NamespaceError(BaseModel):
    """A namespace whose pods could not be retrieved during a collection cycle."""

    namespace: str
    error: str


class CollectionResult(BaseModel):
    """Pods gathered in one cycle, plus the namespaces that failed along the way."""

    report: MemoryReport
    errors: List[NamespaceError] = Field(default_factory=list)
