# src/memwatch/models/raw.py
"""
Records handed to the aggregation engine by the cluster collectors.

Only the memory resource is consumed, so a container's resource declaration
is a fixed-shape record rather than an open resource map.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContainerResources(BaseModel):
    """Declared memory request/limit of one container, in bytes."""

    model_config = ConfigDict(frozen=True)

    request: Optional[int] = Field(None, ge=0, description="Declared memory request in bytes.")
    limit: Optional[int] = Field(None, ge=0, description="Declared memory limit in bytes.")


class RawContainer(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Container name, unique within the pod.")
    resources: ContainerResources = Field(default_factory=ContainerResources)


class RawPod(BaseModel):
    """A pod as read from the Kubernetes API, reduced to what the engine needs."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    name: str
    phase: str = Field("Unknown", description="Pod phase as reported by the API server.")
    ready: bool = False
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    containers: List[RawContainer] = Field(default_factory=list)


class UsageSample(BaseModel):
    """
    Live memory usage of one pod's containers, keyed by container name.
    A container with no entry (or a None entry) has not reported usage.
    """

    model_config = ConfigDict(frozen=True)

    containers: Dict[str, Optional[int]] = Field(default_factory=dict)

    def usage_for(self, container_name: str) -> Optional[int]:
        return self.containers.get(container_name)
