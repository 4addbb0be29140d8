# src/memwatch/collectors/__init__.py
"""
Collectors read raw data from the cluster and hand it to the aggregation engine.
"""

from .base_collector import BaseCollector
from .pod_collector import PodMemoryCollector

__all__ = ["BaseCollector", "PodMemoryCollector"]
