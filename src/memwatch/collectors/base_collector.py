# src/memwatch/collectors/base_collector.py
"""
This module defines the abstract base class for all data collectors.
Enforcing this interface ensures that all collectors have a consistent
method signature, making them interchangeable for the monitor.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class BaseCollector(ABC):
    """
    Abstract Base Class for all collectors.
    """

    @abstractmethod
    async def collect(self, namespace: Optional[str] = None) -> Any:
        """
        Fetch data from the cluster (optionally restricted to one namespace),
        parse it and return Pydantic models.
        """
        pass

    async def health_check(self) -> bool:
        """Return True when the data source is reachable."""
        return True

    async def close(self):
        """
        Clean up resources (e.g., close API clients).
        """
        pass
