from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TextIO

from ..models.memory import AnalysisResult


class BaseExporter(ABC):
    """Abstract base class for machine-readable exporters.

    Subclasses provide a DEFAULT_FILENAME, `write` for streams (stdout by
    default) and `export` for files.
    """

    DEFAULT_FILENAME: str = "memwatch-report"

    @abstractmethod
    def write(self, analysis: AnalysisResult, stream: TextIO | None = None) -> None:
        """Write one cycle's output to the stream."""
        raise NotImplementedError()

    @abstractmethod
    async def export(self, analysis: AnalysisResult, path: str | None = None) -> str:
        """Write one cycle's output to disk. Return the written path."""
        raise NotImplementedError()
