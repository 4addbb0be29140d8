# src/memwatch/reporters/base_reporter.py
"""
Defines the abstract base class for all reporters.
"""
from abc import ABC, abstractmethod

from ..models.memory import AnalysisResult, MemoryReport


class BaseReporter(ABC):
    """
    Abstract Base Class for all reporters.
    """

    @abstractmethod
    def report(self, report: MemoryReport):
        """
        Presents the cluster summary and the per-pod memory data.
        """
        pass

    @abstractmethod
    def report_analysis(self, analysis: AnalysisResult):
        """
        Presents the findings, the headline pod sections and the recommendations.
        """
        pass
