import csv
import io
import logging
import os
import sys
from datetime import datetime
from typing import Any, List, Optional, Sequence, TextIO

import aiofiles

from ..core.status import container_memory_status, pod_memory_status
from ..models.memory import AnalysisResult, ContainerMemorySample, MemoryReport, PodMemorySample
from ..utils.date_utils import to_rfc3339
from ..utils.k8s_utils import format_bytes_for_csv, format_percent_for_csv
from .base_exporter import BaseExporter

logger = logging.getLogger(__name__)

BASE_COLUMNS = [
    "timestamp",
    "memory_status",
    "namespace",
    "pod_name",
    "phase",
    "ready",
    "usage_bytes",
    "request_bytes",
    "limit_bytes",
    "usage_percent",
    "limit_usage_percent",
    "container_name",
]


def _column_name(prefix: str, key: str) -> str:
    return prefix + key.replace(".", "_")


class CSVExporter(BaseExporter):
    """
    Flat export: one row per container, or a single row for a pod without
    containers.

    The header is written once per exporter instance. Create one exporter per
    process and reuse it for every cycle so that appended cycles share a
    single header.
    """

    DEFAULT_FILENAME = "memwatch-report.csv"

    def __init__(
        self,
        labels: Optional[Sequence[str]] = None,
        annotations: Optional[Sequence[str]] = None,
        warning_percent: float = 80.0,
    ):
        self.labels = list(labels or [])
        self.annotations = list(annotations or [])
        self.warning_percent = warning_percent
        self.header_written = False

    def build_header(self) -> List[str]:
        return (
            BASE_COLUMNS
            + [_column_name("label_", key) for key in self.labels]
            + [_column_name("annotation_", key) for key in self.annotations]
        )

    def _metadata_cells(self, pod: PodMemorySample) -> List[str]:
        cells = [self._sanitize_cell(pod.labels.get(key, "")) for key in self.labels]
        for key in self.annotations:
            value = pod.annotations.get(key, "")
            cells.append(self._sanitize_cell(value.replace("\n", " ").replace("\r", " ")))
        return cells

    def build_container_record(
        self, pod: PodMemorySample, container: ContainerMemorySample, timestamp: datetime
    ) -> List[str]:
        status = container_memory_status(pod, container, self.warning_percent)
        return [
            to_rfc3339(timestamp),
            status.value,
            pod.namespace,
            pod.name,
            pod.phase,
            str(pod.ready).lower(),
            format_bytes_for_csv(container.current_usage),
            format_bytes_for_csv(container.memory_request),
            format_bytes_for_csv(container.memory_limit),
            format_percent_for_csv(container.usage_percent),
            format_percent_for_csv(container.limit_usage_percent),
            container.name,
        ] + self._metadata_cells(pod)

    def build_pod_record(self, pod: PodMemorySample, timestamp: datetime) -> List[str]:
        status = pod_memory_status(pod, self.warning_percent)
        return [
            to_rfc3339(timestamp),
            status.value,
            pod.namespace,
            pod.name,
            pod.phase,
            str(pod.ready).lower(),
            format_bytes_for_csv(pod.current_usage),
            format_bytes_for_csv(pod.memory_request),
            format_bytes_for_csv(pod.memory_limit),
            format_percent_for_csv(pod.usage_percent),
            format_percent_for_csv(pod.limit_usage_percent),
            "",
        ] + self._metadata_cells(pod)

    def build_records(self, report: MemoryReport) -> List[List[str]]:
        timestamp = report.summary.timestamp
        records = []
        for pod in report.pods:
            if pod.containers:
                records.extend(self.build_container_record(pod, c, timestamp) for c in pod.containers)
            else:
                records.append(self.build_pod_record(pod, timestamp))
        return records

    def _write_rows(self, report: MemoryReport, stream: TextIO) -> int:
        """Writes the header (first call only) and the rows. A failing row is logged and skipped."""
        writer = csv.writer(stream, lineterminator="\n")
        if not self.header_written:
            try:
                writer.writerow(self.build_header())
                self.header_written = True
            except (OSError, csv.Error) as e:
                logger.error(f"Error writing CSV header: {e}")

        written = 0
        for record in self.build_records(report):
            try:
                writer.writerow(record)
                written += 1
            except (OSError, csv.Error) as e:
                logger.error(f"Error writing CSV record for pod {record[2]}/{record[3]}: {e}")
        return written

    def write(self, analysis: AnalysisResult, stream: Optional[TextIO] = None) -> None:
        out = stream or sys.stdout
        self._write_rows(analysis.report, out)
        out.flush()

    async def export(self, analysis: AnalysisResult, path: Optional[str] = None) -> str:
        """Appends the rows of one cycle to a CSV file. Returns path written."""
        out_path = path or self.DEFAULT_FILENAME
        # Ensure parent directory exists
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)

        # csv.writer is synchronous: render into a buffer, then write it asynchronously.
        header_was_written = self.header_written
        output = io.StringIO()
        written = self._write_rows(analysis.report, output)

        try:
            async with aiofiles.open(out_path, "a", encoding="utf-8", newline="") as fh:
                await fh.write(output.getvalue())
        except OSError:
            # The header only counts as written once it reached the file.
            self.header_written = header_was_written
            raise

        logger.debug("Appended %d CSV rows to %s", written, out_path)
        return out_path

    def _sanitize_cell(self, value: Any) -> Any:
        """
        Sanitize value to prevent CSV formula injection.
        If the value is a string starting with =, +, -, or @, prefix it with a single quote.
        """
        if isinstance(value, str) and value.startswith(("=", "+", "-", "@")):
            return f"'{value}"
        return value
