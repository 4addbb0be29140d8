import json
import os
import sys
from typing import Optional, TextIO

import aiofiles

from ..models.memory import AnalysisResult
from .base_exporter import BaseExporter


class JSONExporter(BaseExporter):
    """Serializes the whole AnalysisResult, one document per cycle."""

    DEFAULT_FILENAME = "memwatch-report.json"

    def to_json(self, analysis: AnalysisResult) -> str:
        return json.dumps(analysis.model_dump(mode="json"), ensure_ascii=False, indent=2)

    def write(self, analysis: AnalysisResult, stream: Optional[TextIO] = None) -> None:
        out = stream or sys.stdout
        out.write(self.to_json(analysis) + "\n")
        out.flush()

    async def export(self, analysis: AnalysisResult, path: Optional[str] = None) -> str:
        out_path = path or self.DEFAULT_FILENAME
        # Ensure parent directory exists
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)

        async with aiofiles.open(out_path, "w", encoding="utf-8") as fh:
            await fh.write(self.to_json(analysis))
        return out_path
