# tests/exporters/test_json_exporter.py

import io
import json

import pytest

from memwatch.core.aggregation import summarize_pods
from memwatch.core.analyzer import MemoryAnalyzer
from memwatch.exporters.json_exporter import JSONExporter
from memwatch.models.memory import MemoryReport


@pytest.fixture
def analysis(make_pod, make_container):
    pod = make_pod(
        name="hot",
        containers=[make_container("app", usage=990, request=1000, limit=2000)],
        usage=990,
        request=1000,
        limit=2000,
    )
    return MemoryAnalyzer().analyze(MemoryReport(summary=summarize_pods([pod], namespace_count=1), pods=[pod]))


def test_write_serializes_analysis(analysis):
    buffer = io.StringIO()

    JSONExporter().write(analysis, buffer)

    document = json.loads(buffer.getvalue())
    assert document["report"]["summary"]["total_pods"] == 1
    pod = document["report"]["pods"][0]
    assert pod["name"] == "hot"
    assert pod["usage_percent"] == pytest.approx(99.0)
    assert pod["containers"][0]["limit_usage_percent"] == pytest.approx(49.5)
    assert [p["name"] for p in document["high_usage_pods"]] == ["hot"]
    assert len(document["problems_found"]) == 2


@pytest.mark.asyncio
async def test_export_writes_file(tmp_path, analysis):
    out = tmp_path / "out" / "report.json"

    written = await JSONExporter().export(analysis, str(out))

    assert written == str(out)
    assert json.loads(out.read_text(encoding="utf-8"))["warning_pods"][0]["name"] == "hot"
