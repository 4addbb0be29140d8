# tests/exporters/test_csv_exporter.py

import csv
import io
from datetime import datetime, timezone

import pytest

from memwatch.core.aggregation import summarize_pods
from memwatch.core.analyzer import MemoryAnalyzer
from memwatch.exporters.csv_exporter import BASE_COLUMNS, CSVExporter
from memwatch.models.memory import MemoryReport

MIB = 1024 * 1024
TIMESTAMP = datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


def analysis_of(*pods):
    report = MemoryReport(summary=summarize_pods(pods, namespace_count=1, timestamp=TIMESTAMP), pods=list(pods))
    return MemoryAnalyzer().analyze(report)


def read_rows(text):
    return list(csv.reader(io.StringIO(text)))


@pytest.fixture
def pods(make_pod, make_container):
    return [
        make_pod(
            name="web",
            containers=[
                make_container("app", usage=100, request=200, limit=400),
                make_container("sidecar", usage=50),
            ],
            usage=150,
            labels={"app.kubernetes.io/name": "web"},
            annotations={"note": "line one\nline two"},
        ),
        make_pod(name="bare", phase="Pending", ready=False),
    ]


def test_header():
    exporter = CSVExporter(labels=["app.kubernetes.io/name"], annotations=["docs.url"])
    assert exporter.build_header() == BASE_COLUMNS + ["label_app_kubernetes_io/name", "annotation_docs_url"]


def test_rows_per_container_or_pod(pods):
    exporter = CSVExporter(labels=["app.kubernetes.io/name", "missing"], annotations=["note"])
    buffer = io.StringIO()

    exporter.write(analysis_of(*pods), buffer)

    header, *rows = read_rows(buffer.getvalue())
    assert header[:12] == BASE_COLUMNS
    # two containers + one pod without containers
    assert len(rows) == 3
    assert rows[0] == [
        "2024-03-01T08:00:00Z",
        "ok",
        "default",
        "web",
        "Running",
        "true",
        str(100 * MIB),
        str(200 * MIB),
        str(400 * MIB),
        "50.00",
        "25.00",
        "app",
        "web",
        "",
        "line one line two",
    ]
    assert rows[1][1] == "no_config"
    assert rows[1][6:12] == [str(50 * MIB), "", "", "", "", "sidecar"]
    assert rows[2][:6] == ["2024-03-01T08:00:00Z", "no_data", "default", "bare", "Pending", "false"]
    assert rows[2][11] == ""


def test_header_is_written_once(pods):
    exporter = CSVExporter()
    buffer = io.StringIO()

    exporter.write(analysis_of(*pods), buffer)
    exporter.write(analysis_of(*pods), buffer)

    rows = read_rows(buffer.getvalue())
    assert rows.count(BASE_COLUMNS) == 1
    assert len(rows) == 1 + 3 + 3
    assert exporter.header_written is True


def test_empty_report_writes_only_header():
    buffer = io.StringIO()
    CSVExporter().write(analysis_of(), buffer)
    assert read_rows(buffer.getvalue()) == [BASE_COLUMNS]


def test_formula_injection_guard(make_pod):
    pod = make_pod(name="evil", labels={"team": "=HYPERLINK(1)"}, annotations={"note": "@SUM(A1)"})
    buffer = io.StringIO()

    CSVExporter(labels=["team"], annotations=["note"]).write(analysis_of(pod), buffer)

    row = read_rows(buffer.getvalue())[1]
    assert row[-2:] == ["'=HYPERLINK(1)", "'@SUM(A1)"]


@pytest.mark.parametrize(
    "annotation, expected",
    [
        ("first\rsecond", "first second"),
        ("first\r\nsecond", "first  second"),
        ("a\nb\rc", "a b c"),
    ],
)
def test_annotation_line_breaks_become_spaces(make_pod, annotation, expected):
    pod = make_pod(name="notes", annotations={"note": annotation})
    buffer = io.StringIO()

    CSVExporter(annotations=["note"]).write(analysis_of(pod), buffer)

    rows = read_rows(buffer.getvalue())
    assert len(rows) == 2
    assert rows[1][-1] == expected


def test_failing_row_does_not_stop_the_others(pods, caplog):
    class FlakyStream(io.StringIO):
        def __init__(self):
            super().__init__()
            self.calls = 0

        def write(self, s):
            self.calls += 1
            if self.calls == 2:
                raise OSError("disk full")
            return super().write(s)

    stream = FlakyStream()
    exporter = CSVExporter()

    exporter.write(analysis_of(*pods), stream)

    rows = read_rows(stream.getvalue())
    assert rows[0] == BASE_COLUMNS
    assert len(rows) == 3
    assert "Error writing CSV record for pod default/web" in caplog.text


@pytest.mark.asyncio
async def test_export_appends_to_file(tmp_path, pods):
    out = tmp_path / "reports" / "memory.csv"
    exporter = CSVExporter()

    await exporter.export(analysis_of(*pods), str(out))
    written = await exporter.export(analysis_of(*pods), str(out))

    assert written == str(out)
    rows = read_rows(out.read_text(encoding="utf-8"))
    assert rows[0] == BASE_COLUMNS
    assert len(rows) == 7


@pytest.mark.asyncio
async def test_failed_export_keeps_header_pending(tmp_path, pods, mocker):
    out = tmp_path / "memory.csv"
    exporter = CSVExporter()
    mocker.patch("memwatch.exporters.csv_exporter.aiofiles.open", side_effect=PermissionError("read-only"))

    with pytest.raises(PermissionError):
        await exporter.export(analysis_of(*pods), str(out))

    assert exporter.header_written is False

    mocker.stopall()
    await exporter.export(analysis_of(*pods), str(out))

    rows = read_rows(out.read_text(encoding="utf-8"))
    assert rows[0] == BASE_COLUMNS
    assert len(rows) == 4
