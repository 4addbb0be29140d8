# tests/cli/test_cli.py

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from memwatch import __version__
from memwatch.cli import app
from memwatch.core.aggregation import summarize_pods
from memwatch.core.analyzer import MemoryAnalyzer
from memwatch.core.config import Config
from memwatch.core.exceptions import ClusterConnectionError
from memwatch.models.memory import MemoryReport

runner = CliRunner()


@pytest.fixture
def analysis(make_pod, make_container):
    pod = make_pod(
        name="web",
        namespace="shop",
        containers=[make_container("app", usage=50, request=100, limit=200)],
        usage=50,
        request=100,
        limit=200,
    )
    return MemoryAnalyzer().analyze(MemoryReport(summary=summarize_pods([pod], namespace_count=1), pods=[pod]))


@pytest.fixture
def mock_monitor(analysis):
    monitor = MagicMock()
    monitor.health_check = AsyncMock()
    monitor.run_cycle = AsyncMock(return_value=analysis)
    monitor.close = AsyncMock()
    with (
        patch("memwatch.cli.report.get_monitor", return_value=monitor) as mock_get_monitor,
        patch("memwatch.cli.utils.config", Config()),
    ):
        monitor.get_monitor = mock_get_monitor
        yield monitor


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"memwatch version: {__version__}" in result.stdout

    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_version_verbose_lists_client_library():
    result = runner.invoke(app, ["version", "--verbose"])

    assert result.exit_code == 0
    assert "python: " in result.stdout
    assert "kubernetes_asyncio: " in result.stdout


def test_report_table_output(mock_monitor):
    result = runner.invoke(app, ["report", "--namespace", "shop"])

    assert result.exit_code == 0
    assert "=== Kubernetes Memory Report ===" in result.stdout
    assert "🟢 shop/web [Running/Ready]" in result.stdout
    assert "=== Memory Usage Analysis ===" in result.stdout
    mock_monitor.health_check.assert_awaited_once()
    mock_monitor.close.assert_awaited_once()

    cfg = mock_monitor.get_monitor.call_args.args[0]
    assert cfg.NAMESPACE == "shop"
    assert cfg.ALL_NAMESPACES is False


def test_report_csv_output(mock_monitor):
    result = runner.invoke(app, ["report", "--output", "csv", "--labels", "app"])

    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert lines[0].startswith("timestamp,memory_status,namespace,pod_name")
    assert lines[0].endswith("container_name,label_app")
    assert ",ok,shop,web,Running,true," in lines[1]
    assert "=== Kubernetes Memory Report ===" not in result.stdout


def test_report_json_output_to_file(mock_monitor, tmp_path):
    out = tmp_path / "report.json"

    result = runner.invoke(app, ["report", "--output", "json", "--output-path", str(out)])

    assert result.exit_code == 0
    assert '"problems_found"' in out.read_text(encoding="utf-8")


@pytest.mark.parametrize(
    "args",
    [
        ["report", "--memory-warning", "150"],
        ["report", "--memory-warning", "0"],
        ["report", "--memory-threshold", "0"],
        ["report", "--output", "yaml"],
        ["report", "--namespace", "shop", "--all-namespaces"],
    ],
)
def test_report_rejects_invalid_configuration(mock_monitor, args):
    result = runner.invoke(app, args)

    assert result.exit_code == 2
    mock_monitor.run_cycle.assert_not_awaited()


def test_report_exits_with_error_when_cluster_is_unreachable(mock_monitor):
    mock_monitor.health_check.side_effect = ClusterConnectionError("Kubernetes cluster is not reachable")

    result = runner.invoke(app, ["report"])

    assert result.exit_code == 1
    mock_monitor.run_cycle.assert_not_awaited()
    mock_monitor.close.assert_awaited_once()
