# src/memwatch/cli/utils.py
import logging
from typing import Optional

import typer
from typing_extensions import Annotated

from ..core.config import Config, config
from ..core.exceptions import ConfigError
from ..core.factory import get_console_reporter, get_exporter
from ..core.monitor import MemoryMonitor
from ..models.memory import AnalysisResult

logger = logging.getLogger(__name__)

# --- Options shared by the `report` and `start` commands ---
NamespaceOption = Annotated[
    Optional[str], typer.Option("--namespace", "-n", help="Watch a single namespace.")
]
AllNamespacesOption = Annotated[
    bool, typer.Option("--all-namespaces", "-A", help="Watch every namespace (default when no namespace is given).")
]
KubeconfigOption = Annotated[
    Optional[str], typer.Option("--kubeconfig", help="Path to the kubeconfig file.")
]
InClusterOption = Annotated[
    bool, typer.Option("--in-cluster", help="Use the in-cluster service account configuration.")
]
MemoryThresholdOption = Annotated[
    Optional[int], typer.Option("--memory-threshold", help="Memory threshold in MB.")
]
MemoryWarningOption = Annotated[
    Optional[float],
    typer.Option("--memory-warning", help="Warning threshold, as a percentage of the memory request (0-100]."),
]
LabelsOption = Annotated[
    Optional[str], typer.Option("--labels", help="Comma-separated pod label keys to display.")
]
AnnotationsOption = Annotated[
    Optional[str], typer.Option("--annotations", help="Comma-separated pod annotation keys to display.")
]
OutputOption = Annotated[
    Optional[str],
    typer.Option("--output", "-o", help="Output format: table, csv or json.", case_sensitive=False),
]
OutputPathOption = Annotated[
    Optional[str],
    typer.Option("--output-path", help="Write csv (appended) or json output to this file instead of stdout."),
]
LogLevelOption = Annotated[
    Optional[str], typer.Option("--log-level", help="Log level (debug, info, warning, error).")
]


def build_config(**overrides) -> Config:
    """
    Layers the CLI flags over the environment configuration and validates the result.

    Raises:
        typer.BadParameter: If the resulting configuration is invalid.
    """
    try:
        cfg = config.with_overrides(**overrides)
        cfg.validate_instance()
    except ConfigError as e:
        raise typer.BadParameter(str(e))

    logging.getLogger().setLevel(cfg.LOG_LEVEL.upper())
    return cfg


class OutputHandler:
    """
    Sends each cycle's analysis to the configured output: the text report for
    `table`, otherwise an exporter writing to stdout or to OUTPUT_PATH.

    The exporter is created once, so the CSV header is only written for the
    first cycle.
    """

    def __init__(self, cfg: Config):
        self.config = cfg
        self.reporter = get_console_reporter(cfg) if cfg.OUTPUT == "table" else None
        self.exporter = None if self.reporter else get_exporter(cfg)

    async def emit(self, analysis: AnalysisResult):
        if self.reporter:
            self.reporter.report(analysis.report)
            self.reporter.report_analysis(analysis)
            return

        if self.config.OUTPUT_PATH:
            written_path = await self.exporter.export(analysis, self.config.OUTPUT_PATH)
            logger.info(f"Successfully exported report to {written_path}")
        else:
            self.exporter.write(analysis)


async def run_memory_check(monitor: MemoryMonitor, output: OutputHandler) -> AnalysisResult:
    """One collection cycle: collect, analyze, render."""
    logger.debug("--- Starting memory check ---")
    analysis = await monitor.run_cycle()
    await output.emit(analysis)
    logger.debug("--- Finished memory check ---")
    return analysis
