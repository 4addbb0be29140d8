# src/memwatch/cli/report.py
"""
Implements the `report` command: one memory check, printed once.
"""

import asyncio
import logging
import traceback

import typer

from ..core.config import Config
from ..core.exceptions import MemwatchError
from ..core.factory import get_monitor
from .utils import (
    AllNamespacesOption,
    AnnotationsOption,
    InClusterOption,
    KubeconfigOption,
    LabelsOption,
    LogLevelOption,
    MemoryThresholdOption,
    MemoryWarningOption,
    NamespaceOption,
    OutputHandler,
    OutputOption,
    OutputPathOption,
    build_config,
    run_memory_check,
)

logger = logging.getLogger(__name__)

app = typer.Typer(help="Run a single memory check and print the report.", add_completion=False)


async def _report_async(cfg: Config):
    monitor = get_monitor(cfg)
    output = OutputHandler(cfg)
    try:
        await monitor.health_check()
        await run_memory_check(monitor, output)
    finally:
        await monitor.close()


@app.callback(invoke_without_command=True)
def report(
    ctx: typer.Context,
    namespace: NamespaceOption = None,
    all_namespaces: AllNamespacesOption = False,
    kubeconfig: KubeconfigOption = None,
    in_cluster: InClusterOption = False,
    memory_threshold: MemoryThresholdOption = None,
    memory_warning: MemoryWarningOption = None,
    labels: LabelsOption = None,
    annotations: AnnotationsOption = None,
    output: OutputOption = None,
    output_path: OutputPathOption = None,
    log_level: LogLevelOption = None,
):
    """
    Collect pod memory usage once, analyze it and print the result.

    Displays a text report by default.
    Use --output csv/json for machine-readable output.
    """
    if ctx.invoked_subcommand is not None:
        return

    cfg = build_config(
        namespace=namespace,
        all_namespaces=all_namespaces,
        kubeconfig=kubeconfig,
        in_cluster=in_cluster,
        memory_threshold_mb=memory_threshold,
        memory_warning_percent=memory_warning,
        labels=labels,
        annotations=annotations,
        output=output,
        output_path=output_path,
        log_level=log_level,
    )

    try:
        asyncio.run(_report_async(cfg))
    except typer.Exit:
        raise
    except MemwatchError as e:
        logger.error(f"Memory check failed: {e}")
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error(f"An unexpected error occurred: {e}")
        logger.error("Report generation failed: %s", traceback.format_exc())
        raise typer.Exit(code=1)
