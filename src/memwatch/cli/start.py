# src/memwatch/cli/start.py
"""
Start command for the memwatch CLI.

Runs a memory check immediately and then once every CHECK_INTERVAL until
SIGINT or SIGTERM is received.
"""

import asyncio
import logging
import signal
import traceback
from typing import Optional

import typer
from typing_extensions import Annotated

from ..core.config import Config
from ..core.exceptions import MemwatchError
from ..core.factory import get_monitor
from ..core.scheduler import Scheduler
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

app = typer.Typer(name="start", help="Start the periodic memory monitoring service.")

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def _async_start(cfg: Config, stop_event: Optional[asyncio.Event] = None):
    """
    Schedules the memory check and waits until `stop_event` is set, either by
    a shutdown signal or by the caller.
    """
    stop_event = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()

    def _request_shutdown(sig: signal.Signals):
        logger.info(f"🛑 Received {sig.name}, initiating graceful shutdown...")
        stop_event.set()

    for sig in SHUTDOWN_SIGNALS:
        loop.add_signal_handler(sig, _request_shutdown, sig)

    monitor = get_monitor(cfg)
    output = OutputHandler(cfg)
    scheduler = Scheduler()

    async def memory_check():
        await run_memory_check(monitor, output)

    try:
        await monitor.health_check()

        scheduler.add_job_from_string(memory_check, cfg.CHECK_INTERVAL)
        logger.info("memwatch is running. Press CTRL+C to exit.")

        await stop_event.wait()
    finally:
        await scheduler.stop()
        await monitor.close()
        for sig in SHUTDOWN_SIGNALS:
            loop.remove_signal_handler(sig)
        logger.info("🛑 memwatch stopped.")


@app.callback(invoke_without_command=True)
def start(
    ctx: typer.Context,
    namespace: NamespaceOption = None,
    all_namespaces: AllNamespacesOption = False,
    kubeconfig: KubeconfigOption = None,
    in_cluster: InClusterOption = False,
    check_interval: Annotated[
        Optional[str],
        typer.Option("--check-interval", help="Interval between memory checks (e.g., '30s', '5m', '1h')."),
    ] = None,
    memory_threshold: MemoryThresholdOption = None,
    memory_warning: MemoryWarningOption = None,
    labels: LabelsOption = None,
    annotations: AnnotationsOption = None,
    output: OutputOption = None,
    output_path: OutputPathOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """
    Run memory checks periodically until interrupted.
    """
    if ctx.invoked_subcommand is not None:
        return

    cfg = build_config(
        namespace=namespace,
        all_namespaces=all_namespaces,
        kubeconfig=kubeconfig,
        in_cluster=in_cluster,
        check_interval=check_interval,
        memory_threshold_mb=memory_threshold,
        memory_warning_percent=memory_warning,
        labels=labels,
        annotations=annotations,
        output=output,
        output_path=output_path,
        log_level=log_level,
    )
    logger.info(
        "🚀 Starting memwatch: namespace=%s interval=%s warning=%.1f%% output=%s",
        cfg.NAMESPACE or "<all>",
        cfg.CHECK_INTERVAL,
        cfg.MEMORY_WARNING_PERCENT,
        cfg.OUTPUT,
    )

    try:
        asyncio.run(_async_start(cfg))
    except KeyboardInterrupt:
        logger.info("🛑 Shutting down memwatch.")
        raise typer.Exit()
    except MemwatchError as e:
        logger.error(f"❌ memwatch could not start: {e}")
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error(f"❌ An unexpected error occurred: {e}")
        logger.error("Service failed: %s", traceback.format_exc())
        raise typer.Exit(code=1)
