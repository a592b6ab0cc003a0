"""Run command implementation.

Runs the reconciliation loop until the process is asked to stop.
"""

import logging
import signal
import threading
from types import FrameType

import typer

from noderesource.cli.types import (
    ConfigDirOption,
    DryRunOption,
    HostNamespaceOption,
    IntervalOption,
    KubeconfigOption,
    LabelOption,
    LocalDiskCountOption,
    MasterOption,
    NodeIdOption,
    build_settings,
    resolve_node_labels,
)
from noderesource.core.agent import build_orchestrator, get_node_source
from noderesource.core.settings import DEFAULT_INTERVAL

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Run the reconciliation loop.",
    invoke_without_command=True,
)


def install_signal_handlers(stop_event: threading.Event) -> None:
    """Set ``stop_event`` on SIGTERM and SIGINT."""

    def _handle(signum: int, _frame: FrameType | None) -> None:
        logger.info("Received %s, stopping after the current sweep", signal.Signals(signum).name)
        stop_event.set()

    signal.signal(signal.SIGTERM, _handle)
    signal.signal(signal.SIGINT, _handle)


@app.callback(invoke_without_command=True)
def run_loop(
    node_id: NodeIdOption = "",
    config_dir: ConfigDirOption = None,
    dry_run: DryRunOption = False,
    host_namespace: HostNamespaceOption = True,
    kubeconfig: KubeconfigOption = None,
    master: MasterOption = None,
    labels: LabelOption = None,
    local_disk_count: LocalDiskCountOption = 0,
    interval: IntervalOption = DEFAULT_INTERVAL,
) -> None:
    """Reconcile node storage continuously.

    Resolves the node's labels once, then sweeps every --update-interval
    seconds. SIGTERM and SIGINT stop the loop after the running sweep.

    Examples:
        noderesource run --node-id "$NODE_NAME"
        noderesource run -l bar=foo --dry-run
    """
    settings = build_settings(
        node_id=node_id,
        config_dir=config_dir,
        dry_run=dry_run,
        host_namespace=host_namespace,
        kubeconfig=kubeconfig,
        master=master,
        labels=labels,
        local_disk_count=local_disk_count,
        interval=interval,
    )
    node_labels = resolve_node_labels(get_node_source(settings))
    orchestrator = build_orchestrator(settings, node_labels)

    stop_event = threading.Event()
    install_signal_handlers(stop_event)
    orchestrator.run(stop_event)
