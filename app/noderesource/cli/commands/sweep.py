"""Sweep command implementation.

Runs a single reconciliation sweep and prints its results.
"""

import json
from typing import Annotated

import typer

from noderesource.cli.types import (
    ConfigDirOption,
    DryRunOption,
    HostNamespaceOption,
    KubeconfigOption,
    LabelOption,
    LocalDiskCountOption,
    MasterOption,
    NodeIdOption,
    build_settings,
    resolve_node_labels,
)
from noderesource.core.agent import build_orchestrator, get_node_source
from noderesource.utils.formatting import (
    console,
    create_results_table,
    print_info,
    print_sweep_summary,
)

app = typer.Typer(
    help="Run one reconciliation sweep.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def sweep_once(
    node_id: NodeIdOption = "",
    config_dir: ConfigDirOption = None,
    dry_run: DryRunOption = False,
    host_namespace: HostNamespaceOption = True,
    kubeconfig: KubeconfigOption = None,
    master: MasterOption = None,
    labels: LabelOption = None,
    local_disk_count: LocalDiskCountOption = 0,
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the sweep report as JSON.",
        ),
    ] = False,
) -> None:
    """Reconcile node storage once.

    Loads the rules of every resource kind, converges volume groups,
    quota paths and memory tiers, and prints one row per item.

    Exits with code 1 if any item failed.

    Examples:
        noderesource sweep --dry-run -l bar=foo
        noderesource sweep --node-id node-1 --json
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
    )
    node_labels = resolve_node_labels(get_node_source(settings))

    if settings.dry_run and not as_json:
        print_info("Dry-run mode: no changes will be made.")

    report = build_orchestrator(settings, node_labels).sweep()

    if as_json:
        console.print_json(json.dumps(report.to_dict()))
    elif report.results:
        console.print(create_results_table(report.results))
        print_sweep_summary(report)
    else:
        print_info("No rules match this node.")

    if report.failures:
        raise typer.Exit(code=1)
