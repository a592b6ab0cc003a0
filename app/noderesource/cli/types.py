"""Shared options and helpers for CLI commands.

This module provides the option types and settings assembly used by
several CLI command modules to avoid code duplication.
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from noderesource.core.errors import NodeIdentityError
from noderesource.core.settings import DEFAULT_INTERVAL, AgentSettings
from noderesource.host.node import NodeLabelSource
from noderesource.utils.formatting import print_error

NodeIdOption = Annotated[
    str,
    typer.Option(
        "--node-id",
        "--nodeid",
        envvar="NRM_NODE_ID",
        help="Name of this node in the cluster.",
    ),
]
ConfigDirOption = Annotated[
    Path | None,
    typer.Option(
        "--config-dir",
        "-c",
        envvar="NRM_CONFIG_DIR",
        help="Directory holding volumegroup.toml, quotapath.toml and memory.toml.",
    ),
]
DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        "-n",
        envvar="NRM_DRY_RUN",
        help="Show what would be done without making changes.",
    ),
]
HostNamespaceOption = Annotated[
    bool,
    typer.Option(
        "--host-namespace/--no-host-namespace",
        envvar="NRM_HOST_NAMESPACE",
        help="Run storage tools in the host namespaces via nsenter.",
    ),
]
KubeconfigOption = Annotated[
    str | None,
    typer.Option(
        "--kubeconfig",
        envvar="NRM_KUBECONFIG",
        help="Path to a kubeconfig used to read the node labels.",
    ),
]
MasterOption = Annotated[
    str | None,
    typer.Option(
        "--master",
        envvar="NRM_MASTER",
        help="Address of the Kubernetes API server, overrides the kubeconfig.",
    ),
]
LabelOption = Annotated[
    list[str] | None,
    typer.Option(
        "--label",
        "-l",
        help="Node label as key=value; repeatable. Skips the cluster lookup.",
    ),
]
LocalDiskCountOption = Annotated[
    int,
    typer.Option(
        "--local-disk-count",
        envvar="NRM_LOCAL_DISK_COUNT",
        min=0,
        help="Number of local data disks for local-disk volume groups.",
    ),
]
IntervalOption = Annotated[
    float,
    typer.Option(
        "--update-interval",
        "-i",
        envvar="NRM_UPDATE_INTERVAL",
        min=1,
        help="Seconds to wait between sweeps.",
    ),
]


def parse_labels(values: list[str] | None) -> dict[str, str] | None:
    """Parse repeated key=value label options.

    Args:
        values: Raw option values, or None if the option was not given.

    Returns:
        Label mapping, or None if no label was given.

    Raises:
        typer.BadParameter: If a value is not key=value.
    """
    if not values:
        return None
    labels: dict[str, str] = {}
    for value in values:
        key, sep, label_value = value.partition("=")
        if not sep or not key:
            msg = f"Invalid label {value!r}, expected key=value"
            raise typer.BadParameter(msg, param_hint="--label")
        labels[key] = label_value
    return labels


def build_settings(
    *,
    node_id: str,
    config_dir: Path | None,
    dry_run: bool,
    host_namespace: bool,
    kubeconfig: str | None,
    master: str | None,
    labels: list[str] | None,
    local_disk_count: int,
    interval: float = DEFAULT_INTERVAL,
) -> AgentSettings:
    """Assemble validated settings from CLI options.

    Raises:
        typer.Exit: If the settings are invalid.
    """
    data: dict[str, object] = {
        "node_id": node_id,
        "dry_run": dry_run,
        "host_namespace": host_namespace,
        "kubeconfig": kubeconfig,
        "master": master,
        "labels": parse_labels(labels),
        "local_disk_count": local_disk_count,
        "interval": interval,
    }
    if config_dir is not None:
        data["config_dir"] = config_dir
    try:
        return AgentSettings.model_validate(data)
    except ValidationError as e:
        print_error(f"Invalid settings: {e}")
        raise typer.Exit(code=1) from e


def resolve_node_labels(source: NodeLabelSource) -> dict[str, str]:
    """Resolve this node's labels or exit.

    Raises:
        typer.Exit: If the node cannot be resolved.
    """
    try:
        return source.get_node_labels()
    except NodeIdentityError as e:
        print_error(f"Cannot resolve node identity: {e}")
        raise typer.Exit(code=1) from e
