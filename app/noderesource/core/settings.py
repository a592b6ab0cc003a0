"""Agent settings.

Settings are assembled by the CLI from options and NRM_* environment
variables and validated here.
"""

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from noderesource.core.paths import get_config_dir

DEFAULT_INTERVAL = 20.0


class AgentSettings(BaseModel):
    """Runtime settings of the agent.

    Attributes:
        node_id: Name of this node in the cluster.
        config_dir: Directory holding the rule documents.
        interval: Seconds to wait between sweeps.
        dry_run: Report mutations without executing them.
        host_namespace: Run host tools in the namespaces of PID 1.
        kubeconfig: Kubeconfig used to read the node labels.
        master: API server URL overriding the kubeconfig.
        local_disk_count: Number of local data disks for local-disk rules.
        labels: Node labels given directly; skips the cluster lookup.
    """

    model_config = ConfigDict(extra="forbid")

    node_id: Annotated[str, Field(description="Node name")] = ""
    config_dir: Annotated[Path, Field(default_factory=get_config_dir, description="Rule directory")]
    interval: Annotated[float, Field(gt=0, description="Seconds between sweeps")] = DEFAULT_INTERVAL
    dry_run: Annotated[bool, Field(description="Do not mutate the host")] = False
    host_namespace: Annotated[bool, Field(description="Run tools via nsenter")] = True
    kubeconfig: Annotated[str | None, Field(description="Kubeconfig path")] = None
    master: Annotated[str | None, Field(description="API server URL")] = None
    local_disk_count: Annotated[int, Field(ge=0, description="Local data disks")] = 0
    labels: Annotated[dict[str, str] | None, Field(description="Static node labels")] = None
