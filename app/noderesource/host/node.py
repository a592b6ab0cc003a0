"""Node identity sources.

Resolve the labels of the node the agent runs on. Labels are read once at
startup; failing to resolve them stops the agent.
"""

import json
import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Mapping

from noderesource.core.errors import NodeIdentityError
from noderesource.utils.shell import run_command

logger = logging.getLogger(__name__)


class NodeLabelSource(ABC):
    """Abstract source of the node's labels."""

    @abstractmethod
    def get_node_labels(self) -> dict[str, str]:
        """Return the labels of this node.

        Raises:
            NodeIdentityError: If the node cannot be resolved.
        """


class StaticNodeSource(NodeLabelSource):
    """Labels given up front, e.g. on the command line."""

    def __init__(self, labels: Mapping[str, str]) -> None:
        self._labels = dict(labels)

    def get_node_labels(self) -> dict[str, str]:
        """Return a copy of the configured labels."""
        return dict(self._labels)


class KubectlNodeSource(NodeLabelSource):
    """Read node labels from the cluster with ``kubectl get node``.

    Attributes:
        node_id: Name of the node object.
        kubeconfig: Optional kubeconfig path.
        master: Optional API server URL overriding the kubeconfig.
    """

    _TIMEOUT: float = 30.0

    def __init__(
        self,
        node_id: str,
        kubeconfig: str | None = None,
        master: str | None = None,
    ) -> None:
        self.node_id = node_id
        self.kubeconfig = kubeconfig
        self.master = master

    def _build_command(self) -> list[str]:
        args = ["kubectl", "get", "node", self.node_id, "-o", "json"]
        if self.kubeconfig:
            args.extend(["--kubeconfig", self.kubeconfig])
        if self.master:
            args.extend(["--server", self.master])
        return args

    def get_node_labels(self) -> dict[str, str]:
        """Fetch the node object and return its labels.

        Raises:
            NodeIdentityError: If kubectl fails or prints something unexpected.
        """
        if not self.node_id:
            raise NodeIdentityError("Node id is not set")

        try:
            result = run_command(self._build_command(), timeout=self._TIMEOUT)
        except FileNotFoundError as e:
            raise NodeIdentityError("kubectl is not available") from e
        except subprocess.TimeoutExpired as e:
            raise NodeIdentityError(f"Timed out fetching node {self.node_id}") from e

        if not result.success:
            msg = f"Error getting node {self.node_id}: {result.stderr.strip() or result.stdout.strip()}"
            raise NodeIdentityError(msg)

        try:
            node = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise NodeIdentityError(f"Invalid node document for {self.node_id}: {e}") from e

        labels = node.get("metadata", {}).get("labels") or {}
        if not isinstance(labels, dict):
            raise NodeIdentityError(f"Unexpected labels for node {self.node_id}")

        logger.info("Resolved node %s with %d labels", self.node_id, len(labels))
        return {str(k): str(v) for k, v in labels.items()}
