"""Unit tests for node identity sources."""

import json
import subprocess
from unittest.mock import patch

import pytest

from noderesource.core.errors import NodeIdentityError
from noderesource.host.node import KubectlNodeSource, StaticNodeSource
from noderesource.utils.shell import CommandResult

NODE = {"kind": "Node", "metadata": {"name": "node-1", "labels": {"bar": "foo", "zone": "a"}}}


class TestStaticNodeSource:
    """Tests for StaticNodeSource."""

    def test_returns_copy(self) -> None:
        """Callers cannot modify the configured labels."""
        source = StaticNodeSource({"bar": "foo"})

        labels = source.get_node_labels()
        labels["bar"] = "changed"

        assert source.get_node_labels() == {"bar": "foo"}


class TestKubectlNodeSource:
    """Tests for KubectlNodeSource."""

    def test_labels(self) -> None:
        """Labels are read from the node object."""
        result = CommandResult(stdout=json.dumps(NODE), stderr="", returncode=0)
        with patch("noderesource.host.node.run_command", return_value=result) as mock_run:
            labels = KubectlNodeSource("node-1").get_node_labels()

        assert labels == {"bar": "foo", "zone": "a"}
        assert mock_run.call_args[0][0] == ["kubectl", "get", "node", "node-1", "-o", "json"]

    def test_kubeconfig_and_master(self) -> None:
        """kubeconfig and master are passed to kubectl."""
        result = CommandResult(stdout=json.dumps(NODE), stderr="", returncode=0)
        with patch("noderesource.host.node.run_command", return_value=result) as mock_run:
            source = KubectlNodeSource(
                "node-1", kubeconfig="/etc/kube.conf", master="https://api:6443"
            )
            source.get_node_labels()

        args = mock_run.call_args[0][0]
        assert args[-4:] == ["--kubeconfig", "/etc/kube.conf", "--server", "https://api:6443"]

    def test_node_without_labels(self) -> None:
        """A node without labels yields an empty mapping."""
        result = CommandResult(stdout=json.dumps({"metadata": {}}), stderr="", returncode=0)
        with patch("noderesource.host.node.run_command", return_value=result):
            assert KubectlNodeSource("node-1").get_node_labels() == {}

    def test_missing_node_id(self) -> None:
        """A node id is required."""
        with pytest.raises(NodeIdentityError, match="Node id is not set"):
            KubectlNodeSource("").get_node_labels()

    def test_kubectl_failure(self) -> None:
        """A failing kubectl raises NodeIdentityError."""
        result = CommandResult(stdout="", stderr='nodes "node-1" not found', returncode=1)
        with (
            patch("noderesource.host.node.run_command", return_value=result),
            pytest.raises(NodeIdentityError, match="not found"),
        ):
            KubectlNodeSource("node-1").get_node_labels()

    @pytest.mark.parametrize(
        "error",
        [FileNotFoundError("kubectl"), subprocess.TimeoutExpired("kubectl", 30)],
    )
    def test_kubectl_unavailable(self, error: Exception) -> None:
        """A missing or hanging kubectl raises NodeIdentityError."""
        with (
            patch("noderesource.host.node.run_command", side_effect=error),
            pytest.raises(NodeIdentityError),
        ):
            KubectlNodeSource("node-1").get_node_labels()

    def test_invalid_json(self) -> None:
        """Output that is not JSON raises NodeIdentityError."""
        result = CommandResult(stdout="<html>", stderr="", returncode=0)
        with (
            patch("noderesource.host.node.run_command", return_value=result),
            pytest.raises(NodeIdentityError, match="Invalid node document"),
        ):
            KubectlNodeSource("node-1").get_node_labels()
