"""Unit tests for AgentSettings."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from noderesource.core.settings import DEFAULT_INTERVAL, AgentSettings


class TestAgentSettings:
    """Tests for AgentSettings model."""

    def test_defaults(self) -> None:
        """Defaults sweep every 20 seconds against the host."""
        with patch.dict(os.environ, {"NRM_CONFIG_DIR": "/cfg"}):
            settings = AgentSettings()

        assert settings.interval == DEFAULT_INTERVAL == 20.0
        assert settings.config_dir == Path("/cfg")
        assert settings.dry_run is False
        assert settings.host_namespace is True
        assert settings.labels is None

    @pytest.mark.parametrize("interval", [0, -1])
    def test_interval_must_be_positive(self, interval: float) -> None:
        """A non-positive interval is rejected."""
        with pytest.raises(ValidationError):
            AgentSettings(interval=interval)

    def test_unknown_field(self) -> None:
        """Unknown settings are rejected."""
        with pytest.raises(ValidationError):
            AgentSettings(nodeid="node-1")
