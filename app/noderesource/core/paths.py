"""Filesystem locations used by the agent.

Default locations:
- Rules: /etc/unified-config/{volumegroup,quotapath,memory}.toml
- Logs: /var/log/node-resource-manager/

Both roots can be overridden through environment variables, which is how
the agent is pointed at a mounted ConfigMap in a pod.
"""

import os
from pathlib import Path

# Application identifier for file naming
APP_NAME = "node-resource-manager"

DEFAULT_CONFIG_DIR = Path("/etc/unified-config")
DEFAULT_LOG_DIR = Path("/var/log") / APP_NAME

CONFIG_DIR_ENV = "NRM_CONFIG_DIR"
LOG_DIR_ENV = "NRM_LOG_DIR"


def _get_dir(env_var: str, default: Path) -> Path:
    """Get a directory respecting an environment variable override.

    Args:
        env_var: Environment variable name.
        default: Directory used when the variable is unset or empty.

    Returns:
        Path to the directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base)
    return default


def get_config_dir() -> Path:
    """Get the directory holding the declarative rule documents.

    Returns:
        Path to /etc/unified-config (or NRM_CONFIG_DIR).
    """
    return _get_dir(CONFIG_DIR_ENV, DEFAULT_CONFIG_DIR)


def get_log_dir() -> Path:
    """Get the directory for the rotating log file.

    Returns:
        Path to /var/log/node-resource-manager (or NRM_LOG_DIR).
    """
    return _get_dir(LOG_DIR_ENV, DEFAULT_LOG_DIR)


def get_rules_path(kind: str, config_dir: Path | None = None) -> Path:
    """Get the rule document path for a resource kind.

    Args:
        kind: Resource kind name (e.g., "volumegroup").
        config_dir: Optional override for the config directory.

    Returns:
        Path to <config_dir>/<kind>.toml.
    """
    return (config_dir or get_config_dir()) / f"{kind}.toml"


def get_log_path(log_dir: Path | None = None) -> Path:
    """Get the log file path.

    Returns:
        Path to <log_dir>/node-resource-manager.log.
    """
    return (log_dir or get_log_dir()) / f"{APP_NAME}.log"


def ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
