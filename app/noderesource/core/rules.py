"""Rule document I/O operations.

This module provides functions for loading and saving the declarative rule
documents in TOML format with validation using Pydantic models. Each kind
has its own document holding an array of tables named after the kind::

    [[quotapath]]
    name = "/mnt/quota"
    key = "bar"
    operator = "In"
    value = "foo"

    [quotapath.topology]
    type = "device"
    devices = ["/dev/vdc", "/dev/vdd"]
    fstype = "ext4"
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
from pydantic import ValidationError

from noderesource.models.rule import ResourceRule

logger = logging.getLogger(__name__)


class RulesError(Exception):
    """Base exception for rule document errors."""


class RulesParseError(RulesError):
    """Raised when a rule document cannot be parsed."""


class RulesValidationError(RulesError):
    """Raised when rule document content is invalid."""


def load_rules(path: Path, section: str) -> list[ResourceRule]:
    """Load and validate the rules of one kind.

    Args:
        path: Path to the TOML document.
        section: Name of the array of tables holding the rules.

    Returns:
        Validated rules in document order. Empty when the file does not exist.

    Raises:
        RulesParseError: If the TOML syntax is invalid.
        RulesValidationError: If the content doesn't match the schema.
        RulesError: If the file cannot be read.
    """
    if not path.exists():
        logger.debug("Rule document %s does not exist, no %s rules", path, section)
        return []

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise RulesParseError(f"Invalid TOML syntax in {path}: {e}") from e
    except OSError as e:
        raise RulesError(f"Failed to read {path}: {e}") from e

    entries = data.get(section, [])
    if not isinstance(entries, list):
        raise RulesValidationError(f"'{section}' in {path} must be an array of tables")

    rules: list[ResourceRule] = []
    for index, entry in enumerate(entries):
        try:
            rules.append(ResourceRule.model_validate(entry))
        except ValidationError as e:
            raise RulesValidationError(f"Invalid {section} rule #{index} in {path}: {e}") from e
    return rules


def save_rules(rules: list[ResourceRule], path: Path, section: str) -> Path:
    """Save the rules of one kind to a TOML document.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.
    Fields holding their default value are omitted, so a loaded document
    is written back unchanged.

    Args:
        rules: Rules to save.
        path: Destination path.
        section: Name of the array of tables.

    Returns:
        Path where the rules were saved.

    Raises:
        RulesError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, Any] = {section: [_rule_to_dict(rule) for rule in rules]}

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise RulesError(f"Failed to write {path}: {e}") from e

    return path


def _rule_to_dict(rule: ResourceRule) -> dict[str, Any]:
    """Convert a ResourceRule to a dictionary for TOML serialization.

    Args:
        rule: The rule to convert.

    Returns:
        Dictionary with only the non-empty fields.
    """
    data = rule.model_dump(exclude_defaults=True)
    topology = {k: v for k, v in data.pop("topology", {}).items() if v not in ("", [], None)}
    if topology:
        data["topology"] = topology
    return data
