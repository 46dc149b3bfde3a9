"""
Settings for reference rendering and macro execution.

Settings can be loaded from a YAML file with a top-level ``references`` key:

    ```yaml
    references:
      footnote_id_prefix: "note_"
      footnote_reference_id_prefix: "noteref_"
      list_class: "footnotes"
    ```

When no path is given, the ``REFNOTES_CONFIG`` environment variable is
consulted. Without either, the defaults below are used.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .constants import (
    BACK_LINK_CLASS,
    CONFIG_PATH_ENV,
    CONFIG_SECTION,
    DEFAULT_MAX_EXECUTIONS,
    DEFAULT_PRIORITY,
    ENSURER_PRIORITY,
    FOOTNOTE_ID_PREFIX,
    FOOTNOTE_REFERENCE_ID_PREFIX,
    FORWARD_LINK_CLASS,
    LIST_CLASS,
    LIST_ITEM_CLASS,
)
from .errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferencesSettings:
    """Rendering and execution settings.

    Attributes:
        footnote_id_prefix: Prefix of rendered note IDs (forward link targets)
        footnote_reference_id_prefix: Prefix of forward link IDs (back link targets)
        forward_link_class: CSS class of in-text forward links
        back_link_class: CSS class of back links inside list items
        list_item_class: CSS class of each rendered list item
        list_class: CSS class of the rendered numbered list
        default_priority: Priority of macros that do not declare one
        ensurer_priority: Priority of the collection point ensurer
        max_executions: Upper bound on executions of macros added during a
            transformation; markers present beforehand always run
    """

    footnote_id_prefix: str = FOOTNOTE_ID_PREFIX
    footnote_reference_id_prefix: str = FOOTNOTE_REFERENCE_ID_PREFIX
    forward_link_class: str = FORWARD_LINK_CLASS
    back_link_class: str = BACK_LINK_CLASS
    list_item_class: str = LIST_ITEM_CLASS
    list_class: str = LIST_CLASS
    default_priority: int = DEFAULT_PRIORITY
    ensurer_priority: int = ENSURER_PRIORITY
    max_executions: int = DEFAULT_MAX_EXECUTIONS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReferencesSettings:
        """Build settings from a mapping, rejecting unknown keys.

        Raises:
            ValidationError: If a key is unknown or a value has the wrong type
        """
        known = {f.name: f for f in fields(cls)}
        errors = []
        values: dict[str, Any] = {}

        for key, value in data.items():
            if key not in known:
                errors.append(f"Unknown setting '{key}'")
                continue
            expected = type(getattr(cls, key))
            if not isinstance(value, expected) or isinstance(value, bool):
                errors.append(
                    f"Setting '{key}' must be {expected.__name__}, got {type(value).__name__}"
                )
                continue
            values[key] = value

        if errors:
            raise ValidationError("Invalid references settings", errors=errors)

        return cls(**values)


def load_settings(path: str | Path | None = None) -> ReferencesSettings:
    """Load settings from a YAML file.

    Search order:
    1. The explicit ``path`` argument
    2. The REFNOTES_CONFIG environment variable
    3. Built-in defaults

    Args:
        path: Path to a YAML settings file (optional)

    Returns:
        ReferencesSettings instance

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ValidationError: If the file cannot be parsed or has invalid content
    """
    if path is None:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if not env_path:
            return ReferencesSettings()
        logger.debug("Using settings from %s (from env)", env_path)
        path = env_path

    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Failed to parse settings file: {e}") from e

    if data is None:
        return ReferencesSettings()

    if not isinstance(data, dict):
        raise ValidationError("Settings file must contain a dictionary/object")

    section = data.get(CONFIG_SECTION, {})
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ValidationError(f"'{CONFIG_SECTION}' must be a dictionary/object")

    settings = ReferencesSettings.from_dict(section)
    logger.debug("Loaded settings from %s", file_path)
    return settings
