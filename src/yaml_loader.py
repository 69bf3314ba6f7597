"""Load and merge SIGIL list data from YAML documents."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


logger = logging.getLogger(__name__)

TEMPLATES_KEY = "templates"


class SigilDataError(Exception):
    """Raised when list data cannot be read or parsed."""
    pass


@dataclass
class LoadedData:
    """Merged tables plus the named templates collected from all documents."""
    lists: dict[str, Any] = field(default_factory=dict)
    templates: dict[str, list[str]] = field(default_factory=dict)


def parse_yaml_content(content: str, source: str = "<string>") -> dict[str, Any]:
    """
    Parse one YAML document.

    Args:
        content: YAML text
        source: Name used in error messages

    Returns:
        Top-level mapping ({} for an empty document)

    Raises:
        SigilDataError: If the YAML is invalid or its top level is not a mapping
    """
    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SigilDataError(f"Failed to parse YAML from {source}: {e}")

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise SigilDataError(f"Top level of {source} must be a mapping, got {type(parsed).__name__}")
    return parsed


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Read and parse a YAML file.

    Raises:
        SigilDataError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SigilDataError(f'Failed to load YAML file "{path}": {e}')
    return parse_yaml_content(content, source=f'"{path}"')


def _merge_value(existing: Any, value: Any) -> Any:
    if isinstance(value, list):
        if isinstance(existing, list):
            return existing + value
        return list(value)
    if isinstance(value, dict):
        merged = dict(existing) if isinstance(existing, dict) else {}
        for key, item in value.items():
            merged[key] = _merge_value(merged.get(key), item)
        return merged
    return value


def merge_lists(documents: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Merge documents into one table store.

    Same-named lists are concatenated in document order, same-named mappings
    are merged recursively, and scalars are last-wins. The reserved
    "templates" key is skipped (see extract_templates).

    Example:
        [{"weapons": ["sword"], "armor": {"light": ["leather"]}},
         {"weapons": ["axe"], "armor": {"light": ["silk"], "heavy": ["plate"]}}]
        -> {"weapons": ["sword", "axe"],
            "armor": {"light": ["leather", "silk"], "heavy": ["plate"]}}
    """
    merged: dict[str, Any] = {}

    for document in documents:
        for key, value in document.items():
            if key == TEMPLATES_KEY:
                continue
            merged[key] = _merge_value(merged.get(key), value)

    return merged


def extract_templates(documents: list[dict[str, Any]]) -> dict[str, list[str]]:
    """Collect the "templates" mappings of all documents; later names override."""
    templates: dict[str, list[str]] = {}

    for document in documents:
        section = document.get(TEMPLATES_KEY)
        if not isinstance(section, dict):
            continue
        for name, entries in section.items():
            if isinstance(entries, list):
                templates[str(name)] = [str(entry) for entry in entries if entry is not None]
            elif entries is not None:
                templates[str(name)] = [str(entries)]

    return templates


def create_sigil_data(contents: list[str]) -> LoadedData:
    """Build LoadedData from YAML strings (no file system access)."""
    documents = [
        parse_yaml_content(content, source=f"document {i + 1}")
        for i, content in enumerate(contents)
    ]
    return LoadedData(lists=merge_lists(documents), templates=extract_templates(documents))


def load_sigil_data(paths: list[Path]) -> LoadedData:
    """
    Load YAML files and merge them.

    Args:
        paths: YAML files, merged in the given order

    Returns:
        Merged tables and templates

    Raises:
        SigilDataError: If any file cannot be loaded
    """
    documents = []
    for path in paths:
        documents.append(load_yaml_file(path))
        logger.debug(f"Loaded list data from {path}")

    return LoadedData(lists=merge_lists(documents), templates=extract_templates(documents))
