"""Tree documents (YAML/TOML/JSON) and YAML settings."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomlkit
import yaml
from tomlkit.exceptions import ParseError as TomlParseError

from apg_tree.models import TreeNode
from apg_tree.typeahead import DEFAULT_TIMEOUT_MS

logger = logging.getLogger(__name__)

CONFIG_DIR = ".apg-tree"
SETTINGS_FILE = "settings.yaml"
TREE_SUFFIXES = (".yaml", ".yml", ".toml", ".json")


class TreeDataError(ValueError):
    """A tree document does not describe a valid list of nodes."""


# ── Tree documents ──────────────────────────────────────────────

def _node_from_data(data: Any, path: str) -> TreeNode:
    if not isinstance(data, dict):
        raise TreeDataError(f"{path}: expected a mapping, got {type(data).__name__}")
    node_id = data.get("id")
    label = data.get("label")
    if node_id is None or str(node_id) == "":
        raise TreeDataError(f"{path}: missing 'id'")
    if label is None:
        label = node_id
    children_data = data.get("children", [])
    if children_data is None:
        children_data = []
    if not isinstance(children_data, list):
        raise TreeDataError(f"{path}.children: expected a list")
    children = tuple(
        _node_from_data(child, f"{path}.children[{i}]") for i, child in enumerate(children_data)
    )
    return TreeNode(
        id=str(node_id),
        label=str(label),
        children=children,
        disabled=bool(data.get("disabled", False)),
    )


def nodes_from_data(data: Any) -> list[TreeNode]:
    """Build TreeNodes from parsed data: a list, or a mapping with a ``nodes`` list."""
    if isinstance(data, dict):
        data = data.get("nodes")
    if not isinstance(data, list):
        raise TreeDataError("tree document must be a list of nodes or contain a 'nodes' list")
    nodes = [_node_from_data(item, f"nodes[{i}]") for i, item in enumerate(data)]

    seen: set[str] = set()
    for root in nodes:
        for node in root.all_nodes():
            if node.id in seen:
                logger.warning("duplicate node id %r; navigation is undefined", node.id)
            seen.add(node.id)
    return nodes


def _node_to_data(node: TreeNode) -> dict[str, Any]:
    data: dict[str, Any] = {"id": node.id, "label": node.label}
    if node.disabled:
        data["disabled"] = True
    if node.children:
        data["children"] = [_node_to_data(c) for c in node.children]
    return data


def load_tree(path: Path) -> list[TreeNode]:
    """Load a tree document. The format is chosen by file suffix."""
    suffix = path.suffix.lower()
    if suffix not in TREE_SUFFIXES:
        raise TreeDataError(f"unsupported tree file type: {path.name}")
    content = path.read_text(encoding="utf-8")
    try:
        if suffix == ".toml":
            data = tomlkit.parse(content).unwrap()
        elif suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError, TomlParseError) as e:
        raise TreeDataError(f"{path.name}: {e}") from e
    return nodes_from_data(data)


def dump_tree(nodes: list[TreeNode], path: Path) -> None:
    """Write *nodes* to *path* in the format implied by its suffix."""
    suffix = path.suffix.lower()
    data = [_node_to_data(n) for n in nodes]
    if suffix == ".toml":
        doc = tomlkit.document()
        nodes_array = tomlkit.aot()
        for item in data:
            nodes_array.append(tomlkit.item(item))
        doc.add("nodes", nodes_array)
        text = tomlkit.dumps(doc)
    elif suffix == ".json":
        text = json.dumps({"nodes": data}, indent=2, ensure_ascii=False) + "\n"
    elif suffix in (".yaml", ".yml"):
        text = yaml.safe_dump({"nodes": data}, sort_keys=False, allow_unicode=True)
    else:
        raise TreeDataError(f"unsupported tree file type: {path.name}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def initial_expanded_ids(nodes: list[TreeNode], depth: int) -> list[str]:
    """Ids of enabled parents whose depth is below *depth*."""
    result: list[str] = []

    def _walk(node: TreeNode, level: int) -> None:
        if level >= depth:
            return
        if node.children and not node.disabled:
            result.append(node.id)
        for child in node.children:
            _walk(child, level + 1)

    for root in nodes:
        _walk(root, 0)
    return result


# ── Settings (YAML) ─────────────────────────────────────────────

@dataclass
class TreeSettings:
    """Behaviour options for a tree view."""

    multiselectable: bool = False
    type_ahead_timeout: int = DEFAULT_TIMEOUT_MS  # ms
    expand_depth: int = 0
    show_guides: bool = True


def _load_yaml(path: Path) -> dict:
    """Load a YAML file and return a dict (empty dict on error)."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("could not read settings %s: %s", path, e)
        return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (returns a new dict)."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def load_settings(project_dir: Path | None = None) -> dict[str, Any]:
    """Load settings from default_settings.yaml + optional project override.

    1. Load ``default_settings.yaml`` bundled with the package.
    2. If *project_dir* is given and ``{project_dir}/.apg-tree/settings.yaml``
       exists, deep-merge it on top of the defaults.
    3. Return the merged dict.
    """
    default_path = Path(__file__).parent / "default_settings.yaml"
    data = _load_yaml(default_path)

    if project_dir is not None:
        override_path = project_dir / CONFIG_DIR / SETTINGS_FILE
        if override_path.is_file():
            override = _load_yaml(override_path)
            if override:
                data = _deep_merge(data, override)

    return data


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def get_tree_settings(settings: dict[str, Any]) -> TreeSettings:
    """Read the ``tree`` section of merged settings into TreeSettings."""
    section = settings.get("tree", {})
    if not isinstance(section, dict):
        section = {}
    return TreeSettings(
        multiselectable=bool(section.get("multiselectable", False)),
        type_ahead_timeout=max(0, _as_int(section.get("type_ahead_timeout"), DEFAULT_TIMEOUT_MS)),
        expand_depth=max(0, _as_int(section.get("expand_depth"), 0)),
        show_guides=bool(section.get("show_guides", True)),
    )
