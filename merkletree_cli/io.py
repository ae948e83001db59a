"""
CLI File IO

Read value lists and tree dumps from disk, write dumps back.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.config import RuntimeConfig
from core.crypto.hashes import get_hasher
from core.merkle import StandardMerkleTree


class TreeIOError(Exception):
    """Error reading or writing CLI input files."""
    pass


def load_json_file(path: Path) -> Any:
    """Load and parse a JSON file."""
    if not path.exists():
        raise TreeIOError(f"File not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise TreeIOError(f"Invalid JSON in {path}: {e}") from e


def load_values_file(path: Path) -> list[list[Any]]:
    """Load a JSON list of value tuples."""
    data = load_json_file(path)
    if not isinstance(data, list) or not all(isinstance(v, list) for v in data):
        raise TreeIOError(f"Expected a JSON list of value tuples in {path}")
    return data


def load_tree(
    path: Path,
    config: RuntimeConfig,
    validate: bool | None = None,
) -> StandardMerkleTree:
    """
    Load a tree dump using the configured hasher.

    validate defaults to config.merkle.validate_on_load.
    """
    data = load_json_file(path)
    if not isinstance(data, dict):
        raise TreeIOError(f"Expected a JSON object in {path}")
    if validate is None:
        validate = config.merkle.validate_on_load
    return StandardMerkleTree.load(
        data,
        hasher=get_hasher(config.merkle.hash),
        validate=validate,
    )


def save_tree(tree: StandardMerkleTree, path: Path) -> Path:
    """Write a tree dump as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tree.dump().to_json(), encoding="utf-8")
    return path
