"""
CLI Build Command

Build a standard tree from a JSON list of value tuples.

Usage:
    felt-merkle build values.json --encoding ContractAddress u256 [--out tree.json] [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from core.crypto.hashes import get_hasher
from core.merkle import StandardMerkleTree

from merkletree_cli.io import load_values_file, save_tree


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0


@dataclass
class BuildSummary:
    """Summary of a tree build for CLI output."""
    root: str = ""
    values: int = 0
    leaf_encoding: list[str] | None = None
    output_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if d["output_path"] is None:
            del d["output_path"]
        return d


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.cli_config
    values = load_values_file(Path(args.values_path))

    tree = StandardMerkleTree.of(
        values,
        args.encoding,
        hasher=get_hasher(config.merkle.hash),
    )
    logger.info(f"Built tree over {len(tree)} values")

    summary = BuildSummary(
        root=tree.root,
        values=len(tree),
        leaf_encoding=tree.leaf_encoding,
    )
    if args.out:
        summary.output_path = str(save_tree(tree, Path(args.out)))

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print(f"root: {summary.root}")
        print(f"values: {summary.values}")
        print(f"leaf_encoding: {' '.join(summary.leaf_encoding or [])}")
        if summary.output_path:
            print(f"written: {summary.output_path}")

    return EXIT_SUCCESS
