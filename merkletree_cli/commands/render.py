"""
CLI Render Command

Usage:
    felt-merkle render tree.json
"""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path

from merkletree_cli.io import load_tree


EXIT_SUCCESS = 0


def render_cmd(args: Namespace) -> int:
    """Print the indented tree dump."""
    tree = load_tree(Path(args.tree_path), args.cli_config)
    print(tree.render())
    return EXIT_SUCCESS
