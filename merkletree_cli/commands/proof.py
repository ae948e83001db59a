"""
CLI Proof Commands

Produce single and multi-value proofs from a tree dump.

Usage:
    felt-merkle proof tree.json --index 0 [--json]
    felt-merkle multiproof tree.json --index 0 2 5 [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from pathlib import Path

from merkletree_cli.io import load_tree


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0


def proof_cmd(args: Namespace) -> int:
    """Print the single proof for one value index."""
    tree = load_tree(Path(args.tree_path), args.cli_config)
    proof = tree.get_proof(args.index)
    logger.info(f"Proof for value {args.index} has {len(proof)} siblings")

    if args.json:
        print(json.dumps({
            "root": tree.root,
            "value": tree.at(args.index),
            "proof": proof,
        }, indent=2))
    else:
        print(f"root: {tree.root}")
        print(f"value: {json.dumps(tree.at(args.index))}")
        print(f"proof ({len(proof)}):")
        for node in proof:
            print(f"  {node}")

    return EXIT_SUCCESS


def multiproof_cmd(args: Namespace) -> int:
    """Print the multiproof for several value indices."""
    tree = load_tree(Path(args.tree_path), args.cli_config)
    multiproof = tree.get_multi_proof(args.index)
    logger.info(
        f"Multiproof for {len(multiproof.leaves)} values has "
        f"{len(multiproof.proof)} proof items"
    )

    data = {
        "root": tree.root,
        "leaves": multiproof.leaves,
        "proof": multiproof.proof,
        "proofFlags": multiproof.proof_flags,
    }
    if args.json:
        print(json.dumps(data, indent=2))
    else:
        print(f"root: {tree.root}")
        print(f"leaves ({len(multiproof.leaves)}):")
        for leaf in multiproof.leaves:
            print(f"  {json.dumps(leaf)}")
        print(f"proof ({len(multiproof.proof)}):")
        for node in multiproof.proof:
            print(f"  {node}")
        flags = " ".join("1" if flag else "0" for flag in multiproof.proof_flags)
        print(f"proof_flags: {flags}")

    return EXIT_SUCCESS
