"""
CLI Validate / Verify Commands

Validate a tree dump offline, or check a proof against a trusted root
without the tree.

Usage:
    felt-merkle validate tree.json [--json]
    felt-merkle verify --root 0x.. --encoding u8 u256 --value '[1, 2]' --proof 0x.. 0x..
    felt-merkle verify --root 0x.. --encoding u8 u256 --multiproof multiproof.json
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from core.crypto.hashes import get_hasher
from core.merkle import MultiProof, StandardMerkleTree
from core.schemas.errors import InvalidArgumentException

from merkletree_cli.io import load_json_file, load_tree


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class ValidateSummary:
    """Summary of dump validation for CLI output."""
    tree_path: str = ""
    root: str = ""
    values: int = 0
    valid: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["errors"]:
            del d["errors"]
        return d


def validate_cmd(args: Namespace) -> int:
    """
    Execute the validate command.

    Returns:
        EXIT_SUCCESS when the dump validates, EXIT_VERIFICATION_FAILED otherwise
    """
    tree_path = Path(args.tree_path)
    tree = load_tree(tree_path, args.cli_config, validate=False)

    summary = ValidateSummary(
        tree_path=str(tree_path),
        root=tree.root if tree.tree else "",
        values=len(tree),
    )
    try:
        tree.validate()
        summary.valid = True
    except InvalidArgumentException as e:
        summary.errors.append(e.message)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print(f"tree: {summary.tree_path}")
        print(f"root: {summary.root}")
        print(f"values: {summary.values}")
        print(f"valid: {str(summary.valid).lower()}")
        for err in summary.errors:
            print(f"  ✗ {err}")

    if summary.valid:
        logger.info("Validation passed")
        return EXIT_SUCCESS
    logger.warning("Validation failed")
    return EXIT_VERIFICATION_FAILED


def _parse_value(raw: str) -> list[Any]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidArgumentException(f"Value must be a JSON list: {e}") from e
    if not isinstance(value, list):
        raise InvalidArgumentException("Value must be a JSON list")
    return value


def _load_multiproof(path: Path) -> MultiProof[list[Any]]:
    data = load_json_file(path)
    if not isinstance(data, dict):
        raise InvalidArgumentException(f"Expected a JSON object in {path}")
    return MultiProof(
        leaves=list(data.get("leaves", [])),
        proof=list(data.get("proof", [])),
        proof_flags=[bool(flag) for flag in data.get("proofFlags", [])],
    )


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command against a trusted root.

    Returns:
        EXIT_SUCCESS when the proof reproduces the root,
        EXIT_VERIFICATION_FAILED when it does not
    """
    hasher = get_hasher(args.cli_config.merkle.hash)

    if args.multiproof:
        multiproof = _load_multiproof(Path(args.multiproof))
        ok = StandardMerkleTree.verify_leaves_in_root(
            args.root, args.encoding, multiproof, hasher=hasher,
        )
    elif args.value is not None:
        ok = StandardMerkleTree.verify_leaf_in_root(
            args.root, args.encoding, _parse_value(args.value), args.proof or [], hasher=hasher,
        )
    else:
        print("Error: one of --value or --multiproof is required", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.json:
        print(json.dumps({"root": args.root, "verified": ok}, indent=2))
    else:
        print(f"verified: {str(ok).lower()}")

    if ok:
        logger.info("Proof verified")
        return EXIT_SUCCESS
    logger.warning("Proof did not reproduce the root")
    return EXIT_VERIFICATION_FAILED
