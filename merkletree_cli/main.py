"""
felt-merkle CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m merkletree_cli build <values.json> --encoding T [T ...] [--out PATH] [--json]
    python -m merkletree_cli proof <tree.json> --index N [--json]
    python -m merkletree_cli multiproof <tree.json> --index N [N ...] [--json]
    python -m merkletree_cli validate <tree.json> [--json]
    python -m merkletree_cli verify --root R --encoding T [T ...] (--value JSON --proof H ... | --multiproof FILE)
    python -m merkletree_cli render <tree.json>
    python -m merkletree_cli config --show

Environment Variables:
    MERKLE_HASH                 Hasher name: standard or poseidon (default: standard)
    MERKLE_VALIDATE_ON_LOAD     Validate dumps when loading (default: true)
    MERKLE_LOG_LEVEL            Log level (default: INFO)
    MERKLE_LOG_FILE             Optional log file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from core.config import load_config
from core.schemas.errors import MerkleTreeException
from core.schemas.serde import VALUE_TYPES

from merkletree_cli import __version__
from merkletree_cli.commands import build, proof, render, verify
from merkletree_cli.io import TreeIOError


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _add_output_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on errors",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="felt-merkle",
        description="Build Merkle trees over typed values, produce and verify proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: ./merkle.yaml or ~/.config/felt-merkle/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    value_types = sorted(VALUE_TYPES)

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build a tree from a JSON list of value tuples",
        description="Hash typed values into leaves, build the tree and optionally write its dump.",
    )
    build_parser.add_argument(
        "values_path",
        type=str,
        help="JSON file holding a list of value tuples",
    )
    build_parser.add_argument(
        "--encoding", "-e",
        nargs="+",
        required=True,
        choices=value_types,
        help="Value type of each tuple position",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output path for the tree dump",
    )
    _add_output_flags(build_parser)
    build_parser.set_defaults(func=build.build_cmd)

    # --- proof command ---
    proof_parser = subparsers.add_parser(
        "proof",
        help="Produce a single proof from a tree dump",
    )
    proof_parser.add_argument("tree_path", type=str, help="Path to tree dump")
    proof_parser.add_argument("--index", "-i", type=int, required=True, help="Value index to prove")
    _add_output_flags(proof_parser)
    proof_parser.set_defaults(func=proof.proof_cmd)

    # --- multiproof command ---
    multiproof_parser = subparsers.add_parser(
        "multiproof",
        help="Produce a multiproof from a tree dump",
    )
    multiproof_parser.add_argument("tree_path", type=str, help="Path to tree dump")
    multiproof_parser.add_argument(
        "--index", "-i",
        type=int,
        nargs="+",
        required=True,
        help="Value indices to prove",
    )
    _add_output_flags(multiproof_parser)
    multiproof_parser.set_defaults(func=proof.multiproof_cmd)

    # --- validate command ---
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a tree dump offline",
        description="Check every value against its leaf and every internal node against its children.",
    )
    validate_parser.add_argument("tree_path", type=str, help="Path to tree dump")
    _add_output_flags(validate_parser)
    validate_parser.set_defaults(func=verify.validate_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Check a proof against a trusted root",
    )
    verify_parser.add_argument("--root", "-r", type=str, required=True, help="Trusted root (0x hex)")
    verify_parser.add_argument(
        "--encoding", "-e",
        nargs="+",
        required=True,
        choices=value_types,
        help="Value type of each tuple position",
    )
    source = verify_parser.add_mutually_exclusive_group()
    source.add_argument("--value", type=str, default=None, help="Value tuple as JSON, e.g. '[1, 2]'")
    source.add_argument("--multiproof", type=str, default=None, help="JSON file with leaves, proof, proofFlags")
    verify_parser.add_argument("--proof", "-p", nargs="*", default=None, help="Proof hashes (0x hex)")
    _add_output_flags(verify_parser)
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- render command ---
    render_parser = subparsers.add_parser(
        "render",
        help="Print a tree dump as an indented tree",
    )
    render_parser.add_argument("tree_path", type=str, help="Path to tree dump")
    render_parser.add_argument("--debug", action="store_true", default=False, help="Print tracebacks on errors")
    render_parser.set_defaults(func=render.render_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Show the effective configuration",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: felt-merkle config --show")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except MerkleTreeException as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        if getattr(args, "json", False):
            print(e.to_error_model().model_dump_json(indent=2))
        else:
            print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except TreeIOError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
