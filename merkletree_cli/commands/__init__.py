"""
CLI command modules.
"""

from merkletree_cli.commands import build, proof, render, verify

__all__ = ["build", "proof", "render", "verify"]
