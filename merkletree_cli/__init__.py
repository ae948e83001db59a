"""
felt-merkle CLI

Command-line interface for building Merkle trees and producing/checking proofs.

Usage:
    python -m merkletree_cli build values.json --encoding ContractAddress u256 --out tree.json
    python -m merkletree_cli proof tree.json --index 0
    python -m merkletree_cli multiproof tree.json --index 0 2
    python -m merkletree_cli validate tree.json
    python -m merkletree_cli render tree.json
"""

__version__ = "0.1.0"
