"""
Module execution entry point.

Allows running with: python -m merkletree_cli
"""

import sys
from merkletree_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
