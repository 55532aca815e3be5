"""
Entry point for running vanta-tables as a module.

Allows running the CLI with:
    python -m vanta_tables tables
"""

import sys

from vanta_tables.cli import main

if __name__ == "__main__":
    sys.exit(main())
