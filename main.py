#!/usr/bin/env python3
"""
domorest - Main Entry Point

Runs the domorest command line from a source checkout without installing.

Usage:
    python main.py datasets list                   # First 50 DataSets by name
    python main.py datasets list --limit 5         # First 5
    python main.py datasets export <id> --headers  # CSV to stdout
    python main.py --log-level DEBUG datasets info <id>
"""

import sys
from pathlib import Path

# Add the project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from domorest.cli import main

if __name__ == "__main__":
    sys.exit(main())
