#!/usr/bin/env python3
"""Personal finance report generator.

This is the main entry point script for the finance reporter.
It wraps the package CLI for convenient execution.

Usage:
    python generate_report.py --ledger ledger.yaml --filter monthly --pdf report.pdf

For full documentation and options:
    python generate_report.py --help
"""

import sys
from pathlib import Path

# Add src to path for development installs
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from finance_reporter.cli import main

if __name__ == "__main__":
    sys.exit(main())
