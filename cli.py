#!/usr/bin/env python3
"""
Notely CLI.

Entry point when running from a checkout without installing the package.

Usage:
    python cli.py --help
    python cli.py auth login
    python cli.py notes list
    python cli.py shell
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from notely.cli.main import app  # noqa: E402

if __name__ == "__main__":
    app()
