#!/usr/bin/env python3
"""Company research runner (same as the ``company-research`` command)."""

import sys
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from company_research.cli import main

if __name__ == "__main__":
    main()
