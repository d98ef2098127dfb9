#!/usr/bin/env python3
"""
K-means CLI launcher for running from a source checkout.

Usage:
    python scripts/kmeans.py run data/kmeans_input.in -k 3
    python scripts/kmeans.py info data/kmeans_input.in
"""

import sys
from pathlib import Path

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kmeans.cli import main


if __name__ == "__main__":
    sys.exit(main())
