#!/usr/bin/env python3
"""
Generate a random hex map and print its summary.

Usage:
    python generate_map.py --width 36 --seed 12345 --output map.json
"""

import sys

from py_hexmap.cli import main

if __name__ == "__main__":
    sys.exit(main())
