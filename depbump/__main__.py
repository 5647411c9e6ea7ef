"""
Executable module for depbump.

Running:
    python -m depbump

is equivalent to:
    depbump
"""

from __future__ import annotations

import sys

from depbump.cli import main

if __name__ == "__main__":
    sys.exit(main())
