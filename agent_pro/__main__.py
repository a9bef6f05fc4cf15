"""Entry point for running the console host directly.

Usage: python -m agent_pro
"""

import sys

from agent_pro.cli import main

if __name__ == "__main__":
    sys.exit(main())
