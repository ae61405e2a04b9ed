"""
Allow the mintbot package to be executed as a module.

This enables running the console loop with:
    python -m mintbot
"""

import asyncio
import sys

from mintbot.main import main

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
