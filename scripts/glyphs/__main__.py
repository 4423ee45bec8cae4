"""Module entry point for running scripts.glyphs as a package.

Allows: python -m scripts.glyphs <command>
"""

from scripts.glyphs.cli import main
import sys

if __name__ == '__main__':
    sys.exit(main())
