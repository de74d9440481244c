"""
Entry point for python -m minver_build

Allows running the package as a module:
    python -m minver_build
"""

import sys

from .cli import main

if __name__ == '__main__':
    sys.exit(main())
