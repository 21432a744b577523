"""
Module execution entry point.

Allows running with: python -m hashpath_cli
"""

import sys
from hashpath_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
